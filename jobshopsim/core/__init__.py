"""Core simulation components."""

from .exceptions import (
    SimulationError,
    StateViolation,
    NotAvailableError,
    NoPartToCompleteError,
    SchedulingError,
    InvalidParameterError,
    ConfigurationError,
)
from .event_queue import Event, EventType, EventQueue
from .statistics import MachineStatistics, SimulationStatistics
from .metrics_collector import MetricsCollector
from .simulator import Simulator
from .line_builder import build_simulator

__all__ = [
    "Simulator",
    "Event",
    "EventType",
    "EventQueue",
    "MetricsCollector",
    "MachineStatistics",
    "SimulationStatistics",
    "build_simulator",
    "SimulationError",
    "StateViolation",
    "NotAvailableError",
    "NoPartToCompleteError",
    "SchedulingError",
    "InvalidParameterError",
    "ConfigurationError",
]
