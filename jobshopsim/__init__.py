"""JobShopSim: Discrete Event Simulator for Job-Shop Manufacturing Lines."""

from .core.simulator import Simulator
from .core.event_queue import Event, EventType, EventQueue
from .core.line_builder import build_simulator
from .core.metrics_collector import MetricsCollector
from .models.part import Part
from .models.machine import Machine, MachineState
from .models.buffer import Buffer
from .utils.logger import setup_logger

__version__ = "0.1.0"
__all__ = [
    "Simulator",
    "Event",
    "EventType",
    "EventQueue",
    "build_simulator",
    "MetricsCollector",
    "Part",
    "Machine",
    "MachineState",
    "Buffer",
    "setup_logger",
]
