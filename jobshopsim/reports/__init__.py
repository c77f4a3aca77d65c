"""Structured simulation records and exports."""

from .simulation_logger import SimulationLogger

__all__ = ["SimulationLogger"]
