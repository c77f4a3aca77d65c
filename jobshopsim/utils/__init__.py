"""Utility functions and helpers."""

from .logger import setup_logger
from .visualization import plot_results, plot_gantt, plot_machine_utilization

__all__ = ["setup_logger", "plot_results", "plot_gantt", "plot_machine_utilization"]
