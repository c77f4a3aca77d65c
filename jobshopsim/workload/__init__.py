"""Workload generation: distributions, arrivals and parts."""

from .distributions import Distribution, DistributionRegistry
from .arrival_process import ArrivalProcess
from .part_generator import PartGenerator

__all__ = ["Distribution", "DistributionRegistry", "ArrivalProcess", "PartGenerator"]
