"""Part generation for simulation workloads."""

from typing import Dict, List, Optional, Sequence

import numpy as np

from .arrival_process import ArrivalProcess
from .distributions import DistributionRegistry
from ..core.exceptions import ConfigurationError
from ..models.part import Part
from ..utils.logger import setup_logger


class PartGenerator:
    """Generate parts and their arrival times for a simulation run.

    Supports two routing strategies:
    - Standard route shared by every part
    - Random routes: a random permutation of a random non-empty subset
      of the machines
    """

    def __init__(self, config: Dict, machine_ids: Sequence[int], mean_processing_time: float = 4.0,
                 distribution_registry: Optional[DistributionRegistry] = None):
        """Initialize part generator.

        Args:
            config: Workload configuration
            machine_ids: Ids of the machines parts may visit
            mean_processing_time: Expected duration of a single operation
            distribution_registry: Registry used to build the arrival distribution
        """
        self.config = config
        self.logger = setup_logger(self.__class__.__name__)

        if not machine_ids:
            raise ConfigurationError("PartGenerator needs at least one machine")
        self.machine_ids = list(machine_ids)
        self.mean_processing_time = mean_processing_time

        self.num_parts = int(config.get('num_parts', 20))
        if self.num_parts < 0:
            raise ConfigurationError(f"num_parts cannot be negative, got {self.num_parts}")

        routing = config.get('routing', {})
        self.use_standard_route = routing.get('use_standard_route', True)
        self.standard_route = list(routing.get('standard_route') or self.machine_ids)
        unknown = [m for m in self.standard_route if m not in self.machine_ids]
        if unknown:
            raise ConfigurationError(f"Standard route references unknown machines {unknown}")

        self.priority_range = tuple(config.get('priority_range', (0, 0)))
        if len(self.priority_range) != 2 or self.priority_range[0] > self.priority_range[1]:
            raise ConfigurationError(f"priority_range must be [low, high], got {self.priority_range}")
        self.due_date_factor = float(config.get('due_date_factor', 3.0))

        registry = distribution_registry or DistributionRegistry()
        arrival_config = config.get('arrival', {'type': 'Exponential', 'params': [0.5]})
        self.arrival_process = ArrivalProcess(registry.from_config(arrival_config))

        self.part_counter = 0

    def generate(self, rng: np.random.Generator, start_time: float = 0.0,
                 end_time: Optional[float] = None) -> List[Part]:
        """Generate parts for the simulation period.

        Args:
            rng: Random generator for arrivals, routes and priorities
            start_time: Start time
            end_time: Parts arriving at or after this time are not generated

        Returns:
            Parts ordered by arrival time, with ``arrival_time`` set
        """
        arrival_times = self.arrival_process.generate_arrivals(
            rng, start_time, end_time, max_arrivals=self.num_parts
        )

        parts = [self._create_part(rng, arrival_time) for arrival_time in arrival_times]

        self.logger.info(f"Generated {len(parts)} parts "
                         f"({'standard' if self.use_standard_route else 'random'} routes)")
        return parts

    def _create_part(self, rng: np.random.Generator, arrival_time: float) -> Part:
        """Create a single part with sampled route and priority.

        Args:
            rng: Random generator
            arrival_time: Part arrival time

        Returns:
            Created part
        """
        self.part_counter += 1
        route = self.standard_route if self.use_standard_route else self._random_route(rng)

        low, high = self.priority_range
        priority = int(rng.integers(low, high + 1)) if high > low else int(low)

        return Part(
            part_id=f"P{self.part_counter:03d}",
            route=list(route),
            arrival_time=arrival_time,
            priority=priority,
            due_date=arrival_time + self.due_date_factor * len(route) * self.mean_processing_time,
            estimated_processing_time=self.mean_processing_time,
        )

    def _random_route(self, rng: np.random.Generator) -> List[int]:
        length = int(rng.integers(1, len(self.machine_ids) + 1))
        order = rng.permutation(len(self.machine_ids))[:length]
        return [self.machine_ids[i] for i in order]
