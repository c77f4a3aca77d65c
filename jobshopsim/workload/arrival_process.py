"""Part arrival process modeling."""

import math
from typing import List, Optional

import numpy as np

from .distributions import Distribution, ExponentialDistribution
from ..utils.logger import setup_logger


class ArrivalProcess:
    """Models part arrival patterns from an inter-arrival distribution.

    Any ``Distribution`` can drive the process:
    - Exponential (Poisson arrivals)
    - Constant (evenly spaced)
    - Gamma or Lognormal (bursty)
    """

    def __init__(self, distribution: Optional[Distribution] = None, min_interval: float = 0.1):
        """Initialize arrival process.

        Args:
            distribution: Inter-arrival time distribution, Exponential(0.5) if omitted
            min_interval: Lower clamp on each inter-arrival sample
        """
        self.distribution = distribution or ExponentialDistribution(0.5)
        self.min_interval = min_interval
        self.logger = setup_logger(self.__class__.__name__)

    @property
    def rate(self) -> float:
        """Mean arrivals per unit time."""
        mean = self.distribution.mean
        return 1.0 / mean if mean > 0 else math.inf

    def next_interval(self, rng: np.random.Generator) -> float:
        return max(self.min_interval, float(self.distribution.sample(rng)))

    def generate_arrivals(self, rng: np.random.Generator, start_time: float = 0.0,
                          end_time: Optional[float] = None,
                          max_arrivals: Optional[int] = None) -> List[float]:
        """Generate arrival times.

        At least one of ``end_time`` and ``max_arrivals`` must bound the
        sequence.

        Args:
            rng: Random generator to sample from
            start_time: Start time
            end_time: Arrivals at or after this time are dropped
            max_arrivals: Maximum number of arrivals

        Returns:
            Increasing list of arrival times
        """
        if end_time is None and max_arrivals is None:
            raise ValueError("generate_arrivals needs end_time or max_arrivals")

        arrivals = []
        current_time = start_time

        while max_arrivals is None or len(arrivals) < max_arrivals:
            current_time += self.next_interval(rng)
            if end_time is not None and current_time >= end_time:
                break
            arrivals.append(current_time)

        self.logger.debug(f"Generated {len(arrivals)} arrivals ({self.distribution.describe()})")
        return arrivals
