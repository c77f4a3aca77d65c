"""Metrics collection and aggregation."""

from collections import defaultdict
from typing import Dict, Iterable, List, Mapping

import numpy as np

from .statistics import MachineStatistics, SimulationStatistics
from ..models.buffer import Buffer
from ..models.machine import Machine, MachineState
from ..utils.logger import setup_logger


class MetricsCollector:
    """Collect counters and time accumulators during a run.

    The collector only accumulates; ``snapshot`` derives statistics on
    demand and never mutates state.
    """

    def __init__(self):
        """Initialize metrics collector."""
        self.logger = setup_logger(self.__class__.__name__)
        self.reset()

    def reset(self) -> None:
        """Zero all counters and accumulators."""
        self.parts_arrived = 0
        self.parts_rejected = 0
        self.parts_completed = 0
        self.flow_times: List[float] = []

        self.busy_time: Dict[int, float] = defaultdict(float)
        self.blocked_time: Dict[int, float] = defaultdict(float)

        # Time-weighted buffer occupancy: area under the level curve
        self._buffer_area: Dict[int, float] = defaultdict(float)
        self._buffer_level: Dict[int, int] = defaultdict(int)
        self._buffer_changed_at: Dict[int, float] = defaultdict(float)

    def record_arrival(self) -> None:
        self.parts_arrived += 1

    def record_rejection(self) -> None:
        self.parts_rejected += 1

    def record_completion(self, flow_time: float) -> None:
        """Record a part leaving the line.

        Args:
            flow_time: Completion time minus arrival time
        """
        self.parts_completed += 1
        self.flow_times.append(flow_time)

    def record_busy_time(self, machine_id: int, start_time: float, end_time: float) -> None:
        self.busy_time[machine_id] += max(0.0, end_time - start_time)

    def record_blocked_time(self, machine_id: int, start_time: float, end_time: float) -> None:
        self.blocked_time[machine_id] += max(0.0, end_time - start_time)

    def record_buffer_level(self, machine_id: int, current_time: float, level: int) -> None:
        """Record a buffer occupancy change.

        Args:
            machine_id: Machine fed by the buffer
            current_time: Time of the change
            level: Occupancy after the change
        """
        elapsed = current_time - self._buffer_changed_at[machine_id]
        self._buffer_area[machine_id] += self._buffer_level[machine_id] * max(0.0, elapsed)
        self._buffer_level[machine_id] = level
        self._buffer_changed_at[machine_id] = current_time

    @property
    def current_wip(self) -> int:
        return self.parts_arrived - self.parts_rejected - self.parts_completed

    def snapshot(self, current_time: float, machines: Iterable[Machine],
                 buffers: Mapping[int, Buffer], events_processed: int = 0) -> SimulationStatistics:
        """Compute a statistics snapshot.

        Args:
            current_time: Current simulation time
            machines: Machines in the line
            buffers: Input buffers keyed by machine id
            events_processed: Number of events executed so far

        Returns:
            Fresh SimulationStatistics
        """
        stats = SimulationStatistics(
            current_time=current_time,
            total_parts_arrived=self.parts_arrived,
            total_parts_rejected=self.parts_rejected,
            total_parts_completed=self.parts_completed,
            current_wip=self.current_wip,
            throughput=self.parts_completed / current_time if current_time > 0 else 0.0,
            events_processed=events_processed,
        )
        for name, value in self._compute_flow_time_metrics().items():
            setattr(stats, name, value)

        for machine in machines:
            stats.machine_stats[machine.machine_id] = self._machine_statistics(
                machine, buffers[machine.machine_id], current_time
            )

        return stats

    def _machine_statistics(self, machine: Machine, buffer: Buffer, current_time: float) -> MachineStatistics:
        busy = self.busy_time.get(machine.machine_id, 0.0)
        if machine.state == MachineState.BUSY:
            busy += max(0.0, min(current_time, machine.processing_end_time) - machine.processing_start_time)

        blocked = self.blocked_time.get(machine.machine_id, 0.0)
        if machine.state == MachineState.BLOCKED and machine.blocked_since is not None:
            blocked += max(0.0, current_time - machine.blocked_since)

        mid = machine.machine_id
        area = self._buffer_area.get(mid, 0.0)
        area += self._buffer_level.get(mid, 0) * max(0.0, current_time - self._buffer_changed_at.get(mid, 0.0))

        return MachineStatistics(
            machine_id=mid,
            machine_name=machine.name,
            state=machine.state.value,
            parts_processed=machine.parts_completed,
            total_busy_time=busy,
            total_blocked_time=blocked,
            utilization=busy / current_time if current_time > 0 else 0.0,
            current_buffer_count=len(buffer),
            buffer_capacity=buffer.capacity,
            average_buffer_count=area / current_time if current_time > 0 else 0.0,
        )

    def _compute_flow_time_metrics(self) -> Dict[str, float]:
        """Compute flow-time distribution statistics.

        Returns:
            Dictionary with mean, median, p95 and max flow time
        """
        if not self.flow_times:
            return {}

        values = np.asarray(self.flow_times, dtype=float)
        return {
            "average_flow_time": float(np.mean(values)),
            "median_flow_time": float(np.median(values)),
            "p95_flow_time": float(np.percentile(values, 95)),
            "max_flow_time": float(np.max(values)),
        }

    def get_summary(self, stats: SimulationStatistics) -> str:
        """Get human-readable summary of a snapshot.

        Args:
            stats: Snapshot to summarise

        Returns:
            Formatted string with key metrics
        """
        lines = [
            "=== Simulation Summary ===",
            f"Time: {stats.current_time:.2f}",
            f"Arrived: {stats.total_parts_arrived} (rejected {stats.total_parts_rejected})",
            f"Completed: {stats.total_parts_completed}, WIP: {stats.current_wip}",
            f"Throughput: {stats.throughput:.4f} parts/unit time",
            f"Average Flow Time: {stats.average_flow_time:.2f}",
        ]
        for ms in stats.machine_stats.values():
            lines.append(
                f"  {ms.machine_name}: util {ms.utilization:.1%}, blocked {ms.total_blocked_time:.2f}, "
                f"processed {ms.parts_processed}, buffer {ms.current_buffer_count}/{ms.buffer_capacity}"
            )
        return "\n".join(lines)
