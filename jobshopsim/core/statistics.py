"""Point-in-time statistics snapshots."""

from dataclasses import asdict, dataclass, field
from typing import Dict


@dataclass
class MachineStatistics:
    """Per-machine statistics.

    Attributes:
        machine_id: Machine identifier
        machine_name: Machine display name
        state: Machine state at snapshot time
        parts_processed: Operations handed off by this machine
        total_busy_time: Time spent processing, including the running operation
        total_blocked_time: Time spent holding a finished part
        utilization: Busy time as a fraction of elapsed time
        current_buffer_count: Parts waiting in the input buffer
        buffer_capacity: Input buffer capacity
        average_buffer_count: Time-weighted average buffer occupancy
    """
    machine_id: int
    machine_name: str
    state: str = "idle"
    parts_processed: int = 0
    total_busy_time: float = 0.0
    total_blocked_time: float = 0.0
    utilization: float = 0.0
    current_buffer_count: int = 0
    buffer_capacity: int = 0
    average_buffer_count: float = 0.0


@dataclass
class SimulationStatistics:
    """Line-level statistics at one simulation instant.

    ``total_parts_arrived - total_parts_rejected`` always equals
    ``total_parts_completed + current_wip``.
    """
    current_time: float = 0.0
    total_parts_arrived: int = 0
    total_parts_rejected: int = 0
    total_parts_completed: int = 0
    current_wip: int = 0
    throughput: float = 0.0
    average_flow_time: float = 0.0
    median_flow_time: float = 0.0
    p95_flow_time: float = 0.0
    max_flow_time: float = 0.0
    events_processed: int = 0
    machine_stats: Dict[int, MachineStatistics] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        """Plain-type dictionary, suitable for YAML or JSON dumps."""
        data = asdict(self)
        data["machine_stats"] = {int(k): v for k, v in data["machine_stats"].items()}
        return data
