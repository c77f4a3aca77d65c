"""Part entity: an independent unit of work routed through machines."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..core.exceptions import ConfigurationError, StateViolation


class PartState(Enum):
    """Lifecycle states of a part."""
    IN_STORAGE = "in_storage"
    IN_BUFFER = "in_buffer"
    PROCESSING = "processing"
    COMPLETED = "completed"


@dataclass(eq=False)
class Part:
    """A part following an ordered route of machines.

    Attributes:
        part_id: Unique, stable identifier
        route: Ordered machine ids the part must visit
        arrival_time: Time the part entered the line
        priority: Urgency, higher is more urgent
        due_date: Time by which the part should be completed
        estimated_processing_time: Expected duration of a single operation,
            used by the due-date aware dispatching rules
        current_step: Index into ``route`` of the next operation
    """
    part_id: str
    route: List[int]
    arrival_time: float = 0.0
    priority: int = 0
    due_date: float = math.inf
    estimated_processing_time: Optional[float] = None

    # State tracking
    current_step: int = 0
    state: PartState = PartState.IN_STORAGE
    start_time: Optional[float] = None
    completion_time: Optional[float] = None
    buffer_entry_time: Optional[float] = None

    # Per-operation history: (machine_id, start, end)
    operation_history: List[tuple] = field(default_factory=list)

    def __post_init__(self):
        """Validate part after initialization."""
        if self.route is None or len(self.route) == 0:
            raise ConfigurationError(f"Part {self.part_id} needs a non-empty route")
        self.route = list(self.route)

    @property
    def route_length(self) -> int:
        return len(self.route)

    def current_machine_id(self) -> Optional[int]:
        """Machine id of the pending operation, or None when the route is done."""
        if self.current_step >= len(self.route):
            return None
        return self.route[self.current_step]

    def next_machine_id(self) -> Optional[int]:
        """Machine id of the operation after the current one, if any."""
        if self.current_step + 1 >= len(self.route):
            return None
        return self.route[self.current_step + 1]

    def has_more_operations(self) -> bool:
        return self.current_step < len(self.route)

    def advance(self) -> None:
        """Move to the next route step.

        Raises:
            StateViolation: If the route is already finished
        """
        if self.current_step >= len(self.route):
            raise StateViolation(f"Part {self.part_id} has no operation left to advance past")
        self.current_step += 1

    def remaining_operations(self) -> int:
        return len(self.route) - self.current_step

    def estimated_remaining_time(self) -> float:
        """Estimated processing time still needed to finish the route."""
        per_operation = self.estimated_processing_time or 0.0
        return self.remaining_operations() * per_operation

    def critical_ratio(self, current_time: float) -> float:
        """Time until due date divided by remaining work.

        Returns +inf when no work remains so the part is never preferred.
        """
        remaining = self.estimated_remaining_time()
        if remaining <= 0:
            return math.inf
        return (self.due_date - current_time) / remaining

    def slack(self, current_time: float) -> float:
        return self.due_date - current_time - self.estimated_remaining_time()

    def mark_completed(self, current_time: float) -> None:
        self.state = PartState.COMPLETED
        self.completion_time = current_time

    @property
    def flow_time(self) -> Optional[float]:
        if self.completion_time is None:
            return None
        return self.completion_time - self.arrival_time

    def __repr__(self) -> str:
        step = min(self.current_step + 1, len(self.route))
        return f"Part(id={self.part_id}, op={step}/{len(self.route)}, state={self.state.value})"
