"""Event queue implementation for discrete event simulation."""

import heapq
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class EventType(Enum):
    """Types of events in the simulation."""
    PART_ARRIVAL = "part_arrival"
    PROCESSING_COMPLETE = "processing_complete"
    RETRY_TRANSFER = "retry_transfer"


@dataclass(frozen=True)
class Event:
    """Event in the discrete event simulation.

    Events refer to parts and machines by id; the simulator owns the
    entities themselves.

    Attributes:
        time: Event timestamp
        event_type: Type of event
        part_id: Part the event concerns
        machine_id: Machine processing or holding the part
        target_machine_id: Destination machine of a retried transfer
    """
    time: float
    event_type: EventType
    part_id: str
    machine_id: Optional[int] = None
    target_machine_id: Optional[int] = None

    def __post_init__(self):
        """Validate event after initialization."""
        if self.time < 0:
            raise ValueError("Event time cannot be negative")
        if self.event_type != EventType.PART_ARRIVAL and self.machine_id is None:
            raise ValueError(f"{self.event_type.value} event requires a machine_id")
        if self.event_type == EventType.RETRY_TRANSFER and self.target_machine_id is None:
            raise ValueError("retry_transfer event requires a target_machine_id")

    @classmethod
    def arrival(cls, time: float, part_id: str) -> "Event":
        return cls(time=time, event_type=EventType.PART_ARRIVAL, part_id=part_id)

    @classmethod
    def processing_complete(cls, time: float, machine_id: int, part_id: str) -> "Event":
        return cls(time=time, event_type=EventType.PROCESSING_COMPLETE,
                   part_id=part_id, machine_id=machine_id)

    @classmethod
    def retry_transfer(cls, time: float, machine_id: int, part_id: str, target_machine_id: int) -> "Event":
        return cls(time=time, event_type=EventType.RETRY_TRANSFER, part_id=part_id,
                   machine_id=machine_id, target_machine_id=target_machine_id)

    def __str__(self) -> str:
        text = f"[t={self.time:.2f}] {self.event_type.value}: {self.part_id}"
        if self.machine_id is not None:
            text += f" @M{self.machine_id}"
        if self.target_machine_id is not None:
            text += f" -> M{self.target_machine_id}"
        return text


class EventQueue:
    """Priority queue for managing simulation events.

    Events are ordered by time. Events sharing a timestamp come out in the
    order they were pushed, so replay is deterministic.
    """

    def __init__(self):
        """Initialize empty event queue."""
        self._queue: List[Tuple[float, int, Event]] = []
        self._sequence = 0
        self._event_count = 0

    def push(self, event: Event) -> None:
        """Add event to the queue.

        Args:
            event: Event to add
        """
        heapq.heappush(self._queue, (event.time, self._sequence, event))
        self._sequence += 1
        self._event_count += 1

    schedule = push

    def pop(self) -> Event:
        """Remove and return the next event.

        Returns:
            Next event to process

        Raises:
            IndexError: If queue is empty
        """
        if self.is_empty():
            raise IndexError("Cannot pop from empty event queue")
        return heapq.heappop(self._queue)[2]

    def peek(self) -> Optional[Event]:
        """Return the next event without removing it.

        Returns:
            Next event, or None if queue is empty
        """
        return self._queue[0][2] if self._queue else None

    def is_empty(self) -> bool:
        return len(self._queue) == 0

    def has_pending(self) -> bool:
        return len(self._queue) > 0

    def size(self) -> int:
        return len(self._queue)

    @property
    def total_scheduled(self) -> int:
        """Number of events pushed since creation or the last clear."""
        return self._event_count

    def clear(self) -> None:
        """Remove all events from queue and restart the sequence."""
        self._queue.clear()
        self._sequence = 0
        self._event_count = 0

    def __len__(self) -> int:
        return len(self._queue)

    def __repr__(self) -> str:
        """String representation of event queue."""
        return f"EventQueue(size={len(self._queue)}, next={self.peek()})"
