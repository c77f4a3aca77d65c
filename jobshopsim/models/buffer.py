"""Bounded input buffer feeding a single machine."""

from collections import deque
from typing import Deque, Iterator, List, Optional

from .part import Part, PartState
from ..core.exceptions import ConfigurationError
from ..scheduling.dispatching_rules import DispatchingRule


class Buffer:
    """FIFO-ordered holding area with a fixed capacity.

    ``try_add`` is the only way in; ``try_remove`` and ``select_and_remove``
    are the only ways out.
    """

    def __init__(self, capacity: int, machine_id: int):
        """Initialize buffer.

        Args:
            capacity: Maximum number of waiting parts (positive)
            machine_id: Machine this buffer feeds

        Raises:
            ConfigurationError: If capacity is not a positive integer
        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ConfigurationError(f"Buffer capacity must be a positive integer, got {capacity!r}")

        self.capacity = capacity
        self.machine_id = machine_id
        self._parts: Deque[Part] = deque()

    @property
    def is_full(self) -> bool:
        return len(self._parts) >= self.capacity

    @property
    def is_empty(self) -> bool:
        return len(self._parts) == 0

    @property
    def utilization(self) -> float:
        return len(self._parts) / self.capacity

    @property
    def parts(self) -> List[Part]:
        """Snapshot of waiting parts in enqueue order."""
        return list(self._parts)

    def try_add(self, part: Part, current_time: float) -> bool:
        """Enqueue a part at the tail.

        Args:
            part: Part to add
            current_time: Current simulation time, stamped as buffer entry

        Returns:
            True if added, False if the buffer is full (part untouched)
        """
        if self.is_full:
            return False

        self._parts.append(part)
        part.state = PartState.IN_BUFFER
        part.buffer_entry_time = current_time
        return True

    def try_remove(self) -> Optional[Part]:
        """Dequeue the head part, or None if empty."""
        if self.is_empty:
            return None
        return self._parts.popleft()

    def select_and_remove(self, rule: DispatchingRule, current_time: float) -> Optional[Part]:
        """Remove the part chosen by ``rule`` among all waiting parts.

        The relative order of the remaining parts is preserved.

        Args:
            rule: Dispatching rule to apply
            current_time: Current simulation time

        Returns:
            Selected part, or None if the buffer is empty
        """
        if self.is_empty:
            return None

        selected = rule.select_next_part(list(self._parts), current_time)
        if selected is None:
            return None

        for index, part in enumerate(self._parts):
            if part is selected:
                del self._parts[index]
                return part

        raise ValueError(f"Rule {rule.name} selected part {selected.part_id} not held by buffer {self.machine_id}")

    def peek(self) -> Optional[Part]:
        return self._parts[0] if self._parts else None

    def clear(self) -> None:
        self._parts.clear()

    def __len__(self) -> int:
        return len(self._parts)

    def __iter__(self) -> Iterator[Part]:
        return iter(list(self._parts))

    def __repr__(self) -> str:
        return f"Buffer(machine={self.machine_id}, size={len(self._parts)}/{self.capacity})"
