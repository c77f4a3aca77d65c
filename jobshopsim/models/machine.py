"""Machine entity and its processing state machine."""

from enum import Enum
from typing import Optional

from .part import Part, PartState
from ..core.exceptions import NoPartToCompleteError, NotAvailableError, StateViolation
from ..scheduling.dispatching_rules import DispatchingRule, FIFORule


class MachineState(Enum):
    """States of a machine."""
    IDLE = "idle"
    BUSY = "busy"
    BLOCKED = "blocked"
    STARVED = "starved"


class Machine:
    """A single-capacity processing resource fed by one buffer.

    A machine holds a part if and only if it is BUSY or BLOCKED. A BLOCKED
    machine has finished its operation but could not hand the part to the
    next machine's buffer.
    """

    def __init__(self, machine_id: int, name: str, dispatching_rule: Optional[DispatchingRule] = None):
        """Initialize machine.

        Args:
            machine_id: Unique machine identifier
            name: Display name
            dispatching_rule: Rule choosing the next buffered part, FIFO if omitted
        """
        self.machine_id = machine_id
        self.name = name
        self.dispatching_rule = dispatching_rule or FIFORule()

        self.state = MachineState.IDLE
        self.current_part: Optional[Part] = None
        self.processing_start_time = 0.0
        self.processing_end_time = 0.0
        self.parts_completed = 0

        # Blocking bookkeeping
        self.blocked_target_id: Optional[int] = None
        self.blocked_since: Optional[float] = None

    def is_available(self) -> bool:
        return self.state == MachineState.IDLE

    def start_processing(self, part: Part, current_time: float, processing_time: float) -> None:
        """Start an operation on ``part``.

        Args:
            part: Part pulled from this machine's buffer
            current_time: Current simulation time
            processing_time: Sampled operation duration

        Raises:
            NotAvailableError: If the machine is not IDLE
        """
        if not self.is_available():
            raise NotAvailableError(f"Machine {self.name} is not available (state={self.state.value})")

        self.current_part = part
        self.state = MachineState.BUSY
        self.processing_start_time = current_time
        self.processing_end_time = current_time + processing_time

        part.state = PartState.PROCESSING
        part.start_time = current_time
        part.operation_history.append((self.machine_id, current_time, current_time + processing_time))

    def complete_processing(self, current_time: float) -> Part:
        """Finish the current operation and hand the part off.

        Args:
            current_time: Current simulation time

        Returns:
            The part, advanced to its next route step

        Raises:
            NoPartToCompleteError: If no part is held
            StateViolation: If the machine is not BUSY
        """
        if self.current_part is None:
            raise NoPartToCompleteError(f"Machine {self.name} has no part to complete")
        if self.state != MachineState.BUSY:
            raise StateViolation(f"Machine {self.name} cannot complete while {self.state.value}")
        return self._hand_off()

    def block(self, target_machine_id: int, current_time: float) -> None:
        """Keep the finished part because the downstream buffer is full."""
        if self.current_part is None:
            raise NoPartToCompleteError(f"Machine {self.name} has no part to hold")
        if self.state != MachineState.BUSY:
            raise StateViolation(f"Machine {self.name} cannot block while {self.state.value}")
        self.state = MachineState.BLOCKED
        self.blocked_target_id = target_machine_id
        self.blocked_since = current_time

    def release(self, current_time: float) -> Part:
        """Hand off the held part after a successful retried transfer.

        Returns:
            The released part, advanced to its next route step
        """
        if self.current_part is None:
            raise NoPartToCompleteError(f"Machine {self.name} has no part to release")
        if self.state != MachineState.BLOCKED:
            raise StateViolation(f"Machine {self.name} cannot release while {self.state.value}")
        return self._hand_off()

    def _hand_off(self) -> Part:
        part = self.current_part
        part.advance()
        self.current_part = None
        self.state = MachineState.IDLE
        self.blocked_target_id = None
        self.blocked_since = None
        self.parts_completed += 1
        return part

    def mark_starved(self) -> None:
        """Record that a pull attempt found the buffer empty."""
        if self.state != MachineState.IDLE:
            raise StateViolation(f"Machine {self.name} cannot starve while {self.state.value}")
        self.state = MachineState.STARVED

    def wake(self) -> None:
        """Return a STARVED machine to IDLE so it can pull again."""
        if self.state == MachineState.STARVED:
            self.state = MachineState.IDLE

    def processing_progress(self, current_time: float) -> float:
        """Fraction of the current operation already elapsed, in [0, 1]."""
        if self.state != MachineState.BUSY:
            return 0.0
        total = self.processing_end_time - self.processing_start_time
        if total <= 0:
            return 1.0
        elapsed = current_time - self.processing_start_time
        return min(1.0, max(0.0, elapsed / total))

    def reset(self) -> None:
        self.state = MachineState.IDLE
        self.current_part = None
        self.processing_start_time = 0.0
        self.processing_end_time = 0.0
        self.parts_completed = 0
        self.blocked_target_id = None
        self.blocked_since = None

    def __repr__(self) -> str:
        return f"Machine(id={self.machine_id}, name={self.name!r}, state={self.state.value})"
