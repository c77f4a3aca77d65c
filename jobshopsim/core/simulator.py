"""Main simulator class orchestrating the discrete event simulation."""

import math
from typing import Callable, Dict, List, Optional

import numpy as np

from .event_queue import Event, EventType, EventQueue
from .exceptions import (
    ConfigurationError,
    NoPartToCompleteError,
    SchedulingError,
    SimulationError,
    StateViolation,
)
from .metrics_collector import MetricsCollector
from .statistics import SimulationStatistics
from ..models.buffer import Buffer
from ..models.machine import Machine, MachineState
from ..models.part import Part, PartState
from ..reports.simulation_logger import SimulationLogger
from ..scheduling.dispatching_rules import DispatchingRuleRegistry
from ..utils.logger import setup_logger
from ..workload.distributions import Distribution, UniformDistribution

EventCallback = Callable[[Event], None]


class Simulator:
    """Discrete event simulator for a job-shop line.

    This class owns the machines, their input buffers, every scheduled part
    and the event queue, and manages:
    - Event processing in time order
    - Part hand-off between machines, including blocking and retries
    - Metrics collection

    All randomness comes from one generator seeded at construction.
    """

    DEFAULT_RETRY_INTERVAL = 0.5
    DEFAULT_MIN_DURATION = 0.1

    def __init__(self, random_seed: Optional[int] = 42,
                 processing_distribution: Optional[Distribution] = None,
                 retry_interval: float = DEFAULT_RETRY_INTERVAL,
                 min_duration: float = DEFAULT_MIN_DURATION,
                 rule_registry: Optional[DispatchingRuleRegistry] = None,
                 sim_logger: Optional[SimulationLogger] = None):
        """Initialize simulator.

        Args:
            random_seed: Seed of the shared random generator
            processing_distribution: Default processing time distribution
                for machines added without their own
            retry_interval: Delay between transfer attempts of a blocked machine
            min_duration: Lower clamp applied to every sampled duration
            rule_registry: Registry used to resolve dispatching rule names
            sim_logger: Collector of structured records

        Raises:
            ConfigurationError: If retry_interval or min_duration is not positive
        """
        if retry_interval <= 0:
            raise ConfigurationError(f"retry_interval must be positive, got {retry_interval}")
        if min_duration <= 0:
            raise ConfigurationError(f"min_duration must be positive, got {min_duration}")

        self.logger = setup_logger(self.__class__.__name__)

        self.random_seed = random_seed
        self.rng = np.random.default_rng(random_seed)
        self.retry_interval = float(retry_interval)
        self.min_duration = float(min_duration)
        self.processing_distribution = processing_distribution or UniformDistribution(2.0, 6.0)
        self.rule_registry = rule_registry or DispatchingRuleRegistry()

        # Simulation state
        self.current_time = 0.0
        self.event_queue = EventQueue()
        self.is_running = False
        self.events_processed = 0

        # Entities, keyed by id; parts live here for their whole lifetime
        self.machines: Dict[int, Machine] = {}
        self.buffers: Dict[int, Buffer] = {}
        self.parts: Dict[str, Part] = {}
        self._processing_distributions: Dict[int, Distribution] = {}

        self.metrics_collector = MetricsCollector()
        self.sim_logger = sim_logger or SimulationLogger()
        self._listeners: List[EventCallback] = []

        self._handlers = {
            EventType.PART_ARRIVAL: self._handle_part_arrival,
            EventType.PROCESSING_COMPLETE: self._handle_processing_complete,
            EventType.RETRY_TRANSFER: self._handle_retry_transfer,
        }

        self.logger.info(f"Simulator initialized (seed={random_seed}, retry_interval={self.retry_interval})")

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def add_machine(self, machine: Machine, buffer_capacity: int,
                    processing_distribution: Optional[Distribution] = None) -> None:
        """Add a machine together with its input buffer.

        Args:
            machine: Machine to add
            buffer_capacity: Capacity of the machine's input buffer
            processing_distribution: Processing time distribution for this
                machine, the simulator default if omitted

        Raises:
            ConfigurationError: On duplicate machine id or invalid capacity
        """
        if machine.machine_id in self.machines:
            raise ConfigurationError(f"Duplicate machine id {machine.machine_id}")

        buffer = Buffer(buffer_capacity, machine.machine_id)
        self.machines[machine.machine_id] = machine
        self.buffers[machine.machine_id] = buffer
        self._processing_distributions[machine.machine_id] = (
            processing_distribution or self.processing_distribution
        )
        self.logger.debug(
            f"Added {machine.name} (id={machine.machine_id}, buffer={buffer_capacity}, "
            f"rule={machine.dispatching_rule.name})"
        )

    def schedule_arrival(self, part: Part, arrival_time: float) -> None:
        """Schedule a part to arrive at the first machine of its route.

        Args:
            part: New part, not yet known to the simulator
            arrival_time: Arrival time, not earlier than the current time

        Raises:
            ConfigurationError: On duplicate part id, unknown route machines
                or a part that has already started its route
            SchedulingError: If arrival_time is in the past
        """
        if part.part_id in self.parts:
            raise ConfigurationError(f"Duplicate part id {part.part_id}")
        if part.current_step != 0 or part.state != PartState.IN_STORAGE:
            raise ConfigurationError(
                f"Part {part.part_id} has already entered a line (step {part.current_step}, "
                f"state {part.state.value})"
            )
        unknown = [m for m in part.route if m not in self.machines]
        if unknown:
            raise ConfigurationError(f"Part {part.part_id} routes through unknown machines {unknown}")

        self._schedule(Event.arrival(arrival_time, part.part_id))

        part.arrival_time = arrival_time
        if part.estimated_processing_time is None:
            part.estimated_processing_time = float(np.mean(
                [self._processing_distributions[m].mean for m in part.route]
            ))
        self.parts[part.part_id] = part
        self.sim_logger.log_part_created(part)

    def get_machine(self, machine_id: int) -> Machine:
        return self.machines[machine_id]

    def processing_distribution_for(self, machine_id: int) -> Distribution:
        return self._processing_distributions[machine_id]

    def subscribe(self, callback: EventCallback) -> None:
        """Register a callback fired synchronously after each executed event."""
        self._listeners.append(callback)

    def unsubscribe(self, callback: EventCallback) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    def run_until(self, end_time: float) -> SimulationStatistics:
        """Execute events up to and including ``end_time``.

        The first event later than ``end_time`` stays queued, so a later
        call with a larger horizon continues from it. When ``end_time`` is
        finite the clock is then advanced to it.

        Args:
            end_time: Simulation time horizon

        Returns:
            Statistics snapshot at the end of the call

        Raises:
            SimulationError: If called while a run is in progress
        """
        if self.is_running:
            raise SimulationError("run_until cannot be called while a run is in progress")

        self.is_running = True
        executed = 0
        try:
            while self.event_queue.has_pending():
                if self.event_queue.peek().time > end_time:
                    break
                self._execute(self.event_queue.pop())
                executed += 1

            if math.isfinite(end_time) and end_time > self.current_time:
                self.current_time = end_time
        finally:
            self.is_running = False

        self.logger.info(f"Ran until t={self.current_time:.2f} ({executed} events, {len(self.event_queue)} pending)")
        return self.statistics()

    def step(self) -> Optional[Event]:
        """Execute the single earliest pending event.

        Returns:
            The executed event, or None if nothing is pending
        """
        if self.is_running:
            raise SimulationError("step cannot be called while a run is in progress")
        if not self.event_queue.has_pending():
            return None

        self.is_running = True
        try:
            event = self.event_queue.pop()
            self._execute(event)
        finally:
            self.is_running = False
        return event

    def _execute(self, event: Event) -> None:
        self.current_time = event.time
        self.logger.debug(f"Processing {event}")

        self._handlers[event.event_type](event)
        self.events_processed += 1

        for callback in list(self._listeners):
            callback(event)

    def _schedule(self, event: Event) -> None:
        if event.time < self.current_time:
            raise SchedulingError(
                f"Cannot schedule {event.event_type.value} at t={event.time:.4f} before current time {self.current_time:.4f}"
            )
        self.event_queue.push(event)

    def reset(self) -> None:
        """Return the simulator to time zero with an empty line.

        Machines, buffers and their configuration are kept. Scheduled
        arrivals are discarded and must be scheduled again. The random
        generator is re-seeded so a rerun reproduces the first run.
        """
        if self.is_running:
            raise SimulationError("reset cannot be called while a run is in progress")

        self.event_queue.clear()
        self.current_time = 0.0
        self.events_processed = 0
        self.rng = np.random.default_rng(self.random_seed)

        self.parts.clear()
        self.metrics_collector.reset()
        self.sim_logger.clear()

        for machine in self.machines.values():
            machine.reset()
        for buffer in self.buffers.values():
            buffer.clear()

        self.logger.info("Simulator reset")

    def statistics(self) -> SimulationStatistics:
        """Statistics snapshot at the current simulation time."""
        return self.metrics_collector.snapshot(
            self.current_time, self.machines.values(), self.buffers, self.events_processed
        )

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _handle_part_arrival(self, event: Event) -> None:
        """Handle part arrival at its first machine's buffer."""
        part = self.parts[event.part_id]
        machine_id = part.current_machine_id()
        buffer = self.buffers[machine_id]

        self.metrics_collector.record_arrival()
        self.sim_logger.log_part_arrival(self.current_time, part, machine_id)

        if not buffer.try_add(part, self.current_time):
            self.metrics_collector.record_rejection()
            self.sim_logger.log_part_rejected(self.current_time, part, machine_id)
            self.logger.info(f"Part {part.part_id} rejected at t={self.current_time:.2f}: buffer {machine_id} full")
            return

        self._buffer_changed(machine_id)
        self.try_start_processing(self.machines[machine_id])

    def _handle_processing_complete(self, event: Event) -> None:
        """Handle the end of an operation and hand the part downstream."""
        machine = self.machines[event.machine_id]
        part = machine.current_part

        if part is None:
            raise NoPartToCompleteError(f"Machine {machine.name} completed with no part at t={self.current_time:.2f}")
        if part.part_id != event.part_id or machine.state != MachineState.BUSY:
            raise StateViolation(
                f"Completion of {event.part_id} on {machine.name} does not match machine state "
                f"({machine.state.value}, holding {part.part_id})"
            )

        self.metrics_collector.record_busy_time(machine.machine_id, machine.processing_start_time, self.current_time)
        self.sim_logger.log_processing_complete(self.current_time, machine, part)

        next_machine_id = part.next_machine_id()

        if next_machine_id is None:
            machine.complete_processing(self.current_time)
            part.mark_completed(self.current_time)
            self.metrics_collector.record_completion(part.flow_time)
            self.sim_logger.log_part_completed(self.current_time, part, part.flow_time)
            self.logger.debug(f"Part {part.part_id} completed, flow time {part.flow_time:.2f}")

            self.try_start_processing(machine)
            return

        if self.buffers[next_machine_id].try_add(part, self.current_time):
            machine.complete_processing(self.current_time)
            self._buffer_changed(next_machine_id)
            self.sim_logger.log_part_transfer(self.current_time, part, machine.machine_id, next_machine_id)

            self.try_start_processing(self.machines[next_machine_id])
            self.try_start_processing(machine)
            return

        machine.block(next_machine_id, self.current_time)
        self.sim_logger.log_machine_blocked(self.current_time, machine, part, next_machine_id)
        self.logger.debug(f"{machine.name} blocked holding {part.part_id}, buffer {next_machine_id} full")
        self._schedule(Event.retry_transfer(
            self.current_time + self.retry_interval, machine.machine_id, part.part_id, next_machine_id
        ))

    def _handle_retry_transfer(self, event: Event) -> None:
        """Handle a blocked machine retrying its downstream transfer."""
        machine = self.machines[event.machine_id]
        part = machine.current_part

        if machine.state != MachineState.BLOCKED or part is None or part.part_id != event.part_id:
            self.logger.debug(f"Stale retry for {event.part_id} on {machine.name} ignored")
            return

        target_id = event.target_machine_id
        if not self.buffers[target_id].try_add(part, self.current_time):
            self._schedule(Event.retry_transfer(
                self.current_time + self.retry_interval, machine.machine_id, part.part_id, target_id
            ))
            return

        self.metrics_collector.record_blocked_time(machine.machine_id, machine.blocked_since, self.current_time)
        machine.release(self.current_time)
        self._buffer_changed(target_id)
        self.sim_logger.log_part_transfer(self.current_time, part, machine.machine_id, target_id)
        self.logger.debug(f"{machine.name} unblocked, {part.part_id} moved to buffer {target_id}")

        self.try_start_processing(machine)
        self.try_start_processing(self.machines[target_id])

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def try_start_processing(self, machine: Machine) -> bool:
        """Start the machine on its next buffered part if it can take one.

        Does nothing when the machine is BUSY or BLOCKED. A machine whose
        buffer yields no part becomes STARVED.

        Args:
            machine: Machine to start

        Returns:
            True if an operation was started
        """
        machine.wake()
        if not machine.is_available():
            return False

        buffer = self.buffers[machine.machine_id]
        part = buffer.select_and_remove(machine.dispatching_rule, self.current_time)
        if part is None:
            machine.mark_starved()
            return False

        self._buffer_changed(machine.machine_id)

        duration = self._sample_duration(self._processing_distributions[machine.machine_id])
        machine.start_processing(part, self.current_time, duration)
        self.sim_logger.log_processing_start(self.current_time, machine, part, duration)
        self._schedule(Event.processing_complete(self.current_time + duration, machine.machine_id, part.part_id))
        return True

    def _sample_duration(self, distribution: Distribution) -> float:
        return max(self.min_duration, float(distribution.sample(self.rng)))

    def _buffer_changed(self, machine_id: int) -> None:
        self.metrics_collector.record_buffer_level(machine_id, self.current_time, len(self.buffers[machine_id]))

    def __repr__(self) -> str:
        return (f"Simulator(t={self.current_time:.2f}, machines={len(self.machines)}, "
                f"parts={len(self.parts)}, pending={len(self.event_queue)})")
