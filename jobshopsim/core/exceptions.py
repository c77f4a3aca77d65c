"""Exception types raised by the simulation kernel."""


class SimulationError(Exception):
    """Base class for simulation kernel errors."""


class StateViolation(SimulationError):
    """An entity was asked to make a transition its current state forbids.

    These indicate an orchestration bug rather than a runtime condition.
    """


class NotAvailableError(StateViolation):
    """Processing was started on a machine that is not idle."""


class NoPartToCompleteError(StateViolation):
    """A machine was completed or released while holding no part."""


class SchedulingError(SimulationError):
    """An event was scheduled earlier than the current simulation time."""


class InvalidParameterError(ValueError):
    """A probability distribution was constructed with invalid parameters."""


class ConfigurationError(ValueError):
    """A machine, buffer or line configuration is invalid."""
