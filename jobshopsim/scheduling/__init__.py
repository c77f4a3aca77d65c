"""Dispatching rules for choosing the next part from a buffer."""

from .dispatching_rules import (
    DispatchingRule,
    FIFORule,
    PriorityRule,
    ShortestProcessingTimeRule,
    EarliestDueDateRule,
    CriticalRatioRule,
    SlackRule,
    DispatchingRuleRegistry,
)

__all__ = [
    "DispatchingRule",
    "FIFORule",
    "PriorityRule",
    "ShortestProcessingTimeRule",
    "EarliestDueDateRule",
    "CriticalRatioRule",
    "SlackRule",
    "DispatchingRuleRegistry",
]
