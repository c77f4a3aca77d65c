"""Dispatching rules choosing which buffered part a machine processes next."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence

from ..utils.logger import setup_logger

if TYPE_CHECKING:
    from ..models.part import Part


class DispatchingRule(ABC):
    """Abstract base class for dispatching rules.

    Rules are stateless: the same candidates in the same order at the same
    time always give the same choice. On ties the earliest enqueued part wins.
    """

    name: str = ""

    @abstractmethod
    def select_next_part(self, parts: Sequence["Part"], current_time: float) -> Optional["Part"]:
        """Select one part among the candidates.

        Args:
            parts: Buffered parts in enqueue order
            current_time: Current simulation time

        Returns:
            Chosen part, or None if there are no candidates
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class FIFORule(DispatchingRule):
    """First-In-First-Out: the head of the queue."""

    name = "FIFO"

    def select_next_part(self, parts, current_time):
        return parts[0] if parts else None


class PriorityRule(DispatchingRule):
    """Highest priority value first."""

    name = "Priority"

    def select_next_part(self, parts, current_time):
        if not parts:
            return None
        # max() keeps the first maximal element
        return max(parts, key=lambda p: p.priority)


class ShortestProcessingTimeRule(DispatchingRule):
    """Shortest estimated remaining processing time first."""

    name = "SPT"

    def select_next_part(self, parts, current_time):
        if not parts:
            return None
        return min(parts, key=lambda p: p.estimated_remaining_time())


class EarliestDueDateRule(DispatchingRule):
    """Earliest due date first."""

    name = "EDD"

    def select_next_part(self, parts, current_time):
        if not parts:
            return None
        return min(parts, key=lambda p: p.due_date)


class CriticalRatioRule(DispatchingRule):
    """Lowest critical ratio first.

    CR = (due date - now) / estimated remaining processing time. Parts with no
    remaining work have an infinite ratio and are only picked when alone.
    """

    name = "CR"

    def select_next_part(self, parts, current_time):
        if not parts:
            return None
        return min(parts, key=lambda p: p.critical_ratio(current_time))


class SlackRule(DispatchingRule):
    """Least slack first (due date - now - remaining processing time)."""

    name = "Slack"

    def select_next_part(self, parts, current_time):
        if not parts:
            return None
        return min(parts, key=lambda p: p.slack(current_time))


class DispatchingRuleRegistry:
    """Maps configuration names to dispatching rule instances.

    Lookups are case-insensitive and unknown names fall back to FIFO.
    """

    DEFAULT_RULE = "FIFO"

    ALIASES = {
        "FCFS": "FIFO",
        "SHORTESTPROCESSINGTIME": "SPT",
        "EARLIESTDUEDATE": "EDD",
        "CRITICALRATIO": "CR",
        "CRITICAL_RATIO": "CR",
    }

    def __init__(self, rules: Optional[Iterable[DispatchingRule]] = None):
        """Initialize registry.

        Args:
            rules: Rules to register; the six standard rules if omitted
        """
        self.logger = setup_logger(self.__class__.__name__)
        self._rules: Dict[str, DispatchingRule] = {}

        if rules is None:
            rules = [
                FIFORule(),
                PriorityRule(),
                ShortestProcessingTimeRule(),
                EarliestDueDateRule(),
                CriticalRatioRule(),
                SlackRule(),
            ]
        for rule in rules:
            self.register(rule)

        if self.DEFAULT_RULE.upper() not in self._rules:
            self.register(FIFORule())

    def register(self, rule: DispatchingRule) -> None:
        if not rule.name:
            raise ValueError(f"Dispatching rule {rule!r} has no name")
        self._rules[rule.name.upper()] = rule

    def get(self, name: Optional[str]) -> DispatchingRule:
        """Look up a rule by name.

        Args:
            name: Rule name or alias

        Returns:
            Matching rule, or FIFO for unknown names
        """
        key = (name or "").strip().upper()
        key = self.ALIASES.get(key, key)
        rule = self._rules.get(key)
        if rule is None:
            self.logger.warning(f"Unknown dispatching rule '{name}', using {self.DEFAULT_RULE}")
            return self._rules[self.DEFAULT_RULE.upper()]
        return rule

    def names(self) -> List[str]:
        return [rule.name for rule in self._rules.values()]

    def __contains__(self, name: str) -> bool:
        key = (name or "").strip().upper()
        return self.ALIASES.get(key, key) in self._rules

    def __len__(self) -> int:
        return len(self._rules)
