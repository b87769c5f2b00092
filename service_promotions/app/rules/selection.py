"""
Selection strategies for the Promotions Service.
"""

import random
from typing import Any, Mapping, Optional, Protocol, Sequence

from .models import Rule


class SelectionStrategy(Protocol):
    """Chooses one rule among the eligible ones."""

    def select(self, eligible: Sequence[Rule], player_data: Mapping[str, Any]) -> Optional[Rule]:
        ...


class PriorityFirstSelection:
    """Picks the highest-priority eligible rule.

    Eligible rules arrive in rule-set order, so the first one wins and ties
    fall back to source order.
    """

    def select(self, eligible: Sequence[Rule], player_data: Mapping[str, Any]) -> Optional[Rule]:
        if not eligible:
            return None
        return eligible[0]


class WeightedRandomSelection:
    """Picks an eligible rule at random, proportionally to ``rule.weight``.

    Rules without a weight count as 1. When no rule carries a positive
    weight the highest-priority rule is returned.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def select(self, eligible: Sequence[Rule], player_data: Mapping[str, Any]) -> Optional[Rule]:
        if not eligible:
            return None

        weights = [
            max(rule.weight if rule.weight is not None else 1.0, 0.0)
            for rule in eligible
        ]
        if sum(weights) <= 0:
            return eligible[0]

        return self.rng.choices(list(eligible), weights=weights, k=1)[0]


STRATEGIES = {
    "priority": PriorityFirstSelection,
    "weighted": WeightedRandomSelection,
}


def build_selection_strategy(name: str) -> SelectionStrategy:
    """Build a selection strategy by its configured name."""
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"Unknown selection strategy: {name}") from None
