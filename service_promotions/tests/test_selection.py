"""
Unit tests for selection strategies.
"""

import random

import pytest

from service_promotions.app.rules.models import Rule
from service_promotions.app.rules.selection import (
    PriorityFirstSelection, WeightedRandomSelection, build_selection_strategy
)


class TestPriorityFirstSelection:
    """Test cases for PriorityFirstSelection."""

    def test_empty_input(self):
        """Test no eligible rules selects nothing."""
        assert PriorityFirstSelection().select([], {}) is None

    def test_picks_first(self):
        """Test the first eligible rule wins."""
        rules = [Rule(id="a", priority=90), Rule(id="b", priority=90), Rule(id="c", priority=10)]

        assert PriorityFirstSelection().select(rules, {}).id == "a"


class TestWeightedRandomSelection:
    """Test cases for WeightedRandomSelection."""

    def test_empty_input(self):
        """Test no eligible rules selects nothing."""
        assert WeightedRandomSelection().select([], {}) is None

    def test_all_zero_weights_fall_back_to_first(self):
        """Test zero weights fall back to priority order."""
        rules = [Rule(id="a", weight=0), Rule(id="b", weight=-3)]

        assert WeightedRandomSelection().select(rules, {}).id == "a"

    def test_zero_weight_never_selected(self):
        """Test rules without positive weight are never picked."""
        strategy = WeightedRandomSelection(random.Random(7))
        rules = [Rule(id="never", weight=0), Rule(id="always", weight=2)]

        picks = {strategy.select(rules, {}).id for _ in range(50)}

        assert picks == {"always"}

    def test_missing_weight_counts_as_one(self):
        """Test unweighted rules remain selectable."""
        strategy = WeightedRandomSelection(random.Random(42))
        rules = [Rule(id="a"), Rule(id="b")]

        picks = {strategy.select(rules, {}).id for _ in range(200)}

        assert picks == {"a", "b"}

    def test_seeded_selection_is_reproducible(self):
        """Test a seeded generator yields a repeatable sequence."""
        rules = [Rule(id="a", weight=1), Rule(id="b", weight=3)]
        first_strategy = WeightedRandomSelection(random.Random(1))
        second_strategy = WeightedRandomSelection(random.Random(1))

        first = [first_strategy.select(rules, {}).id for _ in range(20)]
        second = [second_strategy.select(rules, {}).id for _ in range(20)]

        assert first == second


class TestBuildSelectionStrategy:
    """Test cases for build_selection_strategy."""

    def test_known_names(self):
        """Test configured names map to strategies."""
        assert isinstance(build_selection_strategy("priority"), PriorityFirstSelection)
        assert isinstance(build_selection_strategy("weighted"), WeightedRandomSelection)

    def test_unknown_name(self):
        """Test unknown strategy names are rejected."""
        with pytest.raises(ValueError):
            build_selection_strategy("round_robin")
