"""
Unit tests for rule set loading and reload.
"""

import pytest

from service_promotions.app.config import DEFAULT_RULES_FILE
from service_promotions.app.metrics.aggregator import PromotionMetrics
from service_promotions.app.rules.loader import (
    RuleSetManager, YamlRuleSource, parse_rule_set
)
from shared.errors import RuleSetLoadError
from shared.test_helpers import TestDataFactory, write_rules_file


class TestParseRuleSet:
    """Test cases for parse_rule_set."""

    def test_sorts_by_priority_descending(self):
        """Test rules come back highest priority first."""
        rules = parse_rule_set(TestDataFactory.create_test_rule_document())

        assert [r.id for r in rules] == ["high_priority", "low_priority", "fallback"]

    def test_ties_keep_source_order(self):
        """Test equal priorities keep their relative order."""
        rules = parse_rule_set({"rules": [
            {"id": "first", "priority": 5},
            {"id": "top", "priority": 9},
            {"id": "second", "priority": 5},
            {"id": "third", "priority": 5},
        ]})

        assert [r.id for r in rules] == ["top", "first", "second", "third"]

    def test_fractional_priority(self):
        """Test numeric priorities sort as written, fractions included."""
        rules = parse_rule_set({"rules": [
            {"id": "ten", "priority": 10},
            {"id": "ten_and_a_half", "priority": 10.5},
            {"id": "eleven", "priority": 11},
        ]})

        assert [r.id for r in rules] == ["eleven", "ten_and_a_half", "ten"]
        assert rules[1].priority == 10.5
        assert isinstance(rules[2].priority, int)

    def test_defaults(self):
        """Test omitted fields take their defaults."""
        rule = parse_rule_set({"rules": [{"id": "bare"}]})[0]

        assert rule.priority == 0
        assert rule.logic == "AND"
        assert rule.conditions == ()
        assert rule.time_window is None
        assert rule.promotion == {}
        assert rule.weight is None

    def test_condition_operator_aliases(self):
        """Test conditions accept both operator and op keys."""
        rule = parse_rule_set({"rules": [{
            "id": "r",
            "conditions": [
                {"field": "level", "operator": "gt", "value": 5},
                {"field": "country", "op": "in", "value": ["US"]},
            ]
        }]})[0]

        assert [c.operator for c in rule.conditions] == ["gt", "in"]

    def test_unknown_operator_is_kept(self):
        """Test unknown operators load and are rejected at evaluation."""
        rule = parse_rule_set({"rules": [{
            "id": "r",
            "conditions": [{"field": "level", "operator": "bogus", "value": 1}]
        }]})[0]

        assert rule.conditions[0].operator == "bogus"

    def test_time_window(self):
        """Test time windows parse ISO timestamps."""
        rule = parse_rule_set({"rules": [{
            "id": "r",
            "timeWindow": {"start": "2024-01-01T00:00:00Z"}
        }]})[0]

        assert rule.time_window.start.year == 2024
        assert rule.time_window.end is None

    @pytest.mark.parametrize("document", [
        None,
        [],
        {},
        {"rules": "nope"},
        {"rules": [{"priority": 1}]},
        {"rules": [{"id": "a"}, {"id": "a"}]},
        {"rules": [{"id": "a", "conditions": [{"field": "level"}]}]},
    ])
    def test_invalid_documents(self, document):
        """Test malformed documents raise RuleSetLoadError."""
        with pytest.raises(RuleSetLoadError):
            parse_rule_set(document)


class TestYamlRuleSource:
    """Test cases for YamlRuleSource."""

    def test_reads_document(self, tmp_path):
        """Test reading a YAML rule file."""
        path = write_rules_file(tmp_path / "rules.yaml", TestDataFactory.create_test_rule_document())

        document = YamlRuleSource(path)()

        assert len(document["rules"]) == 3

    def test_missing_file(self, tmp_path):
        """Test a missing file raises RuleSetLoadError."""
        with pytest.raises(RuleSetLoadError):
            YamlRuleSource(tmp_path / "missing.yaml")()

    def test_malformed_yaml(self, tmp_path):
        """Test malformed YAML raises RuleSetLoadError."""
        path = tmp_path / "rules.yaml"
        path.write_text("rules: [unclosed", encoding="utf-8")

        with pytest.raises(RuleSetLoadError):
            YamlRuleSource(path)()

    def test_packaged_rules_load(self):
        """Test the bundled rule file is valid."""
        rules = parse_rule_set(YamlRuleSource(DEFAULT_RULES_FILE)())

        assert rules
        assert rules[-1].conditions == ()


class TestRuleSetManager:
    """Test cases for RuleSetManager."""

    @pytest.fixture
    def rules_file(self, tmp_path):
        """Write the sample rule document."""
        return write_rules_file(tmp_path / "rules.yaml", TestDataFactory.create_test_rule_document())

    @pytest.fixture
    def manager(self, rules_file):
        """Create a manager over the rule file."""
        return RuleSetManager(YamlRuleSource(rules_file), PromotionMetrics())

    def test_starts_empty(self, manager):
        """Test nothing is in force before the first load."""
        assert manager.rules == ()
        assert manager.rule_count == 0

    def test_load_success(self, manager):
        """Test a successful load publishes the rules and stamps the reload."""
        assert manager.load() is True

        assert manager.rule_count == 3
        assert manager.rules[0].id == "high_priority"
        assert manager.metrics.last_reload is not None

    def test_load_failure_clears_rules(self, manager, rules_file):
        """Test a failed load leaves an empty rule set."""
        manager.load()
        rules_file.write_text("rules: [unclosed", encoding="utf-8")

        assert manager.load() is False

        assert manager.rules == ()
        assert manager.metrics.last_reload is not None

    def test_load_failure_from_unexpected_error(self):
        """Test any source failure falls back to an empty set."""
        def broken_source():
            raise RuntimeError("disk on fire")

        manager = RuleSetManager(broken_source, PromotionMetrics())

        assert manager.load() is False
        assert manager.rules == ()

    def test_reload_reports_counts(self, manager, rules_file):
        """Test reload summarizes previous and current counts."""
        manager.load()
        write_rules_file(rules_file, {"rules": [{"id": "only"}]})

        result = manager.reload()

        assert result.success is True
        assert "Previous: 3" in result.message
        assert "Current: 1" in result.message
        assert result.timestamp
        assert manager.rule_count == 1

    def test_reload_failure(self, manager, rules_file):
        """Test a failed reload reports failure and clears the set."""
        manager.load()
        rules_file.unlink()

        result = manager.reload()

        assert result.success is False
        assert "Previous: 3" in result.message
        assert "Current: 0" in result.message
        assert manager.rule_count == 0

    def test_reload_updates_timestamp(self, manager):
        """Test each load stamps a new reload time."""
        manager.load()
        first = manager.metrics.last_reload

        manager.reload()

        assert manager.metrics.last_reload >= first
        assert manager.metrics.last_reload is not first

    def test_published_snapshot_is_immutable(self, manager):
        """Test the rule set handed to readers cannot be mutated."""
        manager.load()
        snapshot = manager.rules

        manager.load()

        assert isinstance(snapshot, tuple)
        assert snapshot is not manager.rules
