"""
Rule evaluation engine for the Promotions Service.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from shared.errors import InternalError, ValidationError
from shared.logging import get_logger, set_player_context
from ..metrics.aggregator import PromotionMetrics
from .conditions import ConditionEvaluator
from .hooks import EligibilityHook, PassThroughABGate, TimeWindowHook
from .loader import RuleSetManager
from .models import MetricsSnapshot, ReloadResult, Rule, RuleLogic
from .selection import PriorityFirstSelection, SelectionStrategy


class RuleEvaluator:
    """Combines a rule's conditions into a single eligibility decision."""

    def __init__(self, condition_evaluator: Optional[ConditionEvaluator] = None):
        self.condition_evaluator = condition_evaluator or ConditionEvaluator()

    def evaluate(self, rule: Rule, player_data: Mapping[str, Any]) -> bool:
        """Evaluate rule conditions against player data."""
        if not rule.conditions:
            return True

        matches = (
            self.condition_evaluator.evaluate(condition, player_data)
            for condition in rule.conditions
        )

        if rule.logic == RuleLogic.AND.value:
            return all(matches)
        if rule.logic == RuleLogic.OR.value:
            return any(matches)

        # Unknown logic never matches
        return False


class EligibilityFilter:
    """Selects the rules a player is eligible for, preserving rule order."""

    def __init__(
        self,
        rule_evaluator: Optional[RuleEvaluator] = None,
        hooks: Optional[Sequence[EligibilityHook]] = None
    ):
        self.rule_evaluator = rule_evaluator or RuleEvaluator()
        if hooks is None:
            hooks = [TimeWindowHook(), PassThroughABGate()]
        self.hooks: List[EligibilityHook] = list(hooks)

    def filter(self, rules: Sequence[Rule], player_data: Mapping[str, Any]) -> List[Rule]:
        """Return eligible rules in their input order."""
        eligible = []
        for rule in rules:
            candidate = self._admit(rule, player_data)
            if candidate is not None:
                eligible.append(candidate)
        return eligible

    def _admit(self, rule: Rule, player_data: Mapping[str, Any]) -> Optional[Rule]:
        if not self.rule_evaluator.evaluate(rule, player_data):
            return None

        candidate: Optional[Rule] = rule
        for hook in self.hooks:
            candidate = hook(candidate, player_data)
            if candidate is None:
                return None
        return candidate


class PromotionEngine:
    """Selects promotions for players from the rule set in force.

    The engine is the single context object shared by request handlers. It
    owns the rule set manager and the metrics aggregator; both are safe to
    use from concurrent requests.
    """

    def __init__(
        self,
        rule_manager: RuleSetManager,
        eligibility_filter: Optional[EligibilityFilter] = None,
        selection_strategy: Optional[SelectionStrategy] = None,
    ):
        self.logger = get_logger("promotions.rule_engine")
        self.rule_manager = rule_manager
        self.metrics: PromotionMetrics = rule_manager.metrics
        self.eligibility_filter = eligibility_filter or EligibilityFilter()
        self.selection_strategy = selection_strategy or PriorityFirstSelection()

    @property
    def rules(self) -> Sequence[Rule]:
        return self.rule_manager.rules

    def load_rules(self) -> bool:
        return self.rule_manager.load()

    def reload_rules(self) -> ReloadResult:
        result = self.rule_manager.reload()
        self.logger.info("Rule reload requested", success=result.success, message=result.message)
        return result

    def get_metrics(self) -> MetricsSnapshot:
        return self.metrics.snapshot(total_rules=self.rule_manager.rule_count)

    def select_promotion(self, player_data: Any) -> Optional[Dict[str, Any]]:
        """Select the promotion for a player, or None.

        Every call is recorded as exactly one evaluation. Invalid player data
        and unexpected failures are logged and counted as misses; they never
        propagate to the caller.
        """
        start_time = time.perf_counter()
        result: Optional[Dict[str, Any]] = None

        try:
            self._validate(player_data)
            set_player_context(player_data["playerId"])

            rules = self.rule_manager.rules
            eligible = self.eligibility_filter.filter(rules, player_data)
            selected = self.selection_strategy.select(eligible, player_data)

            if selected is not None:
                result = self._build_result(selected)
                self.logger.debug(
                    "Promotion selected",
                    rule_id=selected.id,
                    eligible=len(eligible)
                )
            else:
                self.logger.debug("No promotion matched", evaluated=len(rules))

        except ValidationError as e:
            self.logger.warning("Invalid player data", error=e.message, details=e.details)
            result = None
        except Exception as e:
            error = InternalError("Promotion selection failed", details={"error": str(e)})
            self.logger.error(
                "Promotion evaluation error",
                code=error.code,
                error=str(e),
                exc_info=True
            )
            result = None
        finally:
            latency_ms = (time.perf_counter() - start_time) * 1000
            self.metrics.record(result is not None, latency_ms)

        return result

    @staticmethod
    def _validate(player_data: Any):
        if not isinstance(player_data, Mapping):
            raise ValidationError(
                "Player data must be an object",
                details={"type": type(player_data).__name__}
            )
        if player_data.get("playerId") is None:
            raise ValidationError(
                "Player data must include playerId",
                details={"field": "playerId"}
            )

    @staticmethod
    def _build_result(rule: Rule) -> Dict[str, Any]:
        result = dict(rule.promotion)
        result["ruleId"] = rule.id
        result["selectedAt"] = datetime.now(timezone.utc).isoformat()
        return result
