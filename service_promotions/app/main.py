"""
Promotions service for the Promotion Rule Engine.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request

from shared.base_service import BaseService
from shared.errors import ValidationError

from .config import PromotionsConfig, get_promotions_config
from .metrics.aggregator import PromotionMetrics
from .rules.engine import EligibilityFilter, PromotionEngine
from .rules.hooks import HashBucketABGate, PassThroughABGate, TimeWindowHook
from .rules.loader import RuleSetManager, YamlRuleSource
from .rules.models import (
    MetricsSnapshot, PromotionResponse, ReloadResult,
    RuleListResponse, RuleSummary
)
from .rules.selection import build_selection_strategy


class PromotionsService(BaseService):
    """Promotions service implementation."""

    def __init__(self, config: Optional[PromotionsConfig] = None):
        config = config or get_promotions_config()
        super().__init__("promotions", config.port, config=config)

        self.engine = self._build_engine(config)
        self.engine.load_rules()

        self._setup_promotion_routes()

    def _build_engine(self, config: PromotionsConfig) -> PromotionEngine:
        """Wire the engine from configuration."""
        if config.ab_gate == "hash_bucket":
            ab_gate = HashBucketABGate(bucket_count=config.ab_bucket_count)
        elif config.ab_gate == "passthrough":
            ab_gate = PassThroughABGate()
        else:
            raise ValueError(f"Unknown A/B gate: {config.ab_gate}")

        metrics = PromotionMetrics(self.metrics)
        manager = RuleSetManager(YamlRuleSource(config.rules_file), metrics)

        return PromotionEngine(
            manager,
            eligibility_filter=EligibilityFilter(hooks=[TimeWindowHook(), ab_gate]),
            selection_strategy=build_selection_strategy(config.selection_strategy),
        )

    def _setup_promotion_routes(self):
        """Set up promotion-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "promotions",
                "message": "Promotion Rule Engine - Promotions Service",
                "version": "1.0.0",
                "capabilities": ["rule_engine", "hot_reload", "metrics"]
            }

        @self.app.post("/promotion", response_model=PromotionResponse)
        async def select_promotion(request: Request):
            """Select the promotion for a player."""
            try:
                player_data = await request.json()
            except ValueError:
                player_data = None

            if not isinstance(player_data, dict):
                raise ValidationError(
                    "Invalid request body. Expected JSON object with player data."
                )

            promotion = self.engine.select_promotion(player_data)
            return PromotionResponse(
                promotion=promotion,
                timestamp=datetime.now(timezone.utc).isoformat()
            )

        @self.app.get("/metrics", response_model=MetricsSnapshot)
        async def get_metrics():
            """Get engine metrics."""
            return self.engine.get_metrics()

        @self.app.post("/reload-rules", response_model=ReloadResult)
        def reload_rules():
            """Reload the rule set from its source."""
            return self.engine.reload_rules()

        @self.app.get("/rules", response_model=RuleListResponse)
        async def get_rules():
            """List the rule set in force, highest priority first."""
            rules = self.engine.rules
            return RuleListResponse(
                rules=[
                    RuleSummary(
                        id=rule.id,
                        priority=rule.priority,
                        logic=rule.logic,
                        condition_count=len(rule.conditions),
                        has_time_window=rule.time_window is not None,
                        promotion=rule.promotion
                    )
                    for rule in rules
                ],
                total=len(rules)
            )

    def _health_details(self) -> Dict[str, Any]:
        return {"rulesLoaded": len(self.engine.rules)}


def create_app(config: Optional[PromotionsConfig] = None):
    """Create promotions service application."""
    service = PromotionsService(config)
    return service.app


def main():
    service = PromotionsService()
    service.run()


if __name__ == "__main__":
    main()
