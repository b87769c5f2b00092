"""
Test helper functions and factory methods for the Promotion Rule Engine.
"""

import uuid
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml


class TestDataFactory:
    """Factory for creating test data."""

    __test__ = False

    @staticmethod
    def create_test_player(**attributes) -> Dict[str, Any]:
        """Create a player payload with a generated playerId."""
        player = {"playerId": f"player-{uuid.uuid4().hex[:8]}"}
        player.update(attributes)
        return player

    @staticmethod
    def create_test_players() -> List[Dict[str, Any]]:
        """Create a spread of representative players."""
        return [
            {
                "playerId": "player-new",
                "level": 1,
                "daysSinceRegistration": 1,
                "totalSpent": 0,
                "country": "US"
            },
            {
                "playerId": "player-vip",
                "level": 50,
                "spendTier": "platinum",
                "daysSinceLastPurchase": 10,
                "totalSpent": 12000,
                "country": "INVALID"
            },
            {
                "playerId": "player-lapsed",
                "level": 22,
                "daysSinceLastPurchase": 45,
                "totalSpent": 300,
                "country": "FR",
                "profile": {"tier": "silver"}
            }
        ]

    @staticmethod
    def create_test_rule(
        rule_id: str,
        priority: int = 0,
        conditions: Optional[List[Dict[str, Any]]] = None,
        promotion: Optional[Dict[str, Any]] = None,
        **extra
    ) -> Dict[str, Any]:
        """Create a rule definition as it appears in a rule set document."""
        rule = {
            "id": rule_id,
            "priority": priority,
            "conditions": conditions or [],
            "promotion": promotion if promotion is not None else {"type": f"{rule_id}_bonus"}
        }
        rule.update(extra)
        return rule

    @staticmethod
    def create_test_rule_document() -> Dict[str, Any]:
        """Create a small rule set document."""
        return {
            "rules": [
                TestDataFactory.create_test_rule(
                    "low_priority",
                    priority=10,
                    conditions=[{"field": "level", "operator": "gte", "value": 1}],
                    promotion={"type": "low_bonus", "amount": 100}
                ),
                TestDataFactory.create_test_rule(
                    "high_priority",
                    priority=90,
                    conditions=[{"field": "level", "operator": "gte", "value": 1}],
                    promotion={"type": "high_bonus", "amount": 1000}
                ),
                TestDataFactory.create_test_rule(
                    "fallback",
                    priority=0,
                    promotion={"type": "daily_bonus", "amount": 10}
                )
            ]
        }


def write_rules_file(path: Path, document: Any) -> Path:
    """Dump a rule set document to a YAML file."""
    path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
    return path
