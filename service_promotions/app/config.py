"""
Configuration for the Promotions Service.
"""

from pathlib import Path

from pydantic import Field

from shared.config import ServiceConfig

DEFAULT_RULES_FILE = Path(__file__).resolve().parent.parent / "config" / "rules.yaml"


class PromotionsConfig(ServiceConfig):
    """Promotions service settings, read from ``PROMO_*`` variables."""

    service_name: str = "promotions"
    port: int = 3000

    rules_file: Path = Field(default=DEFAULT_RULES_FILE)
    selection_strategy: str = Field(default="priority")
    ab_gate: str = Field(default="passthrough")
    ab_bucket_count: int = Field(default=100, ge=1)


def get_promotions_config(**overrides) -> PromotionsConfig:
    """Get configuration for the promotions service."""
    return PromotionsConfig(**overrides)
