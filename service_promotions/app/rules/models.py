"""
Rule data models for the Promotions Service.
"""

from typing import Dict, Any, Optional, List, Tuple, Union
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, model_validator
from pydantic.alias_generators import to_camel


class ConditionOperator(str, Enum):
    """Condition operators."""
    EQ = "eq"
    NEQ = "neq"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    NIN = "nin"
    CONTAINS = "contains"
    REGEX = "regex"


class RuleLogic(str, Enum):
    """How a rule combines its conditions."""
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class Condition:
    """Atomic predicate over one player attribute.

    ``operator`` is kept as the raw string from the rule source so that an
    unknown operator reaches the evaluator, which rejects it.
    """
    field: str
    operator: str
    value: Any = None


@dataclass(frozen=True)
class TimeWindow:
    """Activation window; either bound may be open."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None


@dataclass(frozen=True)
class Rule:
    """Promotion rule."""
    id: str
    priority: Union[int, float] = 0
    logic: str = RuleLogic.AND.value
    conditions: Tuple[Condition, ...] = ()
    time_window: Optional[TimeWindow] = None
    promotion: Dict[str, Any] = field(default_factory=dict)
    weight: Optional[float] = None


# Rule-set ingestion documents

class ConditionDefinition(BaseModel):
    """Condition as written in a rule set document."""
    model_config = ConfigDict(extra="ignore")

    field: str
    operator: str = Field(..., validation_alias=AliasChoices("operator", "op"))
    value: Any = None


class TimeWindowDefinition(BaseModel):
    """Time window as written in a rule set document."""
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class RuleDefinition(BaseModel):
    """Rule as written in a rule set document."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    id: str
    priority: Optional[Union[int, float]] = 0
    logic: Optional[str] = RuleLogic.AND.value
    conditions: Optional[List[ConditionDefinition]] = None
    time_window: Optional[TimeWindowDefinition] = Field(None, alias="timeWindow")
    promotion: Optional[Dict[str, Any]] = None
    weight: Optional[float] = None

    def to_rule(self) -> Rule:
        window = None
        if self.time_window is not None:
            window = TimeWindow(start=self.time_window.start, end=self.time_window.end)
        return Rule(
            id=self.id,
            priority=self.priority or 0,
            logic=self.logic or RuleLogic.AND.value,
            conditions=tuple(
                Condition(field=c.field, operator=c.operator, value=c.value)
                for c in self.conditions or []
            ),
            time_window=window,
            promotion=dict(self.promotion or {}),
            weight=self.weight,
        )


class RuleSetDocument(BaseModel):
    """Top-level rule set document."""
    model_config = ConfigDict(extra="ignore")

    rules: List[RuleDefinition]

    @model_validator(mode="after")
    def _unique_rule_ids(self) -> "RuleSetDocument":
        seen = set()
        for rule in self.rules:
            if rule.id in seen:
                raise ValueError(f"duplicate rule id: {rule.id}")
            seen.add(rule.id)
        return self


# API models

class CamelModel(BaseModel):
    """Response model serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PromotionResponse(BaseModel):
    """Response model for promotion selection."""
    promotion: Optional[Dict[str, Any]] = Field(None, description="Selected promotion, if any")
    timestamp: str = Field(..., description="Response timestamp")


class MetricsSnapshot(CamelModel):
    """Point-in-time view of engine metrics."""
    total_evaluations: int
    hits: int
    misses: int
    hit_rate: str
    average_latency_ms: Union[int, float]
    total_rules: int
    last_reload: Optional[str] = None


class ReloadResult(BaseModel):
    """Response model for a rule set reload."""
    success: bool
    message: str
    timestamp: str


class RuleSummary(CamelModel):
    """Response model for a rule listing entry."""
    id: str
    priority: Union[int, float]
    logic: str
    condition_count: int
    has_time_window: bool
    promotion: Dict[str, Any] = Field(default_factory=dict)


class RuleListResponse(CamelModel):
    """Response model for rule list."""
    rules: List[RuleSummary]
    total: int
