"""
Rule set ingestion and lifecycle for the Promotions Service.
"""

import threading
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from shared.errors import RuleSetLoadError
from shared.logging import get_logger
from ..metrics.aggregator import PromotionMetrics
from .models import Rule, RuleSetDocument, ReloadResult

RuleSource = Callable[[], Any]


class YamlRuleSource:
    """Reads a rule set document from a YAML file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def __call__(self) -> Any:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise RuleSetLoadError(
                f"Cannot read rule file {self.path}",
                details={"path": str(self.path), "error": str(e)}
            ) from e


def parse_rule_set(document: Any) -> Tuple[Rule, ...]:
    """Validate a rule set document and return its rules by descending priority."""
    if not isinstance(document, Mapping):
        raise RuleSetLoadError("Rule set document must be a mapping")

    try:
        parsed = RuleSetDocument.model_validate(document)
    except PydanticValidationError as e:
        raise RuleSetLoadError(
            "Invalid rule set document",
            details={"errors": e.errors(include_url=False, include_context=False, include_input=False)}
        ) from e

    rules = [definition.to_rule() for definition in parsed.rules]
    # list.sort is stable, so equal priorities keep their source order
    rules.sort(key=lambda r: r.priority, reverse=True)
    return tuple(rules)


class RuleSetManager:
    """Owns the rule set in force and its reload lifecycle.

    The rule set is an immutable tuple published by a single reference swap.
    Readers take ``rules`` once per evaluation and keep that snapshot even if
    a reload lands meanwhile.
    """

    def __init__(self, source: RuleSource, metrics: Optional[PromotionMetrics] = None):
        self.source = source
        self.metrics = metrics or PromotionMetrics()
        self.logger = get_logger("promotions.rule_loader")
        self._rules: Tuple[Rule, ...] = ()
        self._load_lock = threading.Lock()

    @property
    def rules(self) -> Tuple[Rule, ...]:
        """Current rule set, highest priority first."""
        return self._rules

    @property
    def rule_count(self) -> int:
        return len(self._rules)

    def load(self) -> bool:
        """Load the rule set from the source.

        On failure the rule set in force is cleared so that no promotion is
        selectable until a successful reload.
        """
        with self._load_lock:
            try:
                rules = parse_rule_set(self.source())
            except RuleSetLoadError as e:
                self._fail(e.message, e.details)
                return False
            except Exception as e:
                self._fail(str(e), {"exception": type(e).__name__})
                return False

            self._rules = rules
            self.metrics.mark_reload(success=True, rule_count=len(rules))
            self.logger.info("Promotion rules loaded", count=len(rules))
            return True

    def _fail(self, error: str, details: Mapping[str, Any]):
        self._rules = ()
        self.logger.error("Error loading rules", error=error, details=details)
        self.metrics.mark_reload(success=False, rule_count=0)

    def reload(self) -> ReloadResult:
        """Reload the rule set and summarize the outcome."""
        previous = self.rule_count
        success = self.load()
        current = self.rule_count

        if success:
            message = f"Rules reloaded successfully. Previous: {previous}, Current: {current}"
        else:
            message = f"Rule reload failed; rule set cleared. Previous: {previous}, Current: {current}"

        stamp = self.metrics.last_reload
        return ReloadResult(
            success=success,
            message=message,
            timestamp=stamp.isoformat() if stamp else "",
        )
