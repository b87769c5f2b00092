"""
Eligibility hooks for the Promotions Service.

A hook receives a rule that already matched its conditions and either
returns it (possibly decorated) or returns None to reject it. Hooks run in
order and the first rejection stops the chain for that rule.
"""

import hashlib
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Protocol

from shared.logging import get_logger
from .models import Rule


class EligibilityHook(Protocol):
    """Gate applied to a rule after its conditions matched."""

    def __call__(self, rule: Rule, player_data: Mapping[str, Any]) -> Optional[Rule]:
        ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class TimeWindowHook:
    """Rejects rules outside their activation window."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self.clock = clock

    def __call__(self, rule: Rule, player_data: Mapping[str, Any]) -> Optional[Rule]:
        window = rule.time_window
        if window is None:
            return rule

        now = _as_utc(self.clock())
        if window.start is not None and _as_utc(window.start) > now:
            return None
        if window.end is not None and _as_utc(window.end) < now:
            return None

        return rule


class PassThroughABGate:
    """A/B gate that admits every rule."""

    def __call__(self, rule: Rule, player_data: Mapping[str, Any]) -> Optional[Rule]:
        return rule


class HashBucketABGate:
    """A/B gate that assigns players to stable buckets per rule.

    A rule opts in by listing admitted buckets under ``abBuckets`` in its
    promotion payload. Assignment hashes the player id together with the
    rule id, so a player keeps the same bucket for a rule across requests.
    No distribution guarantees are made.
    """

    def __init__(self, bucket_count: int = 100, buckets_key: str = "abBuckets"):
        if bucket_count < 1:
            raise ValueError("bucket_count must be positive")
        self.bucket_count = bucket_count
        self.buckets_key = buckets_key
        self.logger = get_logger("promotions.ab_gate")

    def bucket_for(self, rule_id: str, player_id: Any) -> int:
        digest = hashlib.md5(f"{rule_id}:{player_id}".encode()).hexdigest()
        return int(digest, 16) % self.bucket_count

    def __call__(self, rule: Rule, player_data: Mapping[str, Any]) -> Optional[Rule]:
        admitted = rule.promotion.get(self.buckets_key)
        if not isinstance(admitted, list):
            return rule

        bucket = self.bucket_for(rule.id, player_data.get("playerId"))
        if bucket in admitted:
            return rule

        self.logger.debug("Player outside A/B buckets", rule_id=rule.id, bucket=bucket)
        return None
