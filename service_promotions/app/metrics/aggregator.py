"""
Selection metrics aggregation for the Promotions Service.
"""

import threading
from datetime import datetime, timezone
from typing import Optional

from shared.metrics import MetricsCollector
from ..rules.models import MetricsSnapshot


class PromotionMetrics:
    """Process-lifetime counters observed from the engine.

    Every selection attempt is recorded once, hit or miss, together with its
    latency. Counters are shared by concurrent requests, so all mutation and
    reads happen under a lock.
    """

    def __init__(self, collector: Optional[MetricsCollector] = None):
        self.collector = collector
        self._lock = threading.Lock()
        self.total_evaluations = 0
        self.hits = 0
        self.misses = 0
        self.total_latency_ms = 0.0
        self.last_reload: Optional[datetime] = None

    def record(self, hit: bool, latency_ms: float):
        """Record one selection attempt."""
        with self._lock:
            self.total_evaluations += 1
            if hit:
                self.hits += 1
            else:
                self.misses += 1
            self.total_latency_ms += latency_ms

        if self.collector is not None:
            self.collector.record_selection(hit, latency_ms / 1000.0)

    def mark_reload(self, success: bool = True, rule_count: int = 0) -> datetime:
        """Stamp the time of the latest rule set (re)load."""
        stamp = datetime.now(timezone.utc)
        with self._lock:
            self.last_reload = stamp

        if self.collector is not None:
            self.collector.record_rule_load(success, rule_count)

        return stamp

    def snapshot(self, total_rules: int = 0) -> MetricsSnapshot:
        """Render summary statistics."""
        with self._lock:
            total = self.total_evaluations
            hits = self.hits
            misses = self.misses
            latency = self.total_latency_ms
            last_reload = self.last_reload

        if total:
            hit_rate = f"{hits / total * 100:.2f}%"
            average_latency = round(latency / total, 2)
        else:
            hit_rate = "0%"
            average_latency = 0

        return MetricsSnapshot(
            total_evaluations=total,
            hits=hits,
            misses=misses,
            hit_rate=hit_rate,
            average_latency_ms=average_latency,
            total_rules=total_rules,
            last_reload=last_reload.isoformat() if last_reload else None,
        )
