"""
Metrics package.

Holds the in-process aggregator that counts promotion selection attempts
and reloads, and renders the summary served on ``GET /metrics``. Counters
are mirrored into Prometheus through ``shared.metrics`` when a collector is
attached.
"""
