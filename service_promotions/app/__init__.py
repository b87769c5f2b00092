"""
Promotions Service package for the Promotion Rule Engine.

This package selects a promotional offer for a player from declarative,
priority-ordered rules. It provides:

- app.main: API surface for promotion selection, metrics, reload and health.
- app.rules: Rule model, condition evaluation, eligibility hooks,
  selection strategies and rule set loading.
- app.metrics: In-process aggregation of selection outcomes and latency.

Guidelines:
- Rules are immutable once loaded; a reload publishes a new rule set.
- Keep evaluation deterministic and observable (metrics + logs).
"""
