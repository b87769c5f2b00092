"""
Rules engine package.

Defines the rule model and the selection pipeline used by the Promotions
Service. Conditions compare player attributes against literals; rules
combine them with AND/OR logic and are evaluated highest priority first.

Modules of interest:
- models: Data classes for Rule, Condition, TimeWindow and API models.
- conditions: Operator semantics and dot-path field resolution.
- hooks: Time window and A/B gates applied after conditions match.
- selection: Strategies choosing one rule among the eligible ones.
- loader: Rule set ingestion and the reload lifecycle.
- engine: Rule evaluation, eligibility filtering and the orchestrator.
"""
