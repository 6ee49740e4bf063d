"""
Prometheus metrics for the sports picks API.

HTTP request counters and latency histograms come from
prometheus-fastapi-instrumentator (mounted at /metrics); the counters here
track the business events of the premium model.
"""
from prometheus_client import Counter

premium_access_decisions_total = Counter(
    "premium_access_decisions_total",
    "Premium prediction visibility decisions",
    ["outcome", "reason"]
)

prediction_access_grants_total = Counter(
    "prediction_access_grants_total",
    "Per-prediction access grants created"
)

subscription_upgrades_total = Counter(
    "subscription_upgrades_total",
    "Subscription upgrades",
    ["tier"]
)

admin_actions_total = Counter(
    "admin_actions_total",
    "Administrative mutations",
    ["entity", "action"]
)


def record_access_decision(allowed: bool, reason: str) -> None:
    """Count a premium visibility decision."""
    premium_access_decisions_total.labels(
        outcome="allowed" if allowed else "denied",
        reason=reason
    ).inc()


def record_admin_action(entity: str, action: str) -> None:
    admin_actions_total.labels(entity=entity, action=action).inc()
