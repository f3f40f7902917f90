"""
Authorization Metrics with Prometheus
=============================================================================
CONCEPT: Counting decisions, not recording them

A metric answers "how often" questions:
  - "How many requests were denied on payments in the last hour?"
  - "Did the deny rate jump after the last deploy?"

It does not answer "who was denied what, when". That would be an audit
log, which this service deliberately does not keep. The counter below has
no user or role label, only the resource and the outcome.

Example Prometheus queries:
  Deny rate per resource:
    sum by (resource) (rate(authorization_checks_total{outcome="denied"}[5m]))
      / sum by (resource) (rate(authorization_checks_total[5m]))
=============================================================================
"""

from prometheus_client import Counter


authorization_checks_total = Counter(
    name="authorization_checks_total",
    documentation="Permission checks performed by the HTTP guard, by resource and outcome.",
    labelnames=["resource", "outcome"],
)


def record_authorization(resource: str, allowed: bool) -> None:
    """
    Count one guarded request.

    Called by the require_permission() dependency after every decision.
    `outcome` is "allowed" or "denied".
    """
    authorization_checks_total.labels(
        resource=resource,
        outcome="allowed" if allowed else "denied",
    ).inc()
