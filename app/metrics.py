"""Metrics facade.

Service code should ONLY call the semantic helpers here so the backend can
change freely.

Metrics:
- entitlement_checks_total{action,outcome}   Protected-action decisions
- invoice_created_total                      Invoices successfully created
- client_created_total                       Clients successfully created
- billing_webhooks_total{event,status}       Stripe webhook deliveries handled
"""

from __future__ import annotations

import logging

from prometheus_client import Counter

logger = logging.getLogger("metrics")

_ENTITLEMENT_CHECKS = Counter(
    "entitlement_checks_total",
    "Protected-action entitlement decisions",
    ["action", "outcome"],
)
_INVOICE_CREATED = Counter("invoice_created_total", "Invoices successfully created")
_CLIENT_CREATED = Counter("client_created_total", "Clients successfully created")
_BILLING_WEBHOOKS = Counter(
    "billing_webhooks_total",
    "Billing webhook deliveries handled",
    ["event", "status"],
)


def entitlement_checked(action: str, outcome: str) -> None:
    """outcome is "allowed" or the denial code."""
    _ENTITLEMENT_CHECKS.labels(action=action, outcome=outcome).inc()


def invoice_created() -> None:
    _INVOICE_CREATED.inc()


def client_created() -> None:
    _CLIENT_CREATED.inc()


def billing_webhook(event: str, status: str) -> None:
    _BILLING_WEBHOOKS.labels(event=event, status=status).inc()
    logger.debug("billing webhook event=%s status=%s", event, status)
