"""Subscription liveness check.

A paid tier only counts while its subscription is live: the status must be
one Stripe uses for a paying customer, and the paid period must not have
ended. The period-end test covers webhooks that arrive late (status still
says "active" after the period is over). No grace period.
"""
from __future__ import annotations

import datetime as dt

ACTIVE_STATUSES = frozenset({"active", "trialing"})


def _as_utc(value: dt.datetime | str) -> dt.datetime | None:
    if isinstance(value, str):
        try:
            value = dt.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value


def is_subscription_active(
    status: str | None,
    period_end: dt.datetime | str | None,
    now: dt.datetime | None = None,
) -> bool:
    if not status or status.strip().lower() not in ACTIVE_STATUSES:
        return False

    if period_end is None or period_end == "":
        return True

    end = _as_utc(period_end)
    if end is None:
        # Unreadable period end: treat as lapsed rather than grant access
        return False
    current = now or dt.datetime.now(dt.timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=dt.timezone.utc)
    return not end < current
