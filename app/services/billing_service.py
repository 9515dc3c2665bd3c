"""Apply Stripe subscription lifecycle events to the user's plan profile.

This is the only writer of plan, subscription_status and current_period_end.
The entitlement engine reads those fields on every check, so a change here
takes effect on the user's next action.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any

import stripe
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models import models

logger = logging.getLogger(__name__)


def _from_timestamp(value: Any) -> dt.datetime | None:
    if value in (None, ""):
        return None
    return dt.datetime.fromtimestamp(int(value), tz=dt.timezone.utc)


def _subscription_period_end(subscription: dict[str, Any]) -> dt.datetime | None:
    """Newer Stripe API versions report the period end per subscription item."""
    if subscription.get("current_period_end"):
        return _from_timestamp(subscription["current_period_end"])
    items = (subscription.get("items") or {}).get("data") or []
    if items:
        return _from_timestamp(items[0].get("current_period_end"))
    return None


def plan_for_price(price_id: str | None) -> str:
    if price_id and price_id in settings.STRIPE_PRICE_PLANS:
        return settings.STRIPE_PRICE_PLANS[price_id]
    return settings.STRIPE_DEFAULT_PAID_PLAN


class BillingService:
    def __init__(self, db: Session):
        self.db = db

    def record_event(self, event_id: str, event_type: str) -> bool:
        """Store the event id; returns True when it was already processed."""
        existing = self.db.scalar(
            select(models.WebhookEvent)
            .where(models.WebhookEvent.provider == "stripe")
            .where(models.WebhookEvent.external_id == event_id)
        )
        if existing:
            return True
        self.db.add(models.WebhookEvent(provider="stripe", external_id=event_id, event_type=event_type))
        return False

    def handle_event(self, event: dict[str, Any]) -> dict[str, Any]:
        event_id = event.get("id") or ""
        event_type = event.get("type") or ""
        obj = (event.get("data") or {}).get("object") or {}

        if event_id and self.record_event(event_id, event_type):
            logger.info("Stripe webhook duplicate %s (%s)", event_id, event_type)
            return {"status": "duplicate", "event": event_type}

        handlers = {
            "checkout.session.completed": self._checkout_completed,
            "customer.subscription.updated": self._subscription_updated,
            "customer.subscription.deleted": self._subscription_deleted,
        }
        handler = handlers.get(event_type)
        outcome = handler(obj) if handler else {"status": "ignored"}

        if outcome.get("status") == "error":
            # Leave the event id unrecorded so a redelivery can still apply it
            self.db.rollback()
        else:
            self.db.commit()
        outcome["event"] = event_type
        return outcome

    def _find_user(self, obj: dict[str, Any]) -> models.User | None:
        metadata = obj.get("metadata") or {}
        user_id = metadata.get("user_id") or obj.get("client_reference_id")
        if user_id:
            try:
                user = self.db.get(models.User, int(user_id))
            except (TypeError, ValueError):
                logger.warning("Stripe object %s has a non-numeric user id %r", obj.get("id"), user_id)
                user = None
            if user:
                return user
        customer_id = obj.get("customer")
        if customer_id:
            return self.db.scalar(select(models.User).where(models.User.stripe_customer_id == customer_id))
        return None

    def _checkout_completed(self, session: dict[str, Any]) -> dict[str, Any]:
        if session.get("mode") != "subscription":
            return {"status": "ignored"}
        user = self._find_user(session)
        if user is None:
            logger.error("Stripe checkout %s has no matching user", session.get("id"))
            return {"status": "error", "message": "User not found"}

        metadata = session.get("metadata") or {}
        subscription_id = session.get("subscription")
        old_plan = user.plan
        user.plan = plan_for_price(metadata.get("price_id"))
        user.subscription_status = "active"
        user.stripe_customer_id = session.get("customer") or user.stripe_customer_id
        user.stripe_subscription_id = subscription_id or user.stripe_subscription_id
        user.current_period_end = self._fetch_period_end(subscription_id)

        logger.info(
            "Stripe checkout: user %s %s -> %s (subscription %s)",
            user.id, old_plan, user.plan, subscription_id,
        )
        return {"status": "success", "user_id": user.id, "plan": user.plan}

    def _fetch_period_end(self, subscription_id: str | None) -> dt.datetime | None:
        """Checkout sessions don't carry the period end; ask Stripe for it."""
        if not subscription_id or not settings.STRIPE_SECRET_KEY:
            return None
        try:
            subscription = stripe.Subscription.retrieve(subscription_id, api_key=settings.STRIPE_SECRET_KEY)
        except stripe.StripeError as exc:
            # The subscription.updated event that follows checkout fills this in
            logger.warning("Could not fetch Stripe subscription %s: %s", subscription_id, exc)
            return None
        return _subscription_period_end(subscription)

    def _subscription_updated(self, subscription: dict[str, Any]) -> dict[str, Any]:
        user = self._find_user(subscription)
        if user is None:
            logger.error("Stripe subscription %s has no matching user", subscription.get("id"))
            return {"status": "error", "message": "User not found"}

        user.subscription_status = subscription.get("status")
        user.current_period_end = _subscription_period_end(subscription)
        user.stripe_subscription_id = subscription.get("id") or user.stripe_subscription_id
        logger.info(
            "Stripe subscription update: user %s status=%s period_end=%s",
            user.id, user.subscription_status, user.current_period_end,
        )
        return {"status": "success", "user_id": user.id, "subscription_status": user.subscription_status}

    def _subscription_deleted(self, subscription: dict[str, Any]) -> dict[str, Any]:
        user = self._find_user(subscription)
        if user is None:
            logger.error("Stripe subscription %s has no matching user", subscription.get("id"))
            return {"status": "error", "message": "User not found"}

        user.subscription_status = "canceled"
        user.plan = "free"
        logger.info("Stripe subscription deleted: user %s downgraded to free", user.id)
        return {"status": "success", "user_id": user.id, "plan": user.plan}
