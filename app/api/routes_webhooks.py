import json
import logging

import stripe
from fastapi import APIRouter, Header, Request

from app import metrics
from app.api.dependencies import DbDep
from app.core.config import settings
from app.core.exceptions import WebhookSignatureError
from app.services.billing_service import BillingService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    db: DbDep,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
):
    """Apply Stripe subscription events to the stored plan profile.

    The signature is verified before anything is parsed; replays of an
    already-processed event id are acknowledged and skipped.
    """
    payload = await request.body()
    if not settings.STRIPE_WEBHOOK_SECRET or not stripe_signature:
        logger.warning("Stripe webhook rejected: missing secret or signature header")
        metrics.billing_webhook("unknown", "invalid_signature")
        raise WebhookSignatureError("stripe")

    try:
        stripe.Webhook.construct_event(payload, stripe_signature, settings.STRIPE_WEBHOOK_SECRET)
    except (ValueError, stripe.SignatureVerificationError) as exc:
        logger.warning("Stripe webhook signature verification failed: %s", exc)
        metrics.billing_webhook("unknown", "invalid_signature")
        raise WebhookSignatureError("stripe") from exc

    event = json.loads(payload)
    outcome = BillingService(db).handle_event(event)
    metrics.billing_webhook(outcome.get("event") or "unknown", outcome.get("status", "success"))
    logger.info("Stripe webhook %s -> %s", event.get("id"), outcome)
    return outcome
