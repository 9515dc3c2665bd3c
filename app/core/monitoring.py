import logging
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from app.core.config import settings
from app.core.exceptions import PlanAccessDeniedError

logger = logging.getLogger(__name__)

_initialized = False


def _drop_plan_denials(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """Plan denials are normal outcomes, not errors worth reporting."""
    exc_info = hint.get("exc_info")
    if exc_info and isinstance(exc_info[1], PlanAccessDeniedError):
        return None
    return event


def init_monitoring() -> None:
    global _initialized
    if _initialized:
        return
    dsn = settings.SENTRY_DSN
    if dsn:
        try:
            sentry_sdk.init(
                dsn=dsn,
                integrations=[FastApiIntegration()],
                traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
                environment=settings.ENV,
                release=f"{settings.APP_NAME.lower()}@{settings.ENV}",
                before_send=_drop_plan_denials,
            )
            logger.info("Sentry initialized (env=%s)", settings.ENV)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to init Sentry: %s", exc)
    _initialized = True
