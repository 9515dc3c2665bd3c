"""Usage counters and plan profile reads for entitlement checks.

Counts are recomputed from rows on every call; nothing here is cached,
because limits must be judged against the latest persisted state.
"""
from __future__ import annotations

import datetime as dt
import logging
from zoneinfo import ZoneInfo

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import UserNotFoundError
from app.models import models
from app.services.plan_access import PlanProfile

logger = logging.getLogger(__name__)


def month_window(now: dt.datetime | None = None, tz_name: str | None = None) -> tuple[dt.datetime, dt.datetime]:
    """Return [start of this month, start of next month) in UTC.

    The calendar month is taken in the application timezone; the half-open
    upper bound covers the whole last day of the month.
    """
    tz = ZoneInfo(tz_name or settings.APP_TIMEZONE)
    current = now or dt.datetime.now(dt.timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=dt.timezone.utc)
    local = current.astimezone(tz)
    start = local.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start.astimezone(dt.timezone.utc), end.astimezone(dt.timezone.utc)


def get_monthly_invoice_count(db: Session, user_id: int, now: dt.datetime | None = None) -> int:
    start, end = month_window(now)
    stmt = (
        select(func.count(models.Invoice.id))
        .where(models.Invoice.user_id == user_id)
        .where(models.Invoice.created_at >= start)
        .where(models.Invoice.created_at < end)
    )
    return db.scalar(stmt) or 0


def get_client_count(db: Session, user_id: int) -> int:
    stmt = select(func.count(models.Client.id)).where(models.Client.user_id == user_id)
    return db.scalar(stmt) or 0


def get_user_plan_profile(db: Session, user_id: int, lock: bool = False) -> PlanProfile:
    """Read the billing fields the entitlement engine needs.

    With `lock=True` the user's row is selected FOR UPDATE so a creation
    flow can count and insert without another request for the same user
    slipping in between (PostgreSQL; SQLite ignores the lock).
    """
    stmt = select(models.User).where(models.User.id == user_id)
    if lock:
        stmt = stmt.with_for_update()
    user = db.scalar(stmt)
    if user is None:
        raise UserNotFoundError(str(user_id))
    return PlanProfile(
        plan=user.plan,
        subscription_status=user.subscription_status,
        current_period_end=user.current_period_end,
    )
