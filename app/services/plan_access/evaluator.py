"""Entitlement evaluator.

Every check takes the raw plan string exactly as stored on the profile and
normalizes it itself, so callers never hold a stale tier. All checks are
pure functions of their arguments plus the injected catalog: they never
raise and never touch the database. A denial is a normal return value.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any

from app.services.plan_access.catalog import (
    DEFAULT_PLAN_CATALOG,
    UNBOUNDED,
    Feature,
    LimitKey,
    PlanCatalog,
    PlanLimits,
    PlanTier,
)
from app.services.plan_access.normalizer import normalize_plan as _normalize
from app.services.plan_access.validity import is_subscription_active as _is_active

_LIMIT_REASONS = {
    LimitKey.MAX_INVOICES_PER_MONTH: "You've reached your limit of {limit} invoices per month. Upgrade to create more.",
    LimitKey.MAX_CLIENTS: "You've reached your limit of {limit} clients. Upgrade to add more.",
    LimitKey.MAX_TEMPLATES: "Your plan includes {limit} template(s). Upgrade to use more.",
}


@dataclass(frozen=True)
class AccessCheckResult:
    allowed: bool
    reason: str | None = None
    upgrade_required: PlanTier | None = None

    @classmethod
    def allow(cls) -> AccessCheckResult:
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str, upgrade_required: PlanTier) -> AccessCheckResult:
        return cls(allowed=False, reason=reason, upgrade_required=upgrade_required)

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "reason": self.reason,
            "upgrade_required": self.upgrade_required.value if self.upgrade_required else None,
        }


class PlanAccessService:
    """Answers entitlement questions against one plan catalog."""

    def __init__(self, catalog: PlanCatalog = DEFAULT_PLAN_CATALOG):
        self.catalog = catalog

    def normalize_plan(self, raw: str | None) -> PlanTier:
        return _normalize(raw, self.catalog)

    def get_plan_limits(self, raw: str | None) -> PlanLimits:
        return self.catalog.get_limits(self.normalize_plan(raw))

    def is_subscription_active(
        self,
        status: str | None,
        period_end: dt.datetime | str | None,
        now: dt.datetime | None = None,
    ) -> bool:
        return _is_active(status, period_end, now)

    def effective_tier(
        self,
        raw: str | None,
        status: str | None,
        period_end: dt.datetime | str | None,
        now: dt.datetime | None = None,
    ) -> PlanTier:
        """Tier whose limits apply right now: a lapsed paid tier drops to the base tier."""
        tier = self.normalize_plan(raw)
        if self.catalog.is_premium(tier) and not _is_active(status, period_end, now):
            return self.catalog.base_tier
        return tier

    def check_feature(self, raw: str | None, feature: Feature) -> AccessCheckResult:
        if self.get_plan_limits(raw).has(feature):
            return AccessCheckResult.allow()
        required = self.catalog.minimum_tier_for_feature(feature)
        return AccessCheckResult.deny(
            f"This feature requires the {required.value} plan or higher",
            required,
        )

    def check_count_limit(self, raw: str | None, key: LimitKey, current_count: int) -> AccessCheckResult:
        """Check whether one more item fits; `current_count` is the count before the action."""
        limit = self.get_plan_limits(raw).limit(key)
        if limit == UNBOUNDED or current_count < limit:
            return AccessCheckResult.allow()
        required = self.catalog.minimum_tier_for_limit(key, current_count + 1)
        return AccessCheckResult.deny(_LIMIT_REASONS[key].format(limit=int(limit)), required)

    def check_ordinal_limit(self, raw: str | None, key: LimitKey, item_index: int) -> AccessCheckResult:
        """Check a zero-based position against a "first N items" limit."""
        limit = self.get_plan_limits(raw).limit(key)
        if limit == UNBOUNDED or item_index < limit:
            return AccessCheckResult.allow()
        required = self.catalog.minimum_tier_for_limit(key, item_index + 1)
        return AccessCheckResult.deny(
            f"This template requires the {required.value} plan or higher",
            required,
        )

    def check_premium_access(
        self,
        raw: str | None,
        status: str | None,
        period_end: dt.datetime | str | None,
        now: dt.datetime | None = None,
    ) -> AccessCheckResult:
        """Gate for paid-only actions: needs a paid tier AND a live subscription."""
        tier = self.normalize_plan(raw)
        if not self.catalog.is_premium(tier):
            required = self.catalog.lowest_premium_tier()
            return AccessCheckResult.deny(
                f"This feature requires a higher plan. Upgrade to {required.value} to unlock it.",
                required,
            )
        if not _is_active(status, period_end, now):
            return AccessCheckResult.deny(
                "Your subscription has expired or is inactive. "
                f"Please renew your {tier.value} plan to continue using premium features.",
                tier,
            )
        return AccessCheckResult.allow()
