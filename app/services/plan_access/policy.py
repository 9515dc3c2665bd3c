"""One composite entitlement check per protected action.

Call sites never combine evaluator checks themselves; they ask for a
ProtectedAction and get a single decision, so two call sites guarding the
same action cannot disagree.
"""
from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass

from app.services.plan_access.catalog import UNBOUNDED, Feature, LimitKey
from app.services.plan_access.evaluator import AccessCheckResult, PlanAccessService


class ProtectedAction(str, enum.Enum):
    CREATE_INVOICE = "create_invoice"
    CREATE_CLIENT = "create_client"
    USE_TEMPLATE = "use_template"
    EXPORT_PDF = "export_pdf"
    ENABLE_RECURRING = "enable_recurring"
    AI_GENERATION = "ai_generation"
    CUSTOM_BRANDING = "custom_branding"
    ADVANCED_ANALYTICS = "advanced_analytics"
    TEAM_ACCESS = "team_access"
    AUTOMATED_REMINDERS = "automated_reminders"
    INTEGRATIONS = "integrations"
    API_ACCESS = "api_access"


class DenialCode(str, enum.Enum):
    LIMIT_REACHED = "LIMIT_REACHED"
    TEMPLATE_LOCKED = "TEMPLATE_LOCKED"
    FEATURE_LOCKED = "FEATURE_LOCKED"
    SUBSCRIPTION_INACTIVE = "SUBSCRIPTION_INACTIVE"


COUNT_ACTIONS: dict[ProtectedAction, LimitKey] = {
    ProtectedAction.CREATE_INVOICE: LimitKey.MAX_INVOICES_PER_MONTH,
    ProtectedAction.CREATE_CLIENT: LimitKey.MAX_CLIENTS,
}

ORDINAL_ACTIONS: dict[ProtectedAction, LimitKey] = {
    ProtectedAction.USE_TEMPLATE: LimitKey.MAX_TEMPLATES,
}

FEATURE_ACTIONS: dict[ProtectedAction, Feature] = {
    ProtectedAction.EXPORT_PDF: Feature.PDF_EXPORT,
    ProtectedAction.ENABLE_RECURRING: Feature.RECURRING_INVOICES,
    ProtectedAction.AI_GENERATION: Feature.AI_GENERATION,
    ProtectedAction.CUSTOM_BRANDING: Feature.CUSTOM_BRANDING,
    ProtectedAction.ADVANCED_ANALYTICS: Feature.ADVANCED_ANALYTICS,
    ProtectedAction.TEAM_ACCESS: Feature.TEAM_ACCESS,
    ProtectedAction.AUTOMATED_REMINDERS: Feature.AUTOMATED_REMINDERS,
    ProtectedAction.INTEGRATIONS: Feature.INTEGRATIONS,
    ProtectedAction.API_ACCESS: Feature.API_ACCESS,
}


@dataclass(frozen=True)
class PlanProfile:
    """What the store knows about a user's billing state."""
    plan: str | None
    subscription_status: str | None
    current_period_end: dt.datetime | None


@dataclass(frozen=True)
class ActionDecision:
    action: ProtectedAction
    result: AccessCheckResult
    code: DenialCode | None = None
    limit: int | None = None

    @property
    def allowed(self) -> bool:
        return self.result.allowed


def evaluate_action(
    service: PlanAccessService,
    action: ProtectedAction,
    profile: PlanProfile,
    *,
    count: int | None = None,
    index: int | None = None,
    now: dt.datetime | None = None,
) -> ActionDecision:
    """Decide one protected action for one user.

    Count actions need `count` (usage before the action) and ordinal actions
    need `index`; both are evaluated against the effective tier, so a lapsed
    paid subscription falls back to free limits instead of losing everything.
    """
    plan, status, period_end = profile.plan, profile.subscription_status, profile.current_period_end

    if action in COUNT_ACTIONS or action in ORDINAL_ACTIONS:
        tier = service.effective_tier(plan, status, period_end, now)
        if action in COUNT_ACTIONS:
            if count is None:
                raise ValueError(f"{action.value} needs the current usage count")
            key = COUNT_ACTIONS[action]
            result = service.check_count_limit(tier.value, key, count)
            code = DenialCode.LIMIT_REACHED
        else:
            if index is None:
                raise ValueError(f"{action.value} needs the item index")
            key = ORDINAL_ACTIONS[action]
            result = service.check_ordinal_limit(tier.value, key, index)
            code = DenialCode.TEMPLATE_LOCKED

        limit = service.catalog.get_limits(tier).limit(key)
        limit_value = None if limit == UNBOUNDED else int(limit)
        if result.allowed:
            return ActionDecision(action, result, limit=limit_value)

        subscribed = service.normalize_plan(plan)
        if subscribed != tier:
            # Lapsed paid plan: renewing is the way out, not a new upgrade
            lapsed = service.check_premium_access(plan, status, period_end, now)
            return ActionDecision(action, lapsed, DenialCode.SUBSCRIPTION_INACTIVE, limit_value)
        return ActionDecision(action, result, code, limit_value)

    feature = FEATURE_ACTIONS[action]
    premium = service.check_premium_access(plan, status, period_end, now)
    if not premium.allowed:
        if service.catalog.is_premium(service.normalize_plan(plan)):
            return ActionDecision(action, premium, DenialCode.SUBSCRIPTION_INACTIVE)
        # Base tier: point the prompt at the first paid tier that carries this feature
        required = service.catalog.minimum_tier_for_feature(feature)
        if not service.catalog.is_premium(required):
            required = service.catalog.lowest_premium_tier()
        denied = AccessCheckResult.deny(f"This feature requires the {required.value} plan or higher", required)
        return ActionDecision(action, denied, DenialCode.FEATURE_LOCKED)

    result = service.check_feature(plan, feature)
    return ActionDecision(action, result, None if result.allowed else DenialCode.FEATURE_LOCKED)
