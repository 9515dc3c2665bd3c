"""Plan entitlement engine.

Sub-modules:
- catalog: tiers, limit keys and the immutable Tier -> Limits table
- normalizer: raw plan string -> tier
- validity: subscription liveness
- evaluator: feature, count, ordinal and premium checks
- policy: one composite decision per protected action
"""
from .catalog import (
    DEFAULT_PLAN_CATALOG,
    UNBOUNDED,
    Feature,
    LimitKey,
    PlanCatalog,
    PlanLimits,
    PlanTier,
    build_default_catalog,
)
from .evaluator import AccessCheckResult, PlanAccessService
from .normalizer import normalize_plan
from .policy import ActionDecision, DenialCode, PlanProfile, ProtectedAction, evaluate_action
from .validity import ACTIVE_STATUSES, is_subscription_active

__all__ = [
    "DEFAULT_PLAN_CATALOG",
    "UNBOUNDED",
    "Feature",
    "LimitKey",
    "PlanCatalog",
    "PlanLimits",
    "PlanTier",
    "build_default_catalog",
    "AccessCheckResult",
    "PlanAccessService",
    "normalize_plan",
    "ActionDecision",
    "DenialCode",
    "PlanProfile",
    "ProtectedAction",
    "evaluate_action",
    "ACTIVE_STATUSES",
    "is_subscription_active",
]
