"""Read-only entitlement endpoints used by the UI to show limits and upgrade prompts."""
from fastapi import APIRouter, HTTPException, Query

from app.api.dependencies import FeatureGateDep, PlanAccessDep
from app.models import schemas
from app.services.plan_access import ProtectedAction

router = APIRouter()


@router.get("/entitlements", response_model=schemas.EntitlementSummaryOut)
def get_entitlements(gate: FeatureGateDep):
    """The caller's plan, the limits in force right now and current usage."""
    service = gate.service
    profile = gate.profile
    tier = service.normalize_plan(profile.plan)
    effective = service.effective_tier(profile.plan, profile.subscription_status, profile.current_period_end)
    premium = service.check_premium_access(profile.plan, profile.subscription_status, profile.current_period_end)
    return {
        "plan": profile.plan,
        "tier": tier.value,
        "effective_tier": effective.value,
        "subscription_status": profile.subscription_status,
        "subscription_active": service.is_subscription_active(
            profile.subscription_status, profile.current_period_end
        ),
        "has_premium_access": premium.allowed,
        "plan_limits": service.catalog.get_limits(tier).to_dict(),
        "effective_limits": service.catalog.get_limits(effective).to_dict(),
        "usage": {
            "invoices_this_month": gate.current_usage(ProtectedAction.CREATE_INVOICE),
            "clients": gate.current_usage(ProtectedAction.CREATE_CLIENT),
        },
    }


@router.get("/entitlements/actions/{action}", response_model=schemas.ActionCheckOut)
def check_action(
    action: str,
    gate: FeatureGateDep,
    template_index: int | None = Query(default=None, ge=0),
):
    """Dry-run one protected action without performing it."""
    try:
        protected = ProtectedAction(action)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown action '{action}'") from exc
    if protected is ProtectedAction.USE_TEMPLATE and template_index is None:
        raise HTTPException(status_code=400, detail="template_index is required for use_template")

    decision, count = gate.evaluate(protected, index=template_index)
    result = decision.result
    return {
        "action": protected.value,
        "allowed": result.allowed,
        "reason": result.reason,
        "upgrade_required": result.upgrade_required.value if result.upgrade_required else None,
        "denial_code": decision.code.value if decision.code else None,
        "current_count": count,
        "limit": decision.limit,
    }


@router.get("/plans", response_model=list[schemas.PlanTierOut])
def list_plans(plan_access: PlanAccessDep):
    """Public plan catalog, lowest tier first."""
    return plan_access.catalog.to_dict()
