"""Plan and entitlement response schemas.

Unbounded limits are serialized as null.
"""
from __future__ import annotations

from pydantic import BaseModel


class PlanLimitsOut(BaseModel):
    max_invoices_per_month: int | None
    max_clients: int | None
    max_templates: int | None
    can_use_ai: bool
    can_export_pdf: bool
    can_use_recurring: bool
    can_use_custom_branding: bool
    can_use_advanced_analytics: bool
    can_use_team_access: bool
    can_use_automated_reminders: bool
    can_use_integrations: bool
    can_use_api_access: bool
    priority_support: bool


class PlanTierOut(BaseModel):
    tier: str
    limits: PlanLimitsOut


class UsageOut(BaseModel):
    invoices_this_month: int
    clients: int


class EntitlementSummaryOut(BaseModel):
    plan: str | None
    tier: str
    effective_tier: str
    subscription_status: str | None
    subscription_active: bool
    has_premium_access: bool
    plan_limits: PlanLimitsOut
    effective_limits: PlanLimitsOut
    usage: UsageOut


class ActionCheckOut(BaseModel):
    action: str
    allowed: bool
    reason: str | None = None
    upgrade_required: str | None = None
    denial_code: str | None = None
    current_count: int | None = None
    limit: int | None = None


class TemplateOut(BaseModel):
    id: str
    name: str
    index: int
    is_premium: bool
    unlocked: bool
    reason: str | None = None
    upgrade_required: str | None = None
