"""Pydantic schemas for API requests and responses.

Sub-modules:
- invoice: Invoice schemas
- client: Client schemas
- entitlement: Plan, usage and access-check schemas
"""
# Invoice schemas
from .invoice import (
    InvoiceCreate,
    InvoiceOut,
)

# Client schemas
from .client import (
    ClientCreate,
    ClientOut,
)

# Entitlement schemas
from .entitlement import (
    ActionCheckOut,
    EntitlementSummaryOut,
    PlanLimitsOut,
    PlanTierOut,
    TemplateOut,
    UsageOut,
)

__all__ = [
    "InvoiceCreate",
    "InvoiceOut",
    "ClientCreate",
    "ClientOut",
    "ActionCheckOut",
    "EntitlementSummaryOut",
    "PlanLimitsOut",
    "PlanTierOut",
    "TemplateOut",
    "UsageOut",
]
