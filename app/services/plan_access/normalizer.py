"""Map raw plan strings from billing or legacy rows to a catalog tier."""
from __future__ import annotations

from app.services.plan_access.catalog import DEFAULT_PLAN_CATALOG, PlanCatalog, PlanTier


def normalize_plan(raw: str | None, catalog: PlanCatalog = DEFAULT_PLAN_CATALOG) -> PlanTier:
    """Return the tier a plan string refers to.

    Matching is a case-insensitive substring test against each tier's
    aliases, highest tier first, so "Business Advanced" and "growth-monthly"
    both land on pro with the default catalog. Anything unrecognized,
    including None and "", is the base (free) tier.
    """
    if not raw:
        return catalog.base_tier
    normalized = raw.strip().lower()
    if not normalized:
        return catalog.base_tier

    for tier in reversed(catalog.tiers[1:]):
        if any(alias in normalized for alias in catalog.aliases[tier]):
            return tier
    return catalog.base_tier
