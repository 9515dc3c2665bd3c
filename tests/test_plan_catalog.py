"""Tests for the plan catalog."""
import pytest

from app.services.plan_access import (
    DEFAULT_PLAN_CATALOG,
    UNBOUNDED,
    Feature,
    LimitKey,
    PlanCatalog,
    PlanLimits,
    PlanTier,
)


def test_default_catalog_tiers_are_ordered():
    assert DEFAULT_PLAN_CATALOG.tiers == (PlanTier.FREE, PlanTier.PRO)
    assert DEFAULT_PLAN_CATALOG.base_tier is PlanTier.FREE
    assert DEFAULT_PLAN_CATALOG.top_tier is PlanTier.PRO
    assert DEFAULT_PLAN_CATALOG.rank(PlanTier.FREE) < DEFAULT_PLAN_CATALOG.rank(PlanTier.PRO)


def test_free_limits():
    free = DEFAULT_PLAN_CATALOG.get_limits(PlanTier.FREE)
    assert free.max_invoices_per_month == 5
    assert free.max_clients == 3
    assert free.max_templates == 1
    for feature in Feature:
        assert free.has(feature) is False


def test_pro_limits():
    pro = DEFAULT_PLAN_CATALOG.get_limits(PlanTier.PRO)
    assert pro.max_invoices_per_month == UNBOUNDED
    assert pro.max_templates == UNBOUNDED
    assert pro.max_clients == UNBOUNDED
    for feature in Feature:
        assert pro.has(feature) is True


def test_default_catalog_is_monotonic():
    """A higher tier never has a lower limit or loses a feature."""
    tiers = DEFAULT_PLAN_CATALOG.tiers
    for lower, higher in zip(tiers, tiers[1:]):
        low = DEFAULT_PLAN_CATALOG.get_limits(lower)
        high = DEFAULT_PLAN_CATALOG.get_limits(higher)
        for key in LimitKey:
            assert high.limit(key) >= low.limit(key)
        for feature in Feature:
            assert not (low.has(feature) and not high.has(feature))


def test_premium_tiers():
    assert DEFAULT_PLAN_CATALOG.is_premium(PlanTier.FREE) is False
    assert DEFAULT_PLAN_CATALOG.is_premium(PlanTier.PRO) is True
    assert DEFAULT_PLAN_CATALOG.lowest_premium_tier() is PlanTier.PRO


def test_minimum_tier_for_feature():
    assert DEFAULT_PLAN_CATALOG.minimum_tier_for_feature(Feature.PDF_EXPORT) is PlanTier.PRO


def test_minimum_tier_for_limit():
    assert DEFAULT_PLAN_CATALOG.minimum_tier_for_limit(LimitKey.MAX_INVOICES_PER_MONTH, 5) is PlanTier.FREE
    assert DEFAULT_PLAN_CATALOG.minimum_tier_for_limit(LimitKey.MAX_INVOICES_PER_MONTH, 6) is PlanTier.PRO


def test_minimum_tier_falls_back_to_top_tier():
    catalog = PlanCatalog([(PlanTier.FREE, PlanLimits(5, 3, 1)), (PlanTier.PRO, PlanLimits(50, 50, 5))])
    # No tier allows 51 clients; the top tier is the best available upgrade
    assert catalog.minimum_tier_for_limit(LimitKey.MAX_CLIENTS, 51) is PlanTier.PRO


def test_default_pro_clients_are_unbounded():
    assert DEFAULT_PLAN_CATALOG.minimum_tier_for_limit(LimitKey.MAX_CLIENTS, 1_000_000) is PlanTier.PRO


def test_to_dict_serializes_unbounded_as_none():
    plans = DEFAULT_PLAN_CATALOG.to_dict()
    assert [p["tier"] for p in plans] == ["free", "pro"]
    pro = plans[1]["limits"]
    assert pro["max_invoices_per_month"] is None
    assert pro["max_clients"] is None
    assert pro["can_export_pdf"] is True


def test_catalog_rejects_non_monotonic_limits():
    with pytest.raises(ValueError, match="lower"):
        PlanCatalog(
            [
                (PlanTier.FREE, PlanLimits(max_invoices_per_month=10, max_clients=3, max_templates=1)),
                (PlanTier.PRO, PlanLimits(max_invoices_per_month=5, max_clients=3, max_templates=1)),
            ]
        )


def test_catalog_rejects_lost_feature():
    with pytest.raises(ValueError, match="must not lose"):
        PlanCatalog(
            [
                (PlanTier.FREE, PlanLimits(5, 3, 1, can_export_pdf=True)),
                (PlanTier.PRO, PlanLimits(10, 3, 1)),
            ]
        )


def test_catalog_rejects_duplicates_and_empty():
    with pytest.raises(ValueError):
        PlanCatalog([])
    limits = PlanLimits(5, 3, 1)
    with pytest.raises(ValueError):
        PlanCatalog([(PlanTier.FREE, limits), (PlanTier.FREE, limits)])


def test_catalog_rejects_alias_for_unknown_tier():
    with pytest.raises(ValueError):
        PlanCatalog([(PlanTier.FREE, PlanLimits(5, 3, 1))], aliases={PlanTier.PRO: ("pro",)})


def test_plan_limits_reject_negative_or_fractional():
    with pytest.raises(ValueError):
        PlanLimits(max_invoices_per_month=-1, max_clients=3, max_templates=1)
    with pytest.raises(ValueError):
        PlanLimits(max_invoices_per_month=1.5, max_clients=3, max_templates=1)


def test_three_tier_catalog():
    catalog = PlanCatalog(
        [
            (PlanTier.FREE, PlanLimits(5, 3, 1)),
            (PlanTier.STARTER, PlanLimits(20, 10, 2, can_export_pdf=True)),
            (PlanTier.PRO, PlanLimits(UNBOUNDED, 50, UNBOUNDED, can_export_pdf=True, can_use_recurring=True)),
        ]
    )
    assert catalog.lowest_premium_tier() is PlanTier.STARTER
    assert catalog.minimum_tier_for_feature(Feature.PDF_EXPORT) is PlanTier.STARTER
    assert catalog.minimum_tier_for_feature(Feature.RECURRING_INVOICES) is PlanTier.PRO
    assert catalog.minimum_tier_for_limit(LimitKey.MAX_INVOICES_PER_MONTH, 21) is PlanTier.PRO
    assert PlanTier.BUSINESS not in catalog
