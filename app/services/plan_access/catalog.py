"""Plan catalog: the single Tier -> Limits table.

The catalog is an immutable object built once at startup and injected into
the evaluator. Limit lookups and the "minimum tier that unlocks X" search
both read from the same instance, so they cannot drift apart.

Ordering is the order tiers are listed in the catalog (lowest first). The
constructor rejects catalogs where a higher tier grants less than a lower
one, because the minimum-tier search relies on that.
"""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Iterable, Mapping

# Numeric limit value meaning "no cap"
UNBOUNDED = math.inf


class PlanTier(str, enum.Enum):
    """Known subscription tiers.

    Which of these exist, and in what order, is decided by the catalog; the
    shipped catalog uses FREE and PRO only.
    """
    FREE = "free"
    STARTER = "starter"
    PRO = "pro"
    BUSINESS = "business"
    ENTERPRISE = "enterprise"


class Feature(str, enum.Enum):
    """Boolean entitlements, valued by the PlanLimits attribute they read."""
    AI_GENERATION = "can_use_ai"
    PDF_EXPORT = "can_export_pdf"
    RECURRING_INVOICES = "can_use_recurring"
    CUSTOM_BRANDING = "can_use_custom_branding"
    ADVANCED_ANALYTICS = "can_use_advanced_analytics"
    TEAM_ACCESS = "can_use_team_access"
    AUTOMATED_REMINDERS = "can_use_automated_reminders"
    INTEGRATIONS = "can_use_integrations"
    API_ACCESS = "can_use_api_access"
    PRIORITY_SUPPORT = "priority_support"


class LimitKey(str, enum.Enum):
    """Numeric entitlements (counts and ordinal positions)."""
    MAX_INVOICES_PER_MONTH = "max_invoices_per_month"
    MAX_CLIENTS = "max_clients"
    MAX_TEMPLATES = "max_templates"


@dataclass(frozen=True)
class PlanLimits:
    max_invoices_per_month: float
    max_clients: float
    max_templates: float
    can_use_ai: bool = False
    can_export_pdf: bool = False
    can_use_recurring: bool = False
    can_use_custom_branding: bool = False
    can_use_advanced_analytics: bool = False
    can_use_team_access: bool = False
    can_use_automated_reminders: bool = False
    can_use_integrations: bool = False
    can_use_api_access: bool = False
    priority_support: bool = False

    def __post_init__(self) -> None:
        for key in LimitKey:
            value = getattr(self, key.value)
            if value != UNBOUNDED and (value < 0 or int(value) != value):
                raise ValueError(f"{key.value} must be a non-negative integer or UNBOUNDED, got {value!r}")

    def has(self, feature: Feature) -> bool:
        return bool(getattr(self, feature.value))

    def limit(self, key: LimitKey) -> float:
        return getattr(self, key.value)

    def to_dict(self) -> dict[str, int | bool | None]:
        """Serialize for API responses; unbounded limits become None."""
        data: dict[str, int | bool | None] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool):
                data[f.name] = value
            else:
                data[f.name] = None if value == UNBOUNDED else int(value)
        return data


class PlanCatalog:
    """Ordered, immutable mapping of tiers to their limits."""

    def __init__(
        self,
        entries: Iterable[tuple[PlanTier, PlanLimits]],
        aliases: Mapping[PlanTier, Iterable[str]] | None = None,
    ):
        ordered = tuple(entries)
        if not ordered:
            raise ValueError("Plan catalog needs at least one tier")
        tiers = tuple(tier for tier, _ in ordered)
        if len(set(tiers)) != len(tiers):
            raise ValueError("Plan catalog lists a tier more than once")

        self._tiers = tiers
        self._limits = MappingProxyType(dict(ordered))
        self._rank = MappingProxyType({tier: i for i, tier in enumerate(tiers)})

        alias_map = {tier: (tier.value,) for tier in tiers}
        for tier, words in (aliases or {}).items():
            if tier not in self._rank:
                raise ValueError(f"Alias given for tier '{tier.value}' which is not in the catalog")
            alias_map[tier] = (tier.value, *(w.lower() for w in words if w.lower() != tier.value))
        self._aliases = MappingProxyType(alias_map)

        self._check_monotonic()

    def _check_monotonic(self) -> None:
        for lower, higher in zip(self._tiers, self._tiers[1:]):
            low, high = self._limits[lower], self._limits[higher]
            for feature in Feature:
                if low.has(feature) and not high.has(feature):
                    raise ValueError(
                        f"Tier '{higher.value}' must not lose '{feature.value}' granted by '{lower.value}'"
                    )
            for key in LimitKey:
                if high.limit(key) < low.limit(key):
                    raise ValueError(
                        f"Tier '{higher.value}' has a lower '{key.value}' than '{lower.value}'"
                    )

    @property
    def tiers(self) -> tuple[PlanTier, ...]:
        return self._tiers

    @property
    def base_tier(self) -> PlanTier:
        return self._tiers[0]

    @property
    def top_tier(self) -> PlanTier:
        return self._tiers[-1]

    @property
    def aliases(self) -> Mapping[PlanTier, tuple[str, ...]]:
        return self._aliases

    def __contains__(self, tier: object) -> bool:
        return tier in self._rank

    def rank(self, tier: PlanTier) -> int:
        return self._rank[tier]

    def is_premium(self, tier: PlanTier) -> bool:
        """Every tier above the base tier is paid."""
        return self._rank[tier] > 0

    def lowest_premium_tier(self) -> PlanTier:
        return self._tiers[1] if len(self._tiers) > 1 else self._tiers[0]

    def get_limits(self, tier: PlanTier) -> PlanLimits:
        return self._limits[tier]

    def minimum_tier_for_feature(self, feature: Feature) -> PlanTier:
        for tier in self._tiers:
            if self._limits[tier].has(feature):
                return tier
        return self.top_tier

    def minimum_tier_for_limit(self, key: LimitKey, required: int) -> PlanTier:
        for tier in self._tiers:
            if self._limits[tier].limit(key) >= required:
                return tier
        return self.top_tier

    def to_dict(self) -> list[dict[str, object]]:
        return [
            {"tier": tier.value, "limits": self._limits[tier].to_dict()}
            for tier in self._tiers
        ]


FREE_LIMITS = PlanLimits(
    max_invoices_per_month=5,
    max_clients=3,
    max_templates=1,
)

# Pro absorbs every legacy paid name (growth, business, enterprise, advanced),
# so it carries every flag those plans used to grant.
PRO_LIMITS = PlanLimits(
    max_invoices_per_month=UNBOUNDED,
    max_clients=UNBOUNDED,
    max_templates=UNBOUNDED,
    can_use_ai=True,
    can_export_pdf=True,
    can_use_recurring=True,
    can_use_custom_branding=True,
    can_use_advanced_analytics=True,
    can_use_team_access=True,
    can_use_automated_reminders=True,
    can_use_integrations=True,
    can_use_api_access=True,
    priority_support=True,
)

PRO_ALIASES = ("pro", "growth", "business", "enterprise", "advanced")


def build_default_catalog() -> PlanCatalog:
    return PlanCatalog(
        [
            (PlanTier.FREE, FREE_LIMITS),
            (PlanTier.PRO, PRO_LIMITS),
        ],
        aliases={PlanTier.PRO: PRO_ALIASES},
    )


DEFAULT_PLAN_CATALOG = build_default_catalog()
