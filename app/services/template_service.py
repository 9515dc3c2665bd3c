"""Invoice template catalog and template access.

Templates unlock by fixed catalog position: a plan with max_templates = N
may use the templates at positions 0..N-1. Positions never change once
published, otherwise users would silently gain or lose templates.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from app.core.exceptions import TemplateNotFoundError
from app.services.plan_access import ProtectedAction, evaluate_action
from app.utils.feature_gate import FeatureGate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateInfo:
    id: str
    name: str
    index: int
    is_premium: bool


TEMPLATES: tuple[TemplateInfo, ...] = (
    TemplateInfo("modern", "Modern", 0, False),
    TemplateInfo("corporate", "Corporate", 1, True),
    TemplateInfo("creative", "Creative", 2, True),
    TemplateInfo("classic", "Classic", 3, True),
    TemplateInfo("minimal", "Minimal", 4, True),
)

_BY_ID = {t.id: t for t in TEMPLATES}

DEFAULT_TEMPLATE_ID = TEMPLATES[0].id


def get_template(template_id: str) -> TemplateInfo:
    template = _BY_ID.get(template_id)
    if template is None:
        raise TemplateNotFoundError(template_id)
    return template


class TemplateService:
    def __init__(self, gate: FeatureGate):
        self.gate = gate

    def list_templates(self) -> list[dict[str, object]]:
        """Every template with whether this user can use it right now."""
        profile = self.gate.profile
        listing = []
        for template in TEMPLATES:
            decision = evaluate_action(
                self.gate.service, ProtectedAction.USE_TEMPLATE, profile, index=template.index
            )
            result = decision.result
            listing.append(
                {
                    "id": template.id,
                    "name": template.name,
                    "index": template.index,
                    "is_premium": template.is_premium,
                    "unlocked": result.allowed,
                    "reason": result.reason,
                    "upgrade_required": result.upgrade_required.value if result.upgrade_required else None,
                }
            )
        return listing

    def select_template(self, template_id: str) -> TemplateInfo:
        """Raise PlanAccessDeniedError unless the template is unlocked."""
        template = get_template(template_id)
        self.gate.require(ProtectedAction.USE_TEMPLATE, index=template.index)
        logger.info("User %s selected template %s", self.gate.user_id, template.id)
        return template
