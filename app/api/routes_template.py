from fastapi import APIRouter

from app.api.dependencies import FeatureGateDep
from app.models import schemas
from app.services.template_service import TemplateService

router = APIRouter()


@router.get("/", response_model=list[schemas.TemplateOut])
def list_templates(gate: FeatureGateDep):
    """All invoice templates, flagged with whether the caller's plan unlocks them."""
    return TemplateService(gate).list_templates()


@router.post("/{template_id}/select", response_model=schemas.TemplateOut)
def select_template(template_id: str, gate: FeatureGateDep):
    template = TemplateService(gate).select_template(template_id)
    return {
        "id": template.id,
        "name": template.name,
        "index": template.index,
        "is_premium": template.is_premium,
        "unlocked": True,
    }
