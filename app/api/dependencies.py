"""Common API dependencies."""
from typing import Annotated, TypeAlias

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.api.routes_auth import get_current_user_id
from app.db.session import get_db
from app.services.plan_access import PlanAccessService
from app.utils.feature_gate import FeatureGate

CurrentUserDep: TypeAlias = Annotated[int, Depends(get_current_user_id)]
DbDep: TypeAlias = Annotated[Session, Depends(get_db)]


def get_plan_access(request: Request) -> PlanAccessService:
    """Evaluator bound to the catalog the application was started with."""
    return request.app.state.plan_access


PlanAccessDep: TypeAlias = Annotated[PlanAccessService, Depends(get_plan_access)]


def get_feature_gate(current_user_id: CurrentUserDep, db: DbDep, plan_access: PlanAccessDep) -> FeatureGate:
    """Per-request gate for the authenticated user (read-only checks, no row lock)."""
    return FeatureGate(db, current_user_id, plan_access)


FeatureGateDep: TypeAlias = Annotated[FeatureGate, Depends(get_feature_gate)]
