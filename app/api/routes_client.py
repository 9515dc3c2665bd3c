from fastapi import APIRouter

from app.api.dependencies import CurrentUserDep, DbDep, PlanAccessDep
from app.models import schemas
from app.services.client_service import ClientService

router = APIRouter()


@router.post("/", response_model=schemas.ClientOut)
def create_client(data: schemas.ClientCreate, current_user_id: CurrentUserDep, db: DbDep, plan_access: PlanAccessDep):
    """Add a client; 403 once the plan's client limit is reached."""
    return ClientService(db, plan_access).create_client(current_user_id, data.model_dump())


@router.get("/", response_model=list[schemas.ClientOut])
def list_clients(current_user_id: CurrentUserDep, db: DbDep, plan_access: PlanAccessDep):
    return ClientService(db, plan_access).list_clients(current_user_id)
