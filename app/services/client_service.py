from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app import metrics
from app.models import models
from app.services.plan_access import PlanAccessService, ProtectedAction
from app.utils.feature_gate import FeatureGate

logger = logging.getLogger(__name__)


class ClientService:
    """Client records owned by a user, capped by the user's plan."""

    def __init__(self, db: Session, plan_access: PlanAccessService):
        self.db = db
        self.plan_access = plan_access

    def create_client(self, user_id: int, data: dict[str, object]) -> models.Client:
        """Insert a client if the plan's client limit allows one more."""
        gate = FeatureGate(self.db, user_id, self.plan_access, lock=True)
        try:
            gate.require(ProtectedAction.CREATE_CLIENT)
            client = models.Client(
                user_id=user_id,
                name=str(data["name"]),
                email=data.get("email"),
                phone=data.get("phone"),
                address=data.get("address"),
            )
            self.db.add(client)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(client)
        metrics.client_created()
        logger.info("Created client %s for user %s", client.id, user_id)
        return client

    def list_clients(self, user_id: int) -> list[models.Client]:
        stmt = select(models.Client).where(models.Client.user_id == user_id).order_by(models.Client.id)
        return list(self.db.scalars(stmt))
