from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app import metrics
from app.core.exceptions import InvoiceNotFoundError
from app.models import models
from app.services.plan_access import PlanAccessService, ProtectedAction
from app.services.template_service import DEFAULT_TEMPLATE_ID, get_template
from app.utils.feature_gate import FeatureGate
from app.utils.id_generator import generate_id

logger = logging.getLogger(__name__)


class InvoiceService:
    """Invoice creation and lookup, gated by the owner's plan."""

    def __init__(self, db: Session, plan_access: PlanAccessService):
        self.db = db
        self.plan_access = plan_access

    def create_invoice(self, user_id: int, data: dict[str, object]) -> models.Invoice:
        """Create an invoice after the plan checks pass.

        The monthly count, the template position and (for recurring invoices)
        the recurring feature are checked under a lock on the user's row, and
        the insert commits in the same transaction.

        Raises:
            PlanAccessDeniedError: a check failed; nothing is written
            TemplateNotFoundError: unknown template id
            ValueError: client_id does not belong to the user
        """
        template = get_template(str(data.get("template_id") or DEFAULT_TEMPLATE_ID))
        gate = FeatureGate(self.db, user_id, self.plan_access, lock=True)
        try:
            gate.require(ProtectedAction.CREATE_INVOICE)
            gate.require(ProtectedAction.USE_TEMPLATE, index=template.index)
            if data.get("is_recurring"):
                gate.require(ProtectedAction.ENABLE_RECURRING)

            client = self._resolve_client(user_id, data.get("client_id"))
            invoice = models.Invoice(
                invoice_id=generate_id("INV"),
                user_id=user_id,
                client=client,
                amount=Decimal(str(data.get("amount"))),
                currency=str(data.get("currency") or "USD").upper(),
                status="draft",
                template_id=template.id,
                is_recurring=bool(data.get("is_recurring")),
                recurrence_interval=data.get("recurrence_interval") if data.get("is_recurring") else None,
                notes=data.get("notes"),
                due_date=data.get("due_date"),
            )
            self.db.add(invoice)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(invoice)
        metrics.invoice_created()
        logger.info(
            "Created invoice %s | user=%s template=%s recurring=%s",
            invoice.invoice_id,
            user_id,
            invoice.template_id,
            invoice.is_recurring,
        )
        return invoice

    def _resolve_client(self, user_id: int, client_id: object) -> models.Client | None:
        if client_id is None:
            return None
        client = self.db.scalar(
            select(models.Client)
            .where(models.Client.id == client_id)
            .where(models.Client.user_id == user_id)
        )
        if client is None:
            raise ValueError(f"Client {client_id} not found")
        return client

    def list_invoices(self, user_id: int) -> list[models.Invoice]:
        stmt = (
            select(models.Invoice)
            .where(models.Invoice.user_id == user_id)
            .order_by(models.Invoice.created_at.desc(), models.Invoice.id.desc())
        )
        return list(self.db.scalars(stmt))

    def get_invoice(self, user_id: int, invoice_id: str) -> models.Invoice:
        invoice = self.db.scalar(
            select(models.Invoice)
            .where(models.Invoice.invoice_id == invoice_id)
            .where(models.Invoice.user_id == user_id)
        )
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice


def build_invoice_service(db: Session, plan_access: PlanAccessService) -> InvoiceService:
    """Factory used by the API layer."""
    return InvoiceService(db, plan_access)
