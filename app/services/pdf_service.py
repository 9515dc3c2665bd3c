from __future__ import annotations

import logging
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from sqlalchemy.orm import Session

from app.models.models import Invoice
from app.services.invoice_service import InvoiceService
from app.services.plan_access import PlanAccessService, ProtectedAction
from app.services.template_service import get_template
from app.utils.feature_gate import FeatureGate

logger = logging.getLogger(__name__)


class PDFService:
    def __init__(self, db: Session, plan_access: PlanAccessService):
        self.db = db
        self.plan_access = plan_access

    def export_invoice_pdf(self, user_id: int, invoice_id: str) -> tuple[Invoice, bytes]:
        """Render an invoice to PDF if the plan allows exporting it.

        PDF export is a paid feature, and the invoice's template must still be
        unlocked for the user's current plan.
        """
        invoice = InvoiceService(self.db, self.plan_access).get_invoice(user_id, invoice_id)
        gate = FeatureGate(self.db, user_id, self.plan_access)
        gate.require(ProtectedAction.EXPORT_PDF)
        gate.require(ProtectedAction.USE_TEMPLATE, index=get_template(invoice.template_id).index)
        pdf_bytes = self.render_invoice(invoice)
        logger.info("Exported PDF for %s (%d bytes)", invoice.invoice_id, len(pdf_bytes))
        return invoice, pdf_bytes

    def render_invoice(self, invoice: Invoice) -> bytes:
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=A4)
        c.setTitle(f"Invoice {invoice.invoice_id}")
        c.setFont("Helvetica-Bold", 16)
        c.drawString(40, 800, f"Invoice {invoice.invoice_id}")
        c.setFont("Helvetica", 12)
        y = 780
        if invoice.client is not None:
            c.drawString(40, y, f"Bill to: {invoice.client.name}")
            y -= 20
        c.drawString(40, y, f"Amount: {invoice.currency} {invoice.amount:,.2f}")
        y -= 20
        if invoice.due_date:
            c.drawString(40, y, f"Due: {invoice.due_date:%Y-%m-%d}")
            y -= 20
        if invoice.notes:
            c.setFont("Helvetica", 10)
            c.drawString(40, y, invoice.notes[:120])
        c.showPage()
        c.save()
        return buffer.getvalue()
