import logging

from fastapi import APIRouter, HTTPException, Response

from app.api.dependencies import CurrentUserDep, DbDep, PlanAccessDep
from app.models import schemas
from app.services.invoice_service import build_invoice_service
from app.services.pdf_service import PDFService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/", response_model=schemas.InvoiceOut)
def create_invoice(
    data: schemas.InvoiceCreate,
    current_user_id: CurrentUserDep,
    db: DbDep,
    plan_access: PlanAccessDep,
):
    """Create an invoice.

    Rejected with 403 when the monthly invoice limit is reached, the template
    is locked on the user's plan, or a recurring invoice is requested without
    the recurring feature.
    """
    svc = build_invoice_service(db, plan_access)
    try:
        invoice = svc.create_invoice(current_user_id, data.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return invoice


@router.get("/", response_model=list[schemas.InvoiceOut])
def list_invoices(current_user_id: CurrentUserDep, db: DbDep, plan_access: PlanAccessDep):
    return build_invoice_service(db, plan_access).list_invoices(current_user_id)


@router.get("/{invoice_id}", response_model=schemas.InvoiceOut)
def get_invoice(invoice_id: str, current_user_id: CurrentUserDep, db: DbDep, plan_access: PlanAccessDep):
    return build_invoice_service(db, plan_access).get_invoice(current_user_id, invoice_id)


@router.get("/{invoice_id}/pdf")
def export_invoice_pdf(invoice_id: str, current_user_id: CurrentUserDep, db: DbDep, plan_access: PlanAccessDep):
    """Download the invoice as a PDF (paid plans only)."""
    invoice, pdf_bytes = PDFService(db, plan_access).export_invoice_pdf(current_user_id, invoice_id)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{invoice.invoice_id}.pdf"'},
    )
