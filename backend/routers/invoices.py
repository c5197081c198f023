from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from database import get_db
from crud import invoices as crud
from models.payments import PaymentKind
from schemas.invoices import Invoice, InvoiceUpsert
from utils.auth_utils import get_user_identifier, require_group
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.put("/{kind}", response_model=Invoice)
def upsert_invoice(
    kind: PaymentKind,
    invoice: InvoiceUpsert,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(["admin", "payment-group"])),
    tenant_id: str = Depends(get_tenant_id)
):
    """Issue or re-issue the invoice for a payment; the invoice number never changes."""
    return crud.upsert_invoice(db, kind, invoice, tenant_id, get_user_identifier(user))


@router.get("/{kind}/by-payment/{payment_id}", response_model=Invoice)
def get_invoice_by_payment(kind: PaymentKind, payment_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return crud.get_invoice_by_payment(db, kind, payment_id, tenant_id)


@router.get("/{kind}/by-payment/{payment_id}/pdf")
def get_invoice_pdf(kind: PaymentKind, payment_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    pdf_bytes = crud.render_invoice(db, kind, payment_id, tenant_id)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{kind.value}_invoice_{payment_id}.pdf"'},
    )
