from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging

from database import get_db
from crud import payments as crud
from models.payments import PaymentKind
from schemas.payments import Payment, PaymentCreate, ProofDownloadUrl, ProofUploadRequest, ProofUploadUrl
from utils.auth_utils import get_current_user, get_user_identifier, require_group
from utils.s3_utils import generate_presigned_download_url, generate_presigned_upload_url
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/payments", tags=["Payments"])
logger = logging.getLogger("payments")

PAYMENT_GROUPS = ["admin", "payment-group"]


@router.post("/proof-upload-url", response_model=ProofUploadUrl)
def create_proof_upload_url(
    request: ProofUploadRequest,
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    """Pre-signed URL for uploading a payment proof; save the returned s3_path as image_url."""
    try:
        return generate_presigned_upload_url(tenant_id, request.filename)
    except RuntimeError as e:
        logger.error(f"Proof upload URL failed for tenant {tenant_id}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not generate upload URL")


@router.get("/proof-download-url", response_model=ProofDownloadUrl)
def get_proof_download_url(
    s3_path: str,
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    try:
        return {"download_url": generate_presigned_download_url(tenant_id, s3_path)}
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RuntimeError as e:
        logger.error(f"Proof download URL failed for tenant {tenant_id}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not generate download URL")


@router.post("/{kind}", response_model=Payment, status_code=status.HTTP_201_CREATED)
def record_payment(
    kind: PaymentKind,
    payment: PaymentCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_group(PAYMENT_GROUPS)),
    tenant_id: str = Depends(get_tenant_id)
):
    """Record a payment received from a client or paid to a farmer/agent."""
    return crud.record_payment(db, kind, payment, tenant_id, get_user_identifier(user))


@router.get("/{kind}", response_model=List[Payment])
def list_payments(
    kind: PaymentKind,
    party_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud.get_payments(db, kind, tenant_id, party_id, start_date, end_date, skip, limit)


@router.get("/{kind}/{payment_id}", response_model=Payment)
def get_payment(kind: PaymentKind, payment_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return crud.get_payment(db, kind, payment_id, tenant_id)
