from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from crud import charges as crud
from schemas.charges import DispatchCharge, DispatchChargeCreate
from utils.auth_utils import get_current_user, get_user_identifier
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/dispatch-charges", tags=["Dispatch Charges"])


@router.post("/", response_model=DispatchCharge, status_code=status.HTTP_201_CREATED)
def post_dispatch_charge(
    charge: DispatchChargeCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    """Add an ice/cooling, transport or other charge on top of a loading."""
    return crud.post_dispatch_charge(db, charge, tenant_id, get_user_identifier(user))


@router.get("/", response_model=List[DispatchCharge])
def list_dispatch_charges(
    source_record_id: Optional[int] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud.get_dispatch_charges(db, tenant_id, source_record_id)
