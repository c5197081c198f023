from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from crud import charges as crud
from schemas.charges import PackingAmount, PackingAmountCreate
from utils.auth_utils import get_current_user, get_user_identifier
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/packing-amounts", tags=["Packing Amounts"])


@router.post("/", response_model=PackingAmount, status_code=status.HTTP_201_CREATED)
def post_packing_amount(
    packing: PackingAmountCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud.post_packing_amount(db, packing, tenant_id, get_user_identifier(user))


@router.get("/", response_model=List[PackingAmount])
def list_packing_amounts(
    source_record_id: Optional[int] = None,
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud.get_packing_amounts(db, tenant_id, source_record_id)
