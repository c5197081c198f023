from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from crud import parties as crud
from models.parties import PartyType
from schemas.parties import Party, PartyCreate, PartyUpdate
from utils.auth_utils import get_current_user, get_user_identifier
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/parties", tags=["Parties"])


@router.post("/", response_model=Party, status_code=status.HTTP_201_CREATED)
def create_party(
    party: PartyCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    """Register a farmer, agent or client."""
    return crud.create_party(db, party, tenant_id, get_user_identifier(user))


@router.get("/", response_model=List[Party])
def list_parties(
    party_type: Optional[PartyType] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud.get_parties(db, tenant_id, party_type, skip, limit)


@router.get("/{party_id}", response_model=Party)
def get_party(party_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return crud.get_party(db, party_id, tenant_id)


@router.patch("/{party_id}", response_model=Party)
def update_party(
    party_id: int,
    party: PartyUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud.update_party(db, party_id, party, tenant_id, get_user_identifier(user))
