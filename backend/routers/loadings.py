# backend/routers/loadings.py

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date

from database import get_db
from crud import loadings as crud
from models.loadings import LoadingSource
from schemas.loadings import (
    ItemDeleteResult,
    Loading,
    LoadingCreate,
    LoadingItem,
    LoadingItemCreate,
    LoadingItemUpdate,
)
from utils.auth_utils import get_current_user, get_user_identifier
from utils.tenancy import get_tenant_id

router = APIRouter(prefix="/loadings", tags=["Loadings"])


@router.post("/", response_model=Loading, status_code=status.HTTP_201_CREATED)
def create_loading(
    loading: LoadingCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    """Create a farmer, agent or client loading together with its items."""
    return crud.create_loading(db, loading, tenant_id, get_user_identifier(user))


@router.get("/", response_model=List[Loading])
def list_loadings(
    source: Optional[LoadingSource] = None,
    party_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud.get_loadings(db, tenant_id, source, party_id, start_date, end_date, skip, limit)


@router.get("/{loading_id}", response_model=Loading)
def get_loading(loading_id: int, db: Session = Depends(get_db), tenant_id: str = Depends(get_tenant_id)):
    return crud.get_loading(db, loading_id, tenant_id)


@router.post("/{loading_id}/items", response_model=LoadingItem, status_code=status.HTTP_201_CREATED)
def add_item(
    loading_id: int,
    item: LoadingItemCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud.add_item(db, loading_id, item, tenant_id, get_user_identifier(user))


@router.post("/{loading_id}/recompute", response_model=Loading)
def recompute_loading(
    loading_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    """Re-derive the loading's totals and grand total from its items and charges."""
    return crud.recompute_loading(db, loading_id, tenant_id, get_user_identifier(user))


@router.patch("/items/{item_id}", response_model=LoadingItem)
def update_item(
    item_id: int,
    item: LoadingItemUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    return crud.update_item(db, item_id, item, tenant_id, get_user_identifier(user))


@router.delete("/items/{item_id}", response_model=ItemDeleteResult)
def delete_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(get_current_user),
    tenant_id: str = Depends(get_tenant_id)
):
    """Delete an item. Deleting the last item of a loading deletes the loading too."""
    return crud.delete_item(db, item_id, tenant_id, get_user_identifier(user))
