from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from crud.audit_log import create_audit_log
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict
from utils.exceptions import NotFoundError, ValidationError
from models.parties import Party, PartyType
from models.loadings import LoadingSource
from schemas import parties as schemas

logger = logging.getLogger("parties")

SOURCE_PARTY_TYPE = {
    LoadingSource.FARMER: PartyType.FARMER,
    LoadingSource.AGENT: PartyType.AGENT,
    LoadingSource.CLIENT: PartyType.CLIENT,
}


def get_party(db: Session, party_id: int, tenant_id: str) -> Party:
    db_party = db.query(Party).filter(Party.id == party_id, Party.tenant_id == tenant_id).first()
    if not db_party:
        raise NotFoundError(f"Party {party_id} not found")
    return db_party


def get_parties(db: Session, tenant_id: str, party_type: Optional[PartyType] = None, skip: int = 0, limit: int = 100) -> List[Party]:
    query = db.query(Party).filter(Party.tenant_id == tenant_id)
    if party_type:
        query = query.filter(Party.party_type == party_type)
    return query.order_by(Party.name).offset(skip).limit(limit).all()


def create_party(db: Session, party: schemas.PartyCreate, tenant_id: str, user_id: str) -> Party:
    if not party.name.strip():
        raise ValidationError("Party name is required")
    db_party = Party(**party.model_dump(), tenant_id=tenant_id, created_by=user_id)
    db_party.name = party.name.strip()
    db.add(db_party)
    db.commit()
    db.refresh(db_party)
    logger.info(f"Party {db_party.id} ({db_party.party_type.value}) created by {user_id} for tenant {tenant_id}")
    return db_party


def update_party(db: Session, party_id: int, party: schemas.PartyUpdate, tenant_id: str, user_id: str) -> Party:
    db_party = get_party(db, party_id, tenant_id)
    update_data = party.model_dump(exclude_unset=True)
    if "name" in update_data and not (update_data["name"] or "").strip():
        raise ValidationError("Party name is required")
    try:
        old_values = sqlalchemy_to_dict(db_party)
        for key, value in update_data.items():
            setattr(db_party, key, value)
        db_party.updated_by = user_id
        db.flush()
        create_audit_log(db=db, log_entry=AuditLogCreate(
            table_name='parties',
            record_id=party_id,
            changed_by=user_id,
            action='UPDATE',
            old_values=old_values,
            new_values=sqlalchemy_to_dict(db_party),
            tenant_id=tenant_id,
        ))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_party)
    logger.info(f"Party {party_id} updated by {user_id} for tenant {tenant_id}")
    return db_party


def resolve_loading_party(db: Session, tenant_id: str, source: LoadingSource, party_id: Optional[int], party_name: Optional[str]):
    """
    Return the (party_id, party_name) pair to store on a loading.

    A linked party must be of the kind the loading's source implies; its name is used
    when the caller does not supply one.
    """
    name = (party_name or "").strip()
    if party_id is None:
        if not name:
            raise ValidationError("Party name is required")
        return None, name
    db_party = get_party(db, party_id, tenant_id)
    expected = SOURCE_PARTY_TYPE[source]
    if db_party.party_type != expected:
        raise ValidationError(
            f"Party {party_id} is a {db_party.party_type.value}, expected {expected.value} for a {source.value} loading"
        )
    return db_party.id, name or db_party.name
