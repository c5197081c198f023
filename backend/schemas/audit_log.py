from pydantic import BaseModel
from typing import Any, Dict, Literal, Optional

AuditAction = Literal['INSERT', 'UPDATE', 'DELETE']


class AuditLogCreate(BaseModel):
    """Before/after snapshot of one billing row, staged in the caller's transaction."""
    table_name: str
    record_id: int
    action: AuditAction
    changed_by: str
    tenant_id: Optional[str] = None
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
