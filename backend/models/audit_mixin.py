from sqlalchemy import Column, DateTime, String
from datetime import datetime
import pytz


def now_ist():
    return datetime.now(pytz.timezone('Asia/Kolkata'))


class TimestampMixin:
    """Mixin that provides created/updated timestamps and user info.

    Billing rows are never soft-deleted: items and loadings are removed for real
    (the parent aggregate is recomputed), and payments are append-only.
    """
    # DateTime(timezone=True) ensures the Asia/Kolkata offset is persisted in the database.
    created_at = Column(DateTime(timezone=True), default=now_ist)
    updated_at = Column(DateTime(timezone=True), onupdate=now_ist)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)
