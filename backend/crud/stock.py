from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.loadings import Loading, LoadingSource
from models.loading_items import LoadingItem
from utils.billing import ZERO, as_decimal
from utils.exceptions import StockExceededError

logger = logging.getLogger("stock")

VENDOR_SOURCES = (LoadingSource.FARMER, LoadingSource.AGENT)


@dataclass(frozen=True)
class StockLevels:
    variety_code: str
    incoming: Decimal
    allocated: Decimal

    @property
    def available(self) -> Decimal:
        return max(ZERO, self.incoming - self.allocated)


def _sum_kgs(db: Session, tenant_id: str, variety_code: str, sources, exclude_item_id: Optional[int] = None) -> Decimal:
    query = (
        db.query(func.coalesce(func.sum(LoadingItem.total_kgs), 0))
        .join(Loading, LoadingItem.loading_id == Loading.id)
        .filter(
            Loading.tenant_id == tenant_id,
            Loading.source.in_(sources),
            LoadingItem.variety_code == variety_code,
        )
    )
    if exclude_item_id is not None:
        query = query.filter(LoadingItem.id != exclude_item_id)
    return as_decimal(query.scalar())


def get_stock_levels(db: Session, tenant_id: str, variety_code: str, exclude_item_id: Optional[int] = None) -> StockLevels:
    """
    All-time stock of one variety: everything weighed in from farmers and agents against
    everything already allocated to clients (optionally ignoring one client item).
    """
    return StockLevels(
        variety_code=variety_code,
        incoming=_sum_kgs(db, tenant_id, variety_code, VENDOR_SOURCES),
        allocated=_sum_kgs(db, tenant_id, variety_code, (LoadingSource.CLIENT,), exclude_item_id),
    )


def validate_client_allocation(db: Session, tenant_id: str, variety_code: str, candidate_kgs: Decimal, item_id: int) -> StockLevels:
    """Reject a client item weight that would allocate more than has arrived."""
    levels = get_stock_levels(db, tenant_id, variety_code, exclude_item_id=item_id)
    max_allowed = levels.available
    if as_decimal(candidate_kgs) > max_allowed:
        logger.warning(
            f"Stock exceeded for variety {variety_code} on item {item_id} (tenant {tenant_id}): "
            f"requested {candidate_kgs} kg, max allowed {max_allowed} kg"
        )
        raise StockExceededError(
            f"Only {max_allowed} kg of {variety_code} is available",
            max_allowed=max_allowed,
            variety_code=variety_code,
        )
    return levels
