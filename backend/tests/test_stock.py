from decimal import Decimal

import pytest

from conftest import TENANT, USER
from crud import loadings as crud
from crud.reconciliation import get_stock_availability
from models.loadings import LoadingSource
from schemas.loadings import LoadingItemUpdate
from utils.exceptions import StockExceededError


@pytest.fixture
def allocated(make_loading):
    """100 kg of X in from a farmer; client items of 60 kg and 30 kg already out."""
    make_loading(LoadingSource.FARMER, [("X", 2, 30, 50)])
    client = make_loading(LoadingSource.CLIENT, [("X", 0, 60, 0), ("X", 0, 30, 0)], vehicle_id="V-1")
    first, second = sorted(client.items, key=lambda i: i.id)
    return client, first, second


class TestStockValidator:
    def test_availability_counts_farmers_and_agents(self, make_loading, db):
        make_loading(LoadingSource.FARMER, [("X", 2, 30, 50)])
        make_loading(LoadingSource.AGENT, [("X", 0, 20, 50)])
        make_loading(LoadingSource.CLIENT, [("X", 1, 0, 0)], vehicle_id="V-1")
        stock = get_stock_availability(db, TENANT, "X")
        assert stock["incoming"] == Decimal(120)
        assert stock["allocated"] == Decimal(35)
        assert stock["available"] == Decimal(85)

    def test_edit_within_stock_succeeds(self, allocated, db):
        _, first, _ = allocated
        updated = crud.update_item(db, first.id, LoadingItemUpdate(loose=50), TENANT, USER)
        assert updated.total_kgs == Decimal(50)

    def test_edit_beyond_stock_is_rejected(self, allocated, db):
        client, first, _ = allocated
        with pytest.raises(StockExceededError) as exc_info:
            crud.update_item(db, first.id, LoadingItemUpdate(loose=80), TENANT, USER)
        # 100 in, 30 held by the other client item
        assert exc_info.value.max_allowed == Decimal(70)
        assert exc_info.value.to_dict()["max_allowed"] == 70.0

        loading = crud.get_loading(db, client.id, TENANT)
        assert loading.total_kgs == Decimal(90)
        assert sorted(i.total_kgs for i in loading.items) == [Decimal(30), Decimal(60)]

    def test_price_only_edit_skips_stock_check(self, make_loading, db):
        # Nothing came in, yet pricing an existing client item must still work
        client = make_loading(LoadingSource.CLIENT, [("Y", 1, 0, 0)], vehicle_id="V-1")
        updated = crud.update_item(db, client.items[0].id, LoadingItemUpdate(price_per_kg=120), TENANT, USER)
        assert updated.total_price == Decimal("4200.00")

    def test_variety_change_is_checked_against_new_variety(self, allocated, db):
        _, first, _ = allocated
        with pytest.raises(StockExceededError) as exc_info:
            crud.update_item(db, first.id, LoadingItemUpdate(variety_code="Z"), TENANT, USER)
        assert exc_info.value.max_allowed == 0

    def test_vendor_edits_are_not_stock_checked(self, make_loading, db):
        farmer = make_loading(LoadingSource.FARMER, [("X", 1, 0, 10)])
        updated = crud.update_item(db, farmer.items[0].id, LoadingItemUpdate(no_trays=50), TENANT, USER)
        assert updated.total_kgs == Decimal(1750)

    def test_stock_is_per_tenant(self, make_loading, db):
        make_loading(LoadingSource.FARMER, [("X", 2, 30, 50)])
        assert get_stock_availability(db, "tenant-b", "X")["incoming"] == 0
