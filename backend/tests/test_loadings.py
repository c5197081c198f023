"""Loading aggregation through the crud layer: create, add, edit, delete, recompute."""
from datetime import date
from decimal import Decimal

import pytest

from conftest import TENANT, USER
from crud import charges as charge_crud
from crud import loadings as crud
from models.audit_log import AuditLog
from models.dispatch_charges import DispatchCharge, DispatchChargeType
from models.loadings import Loading, LoadingSource
from models.loading_items import LoadingItem
from models.packing_amounts import PackingAmount
from models.parties import PartyType
from schemas.charges import DispatchChargeCreate, PackingAmountCreate
from schemas.loadings import LoadingCreate, LoadingItemCreate, LoadingItemUpdate
from utils.exceptions import ConflictError, NotFoundError, ValidationError


def _assert_consistent(loading):
    items = loading.items
    assert loading.total_trays == sum(i.no_trays for i in items)
    assert loading.total_kgs == sum(i.total_kgs for i in items)
    assert loading.total_tray_kgs == sum(i.tray_kgs for i in items)
    assert loading.total_loose_kgs == sum(i.loose for i in items)
    assert loading.total_price == sum(i.total_price for i in items)


class TestCreateLoading:
    def test_farmer_scenario(self, make_loading):
        loading = make_loading(LoadingSource.FARMER, [("ROH", 10, 5, 100)])
        item = loading.items[0]
        assert item.tray_kgs == Decimal(350)
        assert item.total_kgs == Decimal(355)
        assert item.total_price == Decimal("33725.00")
        assert loading.total_price == Decimal("33725.00")
        assert loading.grand_total == Decimal("33725.00")
        _assert_consistent(loading)

    def test_client_loading_is_billed_by_weight(self, make_loading):
        loading = make_loading(LoadingSource.CLIENT, [("ROH", 2, 0, 0)], vehicle_no="TN01AB1234")
        assert loading.total_price == 0
        assert loading.grand_total == Decimal("70.00")

    def test_client_loading_without_vehicle_is_deducted(self, make_loading):
        loading = make_loading(LoadingSource.CLIENT, [("ROH", 2, 0, 10)])
        assert loading.total_price == Decimal("700.00")
        assert loading.grand_total == Decimal("66.50")

    def test_sub_paisa_price_is_stored_unrounded(self, make_loading):
        loading = make_loading(LoadingSource.FARMER, [("ROH", 0, 1000, "10.005")])
        item = loading.items[0]
        assert item.price_per_kg == Decimal("10.005")
        assert item.total_price == Decimal("9504.75")
        assert loading.grand_total == Decimal("9504.75")

    def test_vehicle_id_wins_over_vehicle_no(self, make_loading):
        loading = make_loading(LoadingSource.CLIENT, vehicle_id="V-7", vehicle_no="TN01")
        assert loading.vehicle_id == "V-7"
        assert loading.vehicle_no is None

    def test_duplicate_bill_number_conflicts(self, make_loading):
        make_loading(LoadingSource.FARMER, bill_no="F-100")
        with pytest.raises(ConflictError):
            make_loading(LoadingSource.FARMER, bill_no="F-100")

    def test_same_bill_number_allowed_for_other_source(self, make_loading):
        make_loading(LoadingSource.FARMER, bill_no="100")
        assert make_loading(LoadingSource.CLIENT, bill_no="100").id

    def test_requires_items_and_identifiers(self, db):
        base = dict(source=LoadingSource.FARMER, party_name="Ravi", loading_date=date(2026, 1, 1))
        item = LoadingItemCreate(variety_code="ROH", no_trays=1)
        with pytest.raises(ValidationError):
            crud.create_loading(db, LoadingCreate(bill_no="X", **base), TENANT, USER)
        with pytest.raises(ValidationError):
            crud.create_loading(db, LoadingCreate(bill_no=" ", items=[item], **base), TENANT, USER)
        with pytest.raises(ValidationError):
            crud.create_loading(
                db,
                LoadingCreate(source=LoadingSource.FARMER, bill_no="X", loading_date=date(2026, 1, 1), items=[item]),
                TENANT,
                USER,
            )
        assert db.query(Loading).count() == 0

    def test_zero_quantity_item_rolls_back_whole_loading(self, make_loading, db):
        with pytest.raises(ValidationError):
            make_loading(LoadingSource.FARMER, [("ROH", 1, 0, 10), ("KAT", 0, 0, 10)])
        assert db.query(Loading).count() == 0
        assert db.query(LoadingItem).count() == 0

    def test_party_name_defaults_from_party(self, make_loading, make_party):
        farmer = make_party("Murugan", PartyType.FARMER)
        loading = make_loading(LoadingSource.FARMER, party_id=farmer.id, party_name=None)
        assert loading.party_name == "Murugan"
        assert loading.party_id == farmer.id

    def test_party_type_must_match_source(self, make_loading, make_party):
        client = make_party("Hotel Sea", PartyType.CLIENT)
        with pytest.raises(ValidationError):
            make_loading(LoadingSource.FARMER, party_id=client.id)


class TestItemMutations:
    def test_add_item_resums_totals(self, make_loading, db):
        loading = make_loading(LoadingSource.FARMER, [("ROH", 10, 5, 100)])
        crud.add_item(db, loading.id, LoadingItemCreate(variety_code="KAT", no_trays=1, loose=0, price_per_kg=20), TENANT, USER)
        loading = crud.get_loading(db, loading.id, TENANT)
        assert loading.total_kgs == Decimal(390)
        assert loading.grand_total == Decimal("34390.00")
        _assert_consistent(loading)

    def test_add_item_to_missing_loading(self, db):
        with pytest.raises(NotFoundError):
            crud.add_item(db, 999, LoadingItemCreate(variety_code="ROH", no_trays=1), TENANT, USER)

    def test_update_quantity_and_price(self, make_loading, db):
        loading = make_loading(LoadingSource.AGENT, [("ROH", 1, 0, 100)])
        item = loading.items[0]
        updated = crud.update_item(db, item.id, LoadingItemUpdate(loose=5, price_per_kg=200), TENANT, USER)
        assert updated.total_kgs == Decimal(40)
        assert updated.total_price == Decimal("7600.00")
        loading = crud.get_loading(db, loading.id, TENANT)
        assert loading.grand_total == Decimal("7600.00")
        _assert_consistent(loading)

    def test_client_total_price_can_be_set_directly(self, make_loading, db):
        loading = make_loading(LoadingSource.CLIENT, [("ROH", 1, 0, 0)], vehicle_id="V-1")
        item = loading.items[0]
        crud.update_item(db, item.id, LoadingItemUpdate(total_price=Decimal("1234.5")), TENANT, USER)
        loading = crud.get_loading(db, loading.id, TENANT)
        assert loading.items[0].total_price == Decimal("1234.50")
        assert loading.total_price == Decimal("1234.50")
        assert loading.grand_total == Decimal("35.00")

    def test_partly_priced_client_bill_keeps_all_weight(self, make_loading, db):
        loading = make_loading(LoadingSource.CLIENT, [("ROH", 0, 100, 0), ("ROH", 0, 100, 0)], vehicle_id="V-1")
        assert loading.grand_total == Decimal("200.00")
        first = min(loading.items, key=lambda i: i.id)

        crud.update_item(db, first.id, LoadingItemUpdate(price_per_kg=Decimal("0.5")), TENANT, USER)

        loading = crud.get_loading(db, loading.id, TENANT)
        assert loading.total_kgs == Decimal(200)
        assert loading.total_price == Decimal("50.00")
        assert loading.grand_total == Decimal("200.00")
        assert crud.recompute_loading(db, loading.id, TENANT, USER).grand_total == Decimal("200.00")

    def test_vendor_total_price_cannot_be_set_directly(self, make_loading, db):
        loading = make_loading(LoadingSource.FARMER)
        with pytest.raises(ValidationError):
            crud.update_item(db, loading.items[0].id, LoadingItemUpdate(total_price=10), TENANT, USER)

    def test_update_to_zero_quantity_is_rejected(self, make_loading, db):
        loading = make_loading(LoadingSource.FARMER, [("ROH", 1, 0, 10)])
        with pytest.raises(ValidationError):
            crud.update_item(db, loading.items[0].id, LoadingItemUpdate(no_trays=0), TENANT, USER)
        assert crud.get_loading(db, loading.id, TENANT).items[0].no_trays == 1

    def test_update_writes_audit_row(self, make_loading, db):
        loading = make_loading(LoadingSource.FARMER)
        crud.update_item(db, loading.items[0].id, LoadingItemUpdate(price_per_kg=90), TENANT, USER)
        log = db.query(AuditLog).filter(AuditLog.table_name == "loading_items").one()
        assert log.action == "UPDATE"
        assert Decimal(log.old_values["price_per_kg"]) == 100
        assert Decimal(log.new_values["price_per_kg"]) == 90

    def test_update_missing_item(self, db):
        with pytest.raises(NotFoundError):
            crud.update_item(db, 42, LoadingItemUpdate(loose=1), TENANT, USER)

    def test_recompute_is_idempotent(self, make_loading, db):
        loading = make_loading(LoadingSource.FARMER, [("ROH", 10, 5, 100), ("KAT", 2, 1, 50)])
        first = crud.recompute_loading(db, loading.id, TENANT, USER)
        first_values = (first.total_kgs, first.total_price, first.grand_total)
        second = crud.recompute_loading(db, loading.id, TENANT, USER)
        assert (second.total_kgs, second.total_price, second.grand_total) == first_values


class TestDeleteItem:
    def test_delete_one_of_several(self, make_loading, db):
        loading = make_loading(LoadingSource.FARMER, [("ROH", 10, 5, 100), ("KAT", 1, 0, 20)])
        kat = next(i for i in loading.items if i.variety_code == "KAT")
        result = crud.delete_item(db, kat.id, TENANT, USER)
        assert result["deleted_parent_loading"] is False
        loading = crud.get_loading(db, loading.id, TENANT)
        assert len(loading.items) == 1
        assert loading.total_kgs == Decimal(355)
        assert loading.grand_total == Decimal("33725.00")

    def test_deleting_last_item_deletes_loading_and_keeps_charges(self, make_loading, db):
        loading = make_loading(LoadingSource.CLIENT, [("ROH", 1, 0, 100)], vehicle_id="V-1")
        charge_crud.post_packing_amount(db, PackingAmountCreate(source_record_id=loading.id, total_amount=500), TENANT, USER)
        charge_crud.post_dispatch_charge(
            db, DispatchChargeCreate(source_record_id=loading.id, type=DispatchChargeType.TRANSPORT, amount=300), TENANT, USER
        )
        item_id = loading.items[0].id
        loading_id = loading.id

        result = crud.delete_item(db, item_id, TENANT, USER)

        assert result == {"item_id": item_id, "loading_id": loading_id, "deleted_parent_loading": True}
        assert db.query(Loading).filter(Loading.id == loading_id).first() is None
        assert db.query(DispatchCharge).one().source_record_id is None
        assert db.query(PackingAmount).one().source_record_id is None

    def test_delete_missing_item(self, db):
        with pytest.raises(NotFoundError):
            crud.delete_item(db, 7, TENANT, USER)
