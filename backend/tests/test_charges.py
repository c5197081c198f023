from decimal import Decimal

import pytest

from conftest import TENANT, USER
from crud import charges as crud
from crud.loadings import get_loading
from models.dispatch_charges import DispatchCharge, DispatchChargeType
from models.loadings import LoadingSource
from models.payment_mode import PaymentMode
from schemas.charges import DispatchChargeCreate, PackingAmountCreate
from utils.exceptions import (
    BusinessRuleError,
    NotFoundError,
    PACKING_REQUIRED,
    VEHICLE_REQUIRED,
    ValidationError,
)


def _dispatch(loading_id, charge_type=DispatchChargeType.ICE_COOLING, amount=100, **fields):
    return DispatchChargeCreate(source_record_id=loading_id, type=charge_type, amount=Decimal(amount), **fields)


class TestPackingAmounts:
    def test_ice_blocks_default_price(self, make_loading, db):
        loading = make_loading(LoadingSource.CLIENT, [("ROH", 2, 0, 10)], vehicle_id="V-1")
        packing = crud.post_packing_amount(db, PackingAmountCreate(source_record_id=loading.id, ice_blocks=3), TENANT, USER)
        assert packing.total_amount == Decimal("600.00")
        assert packing.price_per_block == Decimal("200.00")

        loading = get_loading(db, loading.id, TENANT)
        assert loading.packing_amount_total == Decimal("600.00")
        # 70 kg + 600 packing
        assert loading.grand_total == Decimal("670.00")

    def test_non_cash_needs_reference(self, db):
        with pytest.raises(ValidationError):
            crud.post_packing_amount(db, PackingAmountCreate(total_amount=500, payment_mode=PaymentMode.UPI), TENANT, USER)
        packing = crud.post_packing_amount(
            db, PackingAmountCreate(total_amount=500, payment_mode=PaymentMode.UPI, reference="UTR123"), TENANT, USER
        )
        assert packing.source_record_id is None

    def test_zero_amount_rejected(self, db):
        with pytest.raises(ValidationError):
            crud.post_packing_amount(db, PackingAmountCreate(total_amount=0), TENANT, USER)

    def test_unknown_loading(self, db):
        with pytest.raises(NotFoundError):
            crud.post_packing_amount(db, PackingAmountCreate(source_record_id=123, total_amount=10), TENANT, USER)

    def test_vendor_loading_rejected(self, make_loading, db):
        loading = make_loading(LoadingSource.FARMER)
        with pytest.raises(ValidationError):
            crud.post_packing_amount(db, PackingAmountCreate(source_record_id=loading.id, ice_blocks=2), TENANT, USER)
        assert crud.get_packing_amounts(db, TENANT) == []
        assert get_loading(db, loading.id, TENANT).grand_total == Decimal("33725.00")


class TestDispatchCharges:
    def test_transport_without_vehicle_is_rejected_and_not_saved(self, make_loading, db):
        loading = make_loading(LoadingSource.CLIENT, [("ROH", 2, 0, 10)])
        crud.post_packing_amount(db, PackingAmountCreate(source_record_id=loading.id, total_amount=100), TENANT, USER)

        with pytest.raises(BusinessRuleError) as exc_info:
            crud.post_dispatch_charge(db, _dispatch(loading.id, DispatchChargeType.TRANSPORT, 1000), TENANT, USER)

        assert exc_info.value.code == VEHICLE_REQUIRED
        assert db.query(DispatchCharge).count() == 0
        assert get_loading(db, loading.id, TENANT).dispatch_charges_total == 0

    def test_dispatch_before_packing_is_rejected(self, make_loading, db):
        loading = make_loading(LoadingSource.CLIENT, [("ROH", 2, 0, 10)], vehicle_id="V-1")
        with pytest.raises(BusinessRuleError) as exc_info:
            crud.post_dispatch_charge(db, _dispatch(loading.id), TENANT, USER)
        assert exc_info.value.code == PACKING_REQUIRED
        assert db.query(DispatchCharge).count() == 0

    def test_charges_roll_into_grand_total(self, make_loading, db):
        loading = make_loading(LoadingSource.CLIENT, [("ROH", 2, 0, 10)], vehicle_id="V-1")
        crud.post_packing_amount(db, PackingAmountCreate(source_record_id=loading.id, ice_blocks=3), TENANT, USER)
        crud.post_dispatch_charge(db, _dispatch(loading.id, DispatchChargeType.TRANSPORT, 1000), TENANT, USER)

        loading = get_loading(db, loading.id, TENANT)
        assert loading.dispatch_charges_total == Decimal("1000.00")
        # 70 kg + 1000 transport + 600 packing
        assert loading.grand_total == Decimal("1670.00")
        assert len(crud.get_dispatch_charges(db, TENANT, loading.id)) == 1

    def test_other_charge_needs_label(self, make_loading, db):
        loading = make_loading(LoadingSource.CLIENT, [("ROH", 2, 0, 10)], vehicle_id="V-1")
        crud.post_packing_amount(db, PackingAmountCreate(source_record_id=loading.id, total_amount=100), TENANT, USER)
        with pytest.raises(ValidationError):
            crud.post_dispatch_charge(db, _dispatch(loading.id, DispatchChargeType.OTHER, 50), TENANT, USER)
        charge = crud.post_dispatch_charge(db, _dispatch(loading.id, DispatchChargeType.OTHER, 50, label="Loading coolie"), TENANT, USER)
        assert charge.label == "Loading coolie"

    def test_agent_loading_rejected(self, make_loading, db):
        loading = make_loading(LoadingSource.AGENT, vehicle_id="V-1")
        with pytest.raises(ValidationError):
            crud.post_dispatch_charge(db, _dispatch(loading.id, DispatchChargeType.TRANSPORT, 500), TENANT, USER)
        assert db.query(DispatchCharge).count() == 0

    def test_non_positive_amount_rejected(self, make_loading, db):
        loading = make_loading(LoadingSource.CLIENT, vehicle_id="V-1")
        with pytest.raises(ValidationError):
            crud.post_dispatch_charge(db, _dispatch(loading.id, amount=0), TENANT, USER)
