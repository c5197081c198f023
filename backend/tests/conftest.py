import os
import tempfile

# Must be set before database.py / main.py are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "fish-billing-test-logs"))

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from crud import loadings as loading_crud
from crud import parties as party_crud
from models.loadings import LoadingSource
from models.parties import PartyType
from schemas.loadings import LoadingCreate, LoadingItemCreate
from schemas.parties import PartyCreate
from utils.auth_utils import get_current_user

TENANT = "tenant-a"
USER = "tester@example.com"

ADMIN_CLAIMS = {"sub": "tester", "email": USER, "cognito:groups": ["admin"]}


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_current_user] = lambda: ADMIN_CLAIMS
    with TestClient(app, headers={"X-Tenant-ID": TENANT}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_party(db):
    def _make(name="Ravi", party_type=PartyType.CLIENT, **fields):
        return party_crud.create_party(db, PartyCreate(name=name, party_type=party_type, **fields), TENANT, USER)
    return _make


@pytest.fixture
def make_loading(db):
    """Create a loading through the crud layer; items are (variety, trays, loose, price) tuples."""
    counter = {"n": 0}

    def _make(source=LoadingSource.FARMER, items=(("ROH", 10, 5, 100),), loading_date=None, **fields):
        counter["n"] += 1
        fields.setdefault("bill_no", f"B-{counter['n']}")
        if fields.get("party_id") is None:
            fields.setdefault("party_name", "Walk-in")
        loading = LoadingCreate(
            source=source,
            loading_date=loading_date or date(2026, 1, 15),
            items=[
                LoadingItemCreate(variety_code=v, no_trays=t, loose=Decimal(str(loose)), price_per_kg=Decimal(str(p)))
                for v, t, loose, p in items
            ],
            **fields,
        )
        return loading_crud.create_loading(db, loading, TENANT, USER)
    return _make
