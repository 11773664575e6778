import os
import tempfile

# Configure before pos_app is imported: the engine binds at import time
_DB_DIR = tempfile.mkdtemp(prefix="pos_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'pos_test.db')}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ADMIN_EMAIL"] = "admin@shop.com"
os.environ["ADMIN_PASSWORD"] = "s3cret-pass"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from pos_app.database import engine, SessionLocal
from pos_app.main import app
from pos_app.models import Base, Category, Product, Supplier
from pos_app.schemas.sale import CustomerInfo

ADMIN_EMAIL = os.environ["ADMIN_EMAIL"]
ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(setup_database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def anon_client(setup_database):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def client(anon_client):
    response = anon_client.post(
        "/auth/login",
        data={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200, response.text
    anon_client.headers["Authorization"] = f"Bearer {response.json()['access_token']}"
    return anon_client


@pytest.fixture
def customer():
    return CustomerInfo(name="Asha", phone="9876543210", address="12 Market Road")


@pytest.fixture
def make_product(db):
    def _make(
        name="Lipstick",
        cost_price="40.00",
        sell_price="100.00",
        quantity=10,
        category=None,
        supplier=None,
    ):
        product = Product(
            name=name,
            brand="Acme",
            cost_price=Decimal(cost_price),
            sell_price=Decimal(sell_price),
            quantity=quantity,
            category_id=category.id if category else None,
            supplier_id=supplier.id if supplier else None,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def category(db):
    category = Category(name="Cosmetics")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def supplier(db):
    supplier = Supplier(name="Glow Traders", contact="555-0100", address="Dock 4")
    db.add(supplier)
    db.commit()
    db.refresh(supplier)
    return supplier
