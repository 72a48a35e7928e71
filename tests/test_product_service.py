from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.product_service.database import Base, get_db
from storefront.product_service.main import app
from storefront.product_service.models import ProductModel
from storefront.product_service.seed import seed


@pytest.fixture
def session_factory():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    seed(db)
    db.close()
    yield factory
    engine.dispose()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def stock_of(session_factory, product_id):
    db = session_factory()
    try:
        return db.get(ProductModel, product_id).stock
    finally:
        db.close()


def test_get_products_omits_missing_ids(client):
    resp = client.get("/products", params={"ids": "3,1,999"})

    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [1, 3]
    assert Decimal(resp.json()[0]["price"]) == Decimal("199.99")


def test_get_product_404(client):
    assert client.get("/products/999").status_code == 404


def test_decrement_is_conditional(client, session_factory):
    resp = client.post("/products/3/stock/decrement", json={"amount": 5})
    assert resp.status_code == 200
    assert resp.json()["stock"] == 0

    resp = client.post("/products/3/stock/decrement", json={"amount": 1})
    assert resp.status_code == 409
    assert stock_of(session_factory, 3) == 0


def test_decrement_unknown_product(client):
    assert client.post("/products/999/stock/decrement", json={"amount": 1}).status_code == 404


def test_increment(client, session_factory):
    resp = client.post("/products/2/stock/increment", json={"amount": 4})

    assert resp.status_code == 200
    assert stock_of(session_factory, 2) == 104


def test_increment_unknown_product(client):
    assert client.post("/products/999/stock/increment", json={"amount": 1}).status_code == 404


def test_amount_must_be_positive(client):
    assert client.post("/products/1/stock/decrement", json={"amount": 0}).status_code == 422
