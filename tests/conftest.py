"""
Shared pytest fixtures.

Relational parts run on in-memory SQLite, the cart store and the catalog
are replaced by thread-safe in-memory fakes implementing the same methods.
"""

import os
import threading
from decimal import Decimal
from unittest.mock import Mock

import pytest
from redis.exceptions import RedisError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure test environment before any storefront import reads settings
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PRODUCT_DATABASE_URL"] = "sqlite://"

from storefront.data.database import Base  # noqa: E402
from storefront.data import models  # noqa: E402,F401
from storefront.domain.catalog import ProductSnapshot  # noqa: E402
from storefront.domain.errors import ProductNotFoundError  # noqa: E402
from storefront.repos.order_repo import OrderRepo  # noqa: E402


class InMemoryCartStore:
    def __init__(self):
        self.carts: dict[int, dict[int, int]] = {}
        self.fail_clear = False
        self._lock = threading.Lock()

    def set_quantity(self, user_id, product_id, quantity):
        with self._lock:
            if quantity <= 0:
                self.carts.get(user_id, {}).pop(product_id, None)
            else:
                self.carts.setdefault(user_id, {})[product_id] = quantity

    def remove(self, user_id, product_id):
        with self._lock:
            self.carts.get(user_id, {}).pop(product_id, None)

    def get_all(self, user_id):
        with self._lock:
            return dict(self.carts.get(user_id, {}))

    def clear(self, user_id):
        if self.fail_clear:
            raise RedisError("connection reset")
        with self._lock:
            self.carts.pop(user_id, None)

    def discard_entries(self, user_id, entries):
        removed = 0
        with self._lock:
            cart = self.carts.get(user_id, {})
            for product_id, quantity in entries.items():
                if cart.get(product_id) == quantity:
                    del cart[product_id]
                    removed += 1
        return removed

    def ping(self):
        return True


class InMemoryCatalog:
    """Catalog fake, each stock change is atomic under one lock."""

    def __init__(self):
        self.products: dict[int, dict] = {}
        self.decrements: list[tuple[int, int]] = []
        self.increments: list[tuple[int, int]] = []
        self.fail_decrement_for: set[int] = set()
        self._lock = threading.Lock()

    def add(self, product_id, name, price, stock):
        self.products[product_id] = {"name": name, "price": Decimal(price), "stock": stock}

    def delete(self, product_id):
        self.products.pop(product_id, None)

    def stock(self, product_id):
        return self.products[product_id]["stock"]

    def get_many(self, product_ids):
        with self._lock:
            return {
                pid: ProductSnapshot(id=pid, name=p["name"], price=p["price"], stock=p["stock"])
                for pid, p in self.products.items()
                if pid in set(product_ids)
            }

    def try_decrement_stock(self, product_id, amount):
        if product_id in self.fail_decrement_for:
            raise TimeoutError("catalog timed out")
        with self._lock:
            product = self.products.get(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            if product["stock"] < amount:
                return False
            product["stock"] -= amount
            self.decrements.append((product_id, amount))
            return True

    def increment_stock(self, product_id, amount):
        with self._lock:
            product = self.products.get(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)
            product["stock"] += amount
            self.increments.append((product_id, amount))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def order_repo(db_session):
    return OrderRepo(db_session)


@pytest.fixture
def cart_store():
    return InMemoryCartStore()


@pytest.fixture
def catalog():
    catalog = InMemoryCatalog()
    catalog.add(1, "Keyboard", "10.00", 5)
    catalog.add(2, "Mouse", "20.00", 1)
    catalog.add(3, "Monitor", "899.00", 1)
    return catalog


@pytest.fixture
def notifications():
    return Mock()


@pytest.fixture
def scheduler():
    return Mock()
