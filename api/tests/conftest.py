"""
Pytest fixtures for the POS API test suite.

Each test gets its own SQLite file database (foreign keys on), a session on
it, and a ``TestClient`` whose ``get_db`` dependency is bound to the same
database.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from decimal import Decimal
from itertools import count

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.db.base import Base
from app.db.models import Product
from app.db.session import create_db_engine, get_db
from app.main import app
from app.services import users

_sku_counter = count(1)


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'pos.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_product(db):
    """Insert a product directly; returns the persisted row."""

    def _make(name="Widget", price="10.00", stock=10, sku=None):
        product = Product(
            name=name,
            sku=sku or f"SKU-{next(_sku_counter):04d}",
            price=Decimal(price),
            stock_quantity=stock,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def user(db):
    return users.create_user(db, email="cashier@example.com", password="secret123", name="Cashier")


@pytest.fixture
def auth_headers(client, user):
    response = client.post(
        "/auth/login", json={"email": "cashier@example.com", "password": "secret123"}
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def stock_of(session_factory):
    """Read a product's current stock through a fresh session."""

    def _stock_of(product_id: str) -> int:
        with session_factory() as session:
            return session.get(Product, product_id).stock_quantity

    return _stock_of
