"""Pytest fixtures for the storefront order service tests."""

import os

# must be set before storefront.core.config is imported
os.environ["POSTGRES_DSN"] = "sqlite://"
os.environ["KAFKA_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import jwt
import pytest
from fastapi.testclient import TestClient

from storefront.core.auth import Principal
from storefront.core.config import settings
from storefront.db.models import Product
from storefront.db.session import Base, SessionLocal, engine
from storefront.kafka import producer


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def events(monkeypatch):
    """Capture published order events instead of talking to Kafka."""
    sent = []
    monkeypatch.setattr(producer, "send", lambda topic, key, value: sent.append((topic, key, value)))
    return sent


@pytest.fixture
def customer():
    return Principal(sub="cust@example.com", role="customer")


@pytest.fixture
def other_customer():
    return Principal(sub="other@example.com", role="customer")


@pytest.fixture
def admin():
    return Principal(sub="admin@example.com", role="admin")


def make_token(sub: str, role: str, token_type: str = "access") -> str:
    payload = {
        "sub": sub,
        "role": role,
        "type": token_type,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=15),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_headers(principal: Principal) -> dict:
    return {"Authorization": f"Bearer {make_token(principal.sub, principal.role)}"}


@pytest.fixture
def token_for():
    return make_token


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def other_headers(other_customer):
    return auth_headers(other_customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def make_product(db):
    """Factory that inserts a product and returns it."""
    counter = {"n": 0}

    def _make(price="100", discount="0", stock=10, active=True, sku=None, name=None):
        counter["n"] += 1
        product = Product(
            name=name or f"Product {counter['n']}",
            sku=sku or f"SKU-{counter['n']:03d}",
            price=Decimal(str(price)),
            discount=Decimal(str(discount)),
            stock=stock,
            active=active,
            image=f"https://img.example.com/{counter['n']}.png",
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def address():
    return {
        "first_name": "Asha",
        "last_name": "Rao",
        "street": "12 MG Road",
        "city": "Bengaluru",
        "state": "KA",
        "zip_code": "560001",
        "country": "IN",
        "phone": "+91 98450 00000",
    }


@pytest.fixture
def client():
    from storefront.main import app

    return TestClient(app)
