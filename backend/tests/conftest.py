import os
import tempfile

# Point settings at a throwaway database before brewhaven is imported.
_TMP = tempfile.mkdtemp(prefix="brewhaven-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP, "test.db")
os.environ["LOCK_DIR"] = os.path.join(_TMP, "locks")
os.environ.pop("AI_API_KEY", None)
os.environ.pop("DEEPSEEK_API_KEY", None)
os.environ.pop("AI_PROVIDER", None)

import pytest
from fastapi.testclient import TestClient

from brewhaven.db import SessionLocal, init_db
from brewhaven.main import app
from brewhaven.models.product import Category, Product
from brewhaven.repositories.profile_repo import ProfileRepository
from brewhaven.services.auth import Principal


@pytest.fixture(autouse=True)
def reset_db():
    init_db(reset=True)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client():
    return TestClient(app)


def _principal(db, email, full_name, admin=False):
    repo = ProfileRepository(db)
    p = repo.create(email, full_name=full_name, admin=admin)
    db.commit()
    return Principal(user_id=p.id, email=p.email, is_admin=admin)


@pytest.fixture
def shopper(db):
    return _principal(db, "asha@example.com", "Asha Rao")


@pytest.fixture
def other_shopper(db):
    return _principal(db, "ben@example.com", "Ben Ng")


@pytest.fixture
def admin(db):
    return _principal(db, "admin@example.com", "Store Admin", admin=True)


@pytest.fixture
def category(db):
    c = Category(name="Espresso Drinks")
    db.add(c)
    db.commit()
    return c


@pytest.fixture
def make_product(db, category):
    def _make(name="Latte", unit_price=150, inventory_count=5, **extra):
        p = Product(
            name=name,
            description=extra.pop("description", f"{name} description"),
            unit_price=unit_price,
            inventory_count=inventory_count,
            category_id=category.id,
            **extra,
        )
        db.add(p)
        db.commit()
        return p

    return _make


@pytest.fixture
def shipping():
    return {
        "address": "12 Roastery Lane",
        "city": "Bengaluru",
        "postal_code": "560001",
        "phone": "9876543210",
    }


@pytest.fixture
def stock_of():
    """Read inventory through a fresh session so no identity map is involved."""

    def _read(product_id):
        s = SessionLocal()
        try:
            return s.get(Product, product_id).inventory_count
        finally:
            s.close()

    return _read
