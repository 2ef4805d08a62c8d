import pytest

from brewhaven.errors import NotFound, UnauthorizedError, ValidationError
from brewhaven.services.inventory_service import InventoryService


def test_restock_adds_to_count(db, admin, make_product, stock_of):
    p = make_product(inventory_count=0)
    assert not p.available
    assert InventoryService(db).restock(admin, p.id, 12) == 12
    assert stock_of(p.id) == 12
    db.refresh(p)
    assert p.available


def test_restock_requires_admin(db, shopper, make_product, stock_of):
    p = make_product(inventory_count=2)
    with pytest.raises(UnauthorizedError):
        InventoryService(db).restock(shopper, p.id, 5)
    with pytest.raises(UnauthorizedError):
        InventoryService(db).restock(None, p.id, 5)
    assert stock_of(p.id) == 2


def test_restock_validation(db, admin, make_product):
    p = make_product()
    svc = InventoryService(db)
    with pytest.raises(ValidationError):
        svc.restock(admin, p.id, 0)
    with pytest.raises(NotFound):
        svc.restock(admin, 999, 1)


def test_decrement_exact_stock_reaches_zero(db, make_product, stock_of):
    p = make_product(inventory_count=4)
    svc = InventoryService(db)
    svc.decrement(p.id, 4)
    db.commit()
    assert stock_of(p.id) == 0
    assert svc.available(p.id) == 0


def test_decrement_unknown_product(db):
    with pytest.raises(NotFound):
        InventoryService(db).decrement(12345, 1)


def test_api_restock(client, admin, shopper, make_product):
    p = make_product(inventory_count=1)
    r = client.post(
        f"/api/admin/inventory/{p.id}/restock",
        json={"qty": 4},
        headers={"X-User-Id": str(shopper.user_id)},
    )
    assert r.status_code == 403
    r = client.post(
        f"/api/admin/inventory/{p.id}/restock",
        json={"qty": 4},
        headers={"X-User-Id": str(admin.user_id)},
    )
    assert r.status_code == 200
    assert r.json() == {"product_id": p.id, "inventory_count": 5}
