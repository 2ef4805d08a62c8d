import ast
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

import brewhaven.domain
from brewhaven.domain.cart import Cart
from brewhaven.models.cart import CartSession
from brewhaven.services.cart_service import CartService
from brewhaven.errors import ValidationError


def test_add_merges_existing_line():
    cart = Cart()
    cart.add(1, 150, 2)
    cart.add(1, 150, 3)
    cart.add(2, 300, 1)
    assert len(cart) == 2
    assert cart.get(1).quantity == 5
    assert cart.totals() == (6, 1050)


def test_add_rejects_non_positive_quantity():
    cart = Cart()
    with pytest.raises(ValidationError):
        cart.add(1, 150, 0)
    assert cart.is_empty()


def test_set_quantity_replaces_or_removes():
    cart = Cart()
    cart.add(1, 150, 2)
    cart.set_quantity(1, 7)
    assert cart.get(1).quantity == 7
    cart.set_quantity(1, 0)
    assert cart.get(1) is None
    # negative quantities remove as well, even for unknown lines
    cart.set_quantity(9, -1)
    assert cart.is_empty()


def test_set_quantity_unknown_line():
    with pytest.raises(ValidationError):
        Cart().set_quantity(3, 2)


def test_remove_and_clear():
    cart = Cart()
    cart.add(1, 150, 1)
    cart.add(2, 300, 1)
    cart.remove(1)
    cart.remove(42)
    assert [it.product_id for it in cart] == [2]
    cart.clear()
    assert cart.totals() == (0, 0)


def test_snapshot_is_detached():
    cart = Cart()
    cart.add(1, 150, 2)
    snap = cart.snapshot()
    cart.clear()
    assert snap[0].quantity == 2


def test_api_cart_roundtrip(client, make_product):
    latte = make_product("Latte", 150, 5)
    mocha = make_product("Mocha", 300, 1)

    r = client.post("/api/cart/items", json={"product_id": latte.id, "qty": 2})
    assert r.status_code == 200
    body = r.json()
    assert body["cart_uuid"]
    assert client.cookies.get("cart_uuid") == body["cart_uuid"]

    client.post("/api/cart/items", json={"product_id": mocha.id, "qty": 1})
    r = client.get("/api/cart")
    assert r.json()["item_count"] == 3
    assert r.json()["subtotal"] == 600

    r = client.put(f"/api/cart/items/{latte.id}", json={"qty": 0})
    assert [it["product_id"] for it in r.json()["items"]] == [mocha.id]

    r = client.delete("/api/cart")
    assert r.json()["items"] == []


def test_api_cart_unknown_product(client):
    r = client.post("/api/cart/items", json={"product_id": 999, "qty": 1})
    assert r.status_code == 404


def test_api_cart_out_of_stock_product(client, make_product):
    p = make_product("Sold Out", 150, 0)
    r = client.post("/api/cart/items", json={"product_id": p.id, "qty": 1})
    assert r.status_code == 400


def test_purge_stale_sessions(db):
    svc = CartService(db)
    old = svc.get_or_create_session("old-cart")
    svc.get_or_create_session("fresh-cart")
    old.updated_at = datetime.now(timezone.utc) - timedelta(days=30)
    db.commit()

    assert svc.purge_stale(ttl_seconds=3600) == 1
    remaining = [c.cart_uuid for c in db.query(CartSession).all()]
    assert remaining == ["fresh-cart"]


def test_domain_layer_does_not_import_services():
    domain_dir = Path(brewhaven.domain.__file__).parent
    for path in domain_dir.glob("*.py"):
        tree = ast.parse(path.read_text())
        imported = [
            node.module
            for node in ast.walk(tree)
            if isinstance(node, ast.ImportFrom) and node.module
        ] + [
            alias.name
            for node in ast.walk(tree)
            if isinstance(node, ast.Import)
            for alias in node.names
        ]
        assert not [m for m in imported if m.startswith("brewhaven.services")], path.name
