from brewhaven.models.order import Order


def _headers(principal, **extra):
    h = {"X-User-Id": str(principal.user_id)}
    h.update(extra)
    return h


def _fill_cart(client, *lines):
    for product_id, qty in lines:
        r = client.post("/api/cart/items", json={"product_id": product_id, "qty": qty})
        assert r.status_code == 200


def test_checkout_flow(client, shopper, admin, make_product, shipping, stock_of):
    a = make_product("Product A", unit_price=150, inventory_count=5)
    b = make_product("Product B", unit_price=300, inventory_count=1)
    _fill_cart(client, (a.id, 2), (b.id, 1))

    r = client.post(
        "/api/orders",
        json={"shipping": shipping, "payment_method": "COD"},
        headers=_headers(shopper),
    )
    assert r.status_code == 201, r.text
    order = r.json()
    assert order["status"] == "pending"
    assert order["total_amount"] == 600
    assert sorted((i["product_id"], i["quantity"], i["subtotal"]) for i in order["items"]) == sorted(
        [(a.id, 2, 300), (b.id, 1, 300)]
    )
    assert stock_of(a.id) == 3
    assert stock_of(b.id) == 0

    # cart is emptied once the order exists
    assert client.get("/api/cart").json()["items"] == []

    mine = client.get("/api/orders", headers=_headers(shopper)).json()
    assert [o["id"] for o in mine] == [order["id"]]

    r = client.patch(
        f"/api/admin/orders/{order['id']}/status",
        json={"status": "confirmed"},
        headers=_headers(shopper),
    )
    assert r.status_code == 403

    r = client.patch(
        f"/api/admin/orders/{order['id']}/status",
        json={"status": "delivered"},
        headers=_headers(admin),
    )
    assert r.status_code == 200
    assert r.json()["owner_email"] == "asha@example.com"

    r = client.patch(
        f"/api/admin/orders/{order['id']}/status",
        json={"status": "pending"},
        headers=_headers(admin),
    )
    assert r.status_code == 409

    assert client.get(f"/api/orders/{order['id']}", headers=_headers(shopper)).json()["status"] == "delivered"


def test_checkout_insufficient_stock_keeps_cart(client, db, shopper, make_product, shipping, stock_of):
    a = make_product("Product A", unit_price=150, inventory_count=1)
    _fill_cart(client, (a.id, 3))

    r = client.post("/api/orders", json={"shipping": shipping}, headers=_headers(shopper))
    assert r.status_code == 409
    assert r.json()["detail"]["product_id"] == a.id
    assert client.get("/api/cart").json()["item_count"] == 3
    assert stock_of(a.id) == 1
    assert db.query(Order).count() == 0


def test_checkout_requires_sign_in_and_cart(client, shopper, make_product, shipping):
    a = make_product()
    r = client.post("/api/orders", json={"shipping": shipping}, headers=_headers(shopper))
    assert r.status_code == 400

    _fill_cart(client, (a.id, 1))
    assert client.post("/api/orders", json={"shipping": shipping}).status_code == 401
    assert client.post("/api/orders", json={"shipping": shipping}, headers={"X-User-Id": "999"}).status_code == 401


def test_checkout_missing_shipping_field(client, shopper, make_product, shipping):
    a = make_product()
    _fill_cart(client, (a.id, 1))
    shipping["phone"] = ""
    r = client.post("/api/orders", json={"shipping": shipping}, headers=_headers(shopper))
    assert r.status_code == 400
    assert "phone" in r.json()["detail"]


def test_checkout_retry_with_idempotency_key(client, shopper, make_product, shipping, stock_of):
    a = make_product(inventory_count=5)
    _fill_cart(client, (a.id, 2))
    headers = _headers(shopper, **{"Idempotency-Key": "web-42"})

    first = client.post("/api/orders", json={"shipping": shipping}, headers=headers)
    assert first.status_code == 201
    assert client.get("/api/cart").json()["items"] == []

    second = client.post("/api/orders", json={"shipping": shipping}, headers=headers)
    assert second.status_code == 201
    assert second.json()["id"] == first.json()["id"]
    assert stock_of(a.id) == 3


def test_admin_order_listing(client, shopper, admin, make_product, shipping):
    a = make_product(inventory_count=5)
    _fill_cart(client, (a.id, 1))
    client.post("/api/orders", json={"shipping": shipping}, headers=_headers(shopper))

    rows = client.get("/api/admin/orders", headers=_headers(admin)).json()
    assert len(rows) == 1
    assert rows[0]["owner_name"] == "Asha Rao"
    assert rows[0]["items"][0]["product_name"] == a.name
    assert client.get("/api/admin/orders", headers=_headers(shopper)).status_code == 403


def test_profile(client, admin):
    r = client.get("/api/profile", headers=_headers(admin))
    assert r.status_code == 200
    assert r.json()["is_admin"] is True
    assert r.json()["chat_count"] == 0


def test_checkout_retry_without_cart_cookie(client, shopper, make_product, shipping, stock_of):
    a = make_product(inventory_count=5)
    _fill_cart(client, (a.id, 1))
    headers = _headers(shopper, **{"Idempotency-Key": "web-43"})
    first = client.post("/api/orders", json={"shipping": shipping}, headers=headers)
    assert first.status_code == 201

    client.cookies.clear()
    second = client.post("/api/orders", json={"shipping": shipping}, headers=headers)
    assert second.status_code == 201
    assert second.json()["id"] == first.json()["id"]
    assert stock_of(a.id) == 4

    r = client.post("/api/orders", json={"shipping": shipping}, headers=_headers(shopper))
    assert r.status_code == 400
