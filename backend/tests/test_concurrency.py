import threading

import pytest

from brewhaven.db import SessionLocal
from brewhaven.domain.cart import Cart
from brewhaven.models.order import Order
from brewhaven.errors import InsufficientInventory
from brewhaven.services.inventory_service import InventoryService
from brewhaven.services.order_service import OrderService


def _race(workers, target):
    barrier = threading.Barrier(workers)
    results = [None] * workers

    def run(i):
        db = SessionLocal()
        try:
            barrier.wait()
            results[i] = target(db)
        except Exception as e:  # collected for assertions
            results[i] = e
        finally:
            db.close()

    threads = [threading.Thread(target=run, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return results


def test_concurrent_orders_for_all_stock(db, shopper, make_product, shipping, stock_of):
    n = 4
    p = make_product("Single Origin", unit_price=250, inventory_count=n)
    product_id = p.id

    def place(session):
        cart = Cart()
        cart.add(product_id, 250, n)
        return OrderService(session).place_order(shopper, cart, dict(shipping))

    results = _race(2, place)

    placed = [r for r in results if isinstance(r, Order)]
    rejected = [r for r in results if isinstance(r, InsufficientInventory)]
    assert len(placed) == 1, results
    assert len(rejected) == 1, results
    assert rejected[0].product_id == product_id
    assert stock_of(product_id) == 0
    assert db.query(Order).count() == 1


def test_many_small_orders_never_oversell(db, shopper, make_product, shipping, stock_of):
    p = make_product("House Blend", unit_price=150, inventory_count=5)
    product_id = p.id

    def place(session):
        cart = Cart()
        cart.add(product_id, 150, 2)
        return OrderService(session).place_order(shopper, cart, dict(shipping))

    results = _race(6, place)

    placed = [r for r in results if isinstance(r, Order)]
    assert len(placed) == 2
    assert all(isinstance(r, (Order, InsufficientInventory)) for r in results), results
    assert stock_of(product_id) == 1


def test_conditional_decrement_refuses_shortfall(db, make_product, stock_of):
    p = make_product(inventory_count=3)
    ledger = InventoryService(db)

    ledger.decrement(p.id, 2)
    db.commit()
    with pytest.raises(InsufficientInventory) as exc:
        ledger.decrement(p.id, 2)
    db.rollback()
    assert exc.value.available == 1
    assert stock_of(p.id) == 1
