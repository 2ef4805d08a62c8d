"""
Audit a BrewHaven SQLite database for order and inventory invariants.

    python tools/db_check.py [brewhaven.db] [idempotency-key]

Exits non-zero when any check finds offending rows.
"""
import sqlite3
import sys

DB = sys.argv[1] if len(sys.argv) > 1 else "brewhaven.db"
KEY = sys.argv[2] if len(sys.argv) > 2 else None

CHECKS = [
    (
        "Line items whose subtotal != quantity * unit_price",
        "SELECT id, order_id, product_id, quantity, unit_price, subtotal FROM order_items "
        "WHERE subtotal != quantity * unit_price",
    ),
    (
        "Orders whose total_amount != sum of line subtotals",
        "SELECT o.id, o.total_amount, COALESCE(SUM(i.subtotal), 0) FROM orders o "
        "LEFT JOIN order_items i ON i.order_id = o.id GROUP BY o.id "
        "HAVING o.total_amount != COALESCE(SUM(i.subtotal), 0)",
    ),
    (
        "Orders without line items",
        "SELECT o.id FROM orders o LEFT JOIN order_items i ON i.order_id = o.id "
        "WHERE i.id IS NULL",
    ),
    (
        "Line items without a parent order",
        "SELECT i.id, i.order_id FROM order_items i LEFT JOIN orders o ON o.id = i.order_id "
        "WHERE o.id IS NULL",
    ),
    (
        "Products with negative inventory",
        "SELECT id, name, inventory_count FROM products WHERE inventory_count < 0",
    ),
    (
        "Orders with an unknown status",
        "SELECT id, status FROM orders WHERE status NOT IN "
        "('pending', 'confirmed', 'processing', 'out_for_delivery', 'delivered', 'cancelled')",
    ),
]

conn = sqlite3.connect(DB)
cur = conn.cursor()
failed = 0

for title, sql in CHECKS:
    rows = cur.execute(sql).fetchall()
    status = "OK" if not rows else f"{len(rows)} row(s)"
    print(f"=== {title}: {status} ===")
    for r in rows[:20]:
        print(r)
    if rows:
        failed += 1

if KEY:
    print(f"\n=== Idempotency record {KEY!r} ===")
    cur.execute(
        "SELECT id, key, operation, owner_id, order_id, created_at FROM idempotency_records WHERE key=?",
        (KEY,),
    )
    for r in cur.fetchall():
        print(r)

print("\n=== Recent Orders ===")
cur.execute(
    "SELECT id, owner_id, status, total_amount, created_at FROM orders ORDER BY created_at DESC LIMIT 20"
)
for r in cur.fetchall():
    print(r)

conn.close()
sys.exit(1 if failed else 0)
