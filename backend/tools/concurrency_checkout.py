"""
Fire concurrent checkouts at a running server to observe that stock is never
oversold. Each worker builds its own cart session, adds the same product and
places an order; the summary counts 201s and 409s.

    python tools/concurrency_checkout.py --product 1 --qty 5 --workers 8 --user 2
"""
import argparse
import concurrent.futures
import os
from uuid import uuid4

import requests

BASE = os.environ.get("BREWHAVEN_BASE", "http://127.0.0.1:8000")

SHIPPING = {
    "address": "1 Bean Street",
    "city": "Pune",
    "postal_code": "411001",
    "phone": "9999999999",
}


def checkout_task(i, product_id, qty, user_id, idempotency_key=None):
    s = requests.Session()
    headers = {"X-User-Id": str(user_id)}
    try:
        r = s.post(
            f"{BASE}/api/cart/items",
            json={"product_id": product_id, "qty": qty},
            headers=headers,
            timeout=10,
        )
        if r.status_code != 200:
            return (i, "cart", r.status_code, r.text)
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        r = s.post(
            f"{BASE}/api/orders",
            json={"shipping": SHIPPING, "payment_method": "COD"},
            headers=headers,
            timeout=20,
        )
        return (i, "order", r.status_code, r.text)
    except requests.RequestException as e:
        return (i, "order", "ERR", str(e))


def run(workers, product_id, qty, user_id, idempotency_key=None):
    print(f"Running checkout test: workers={workers}, product={product_id}, qty={qty}")
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [
            ex.submit(checkout_task, i, product_id, qty, user_id, idempotency_key)
            for i in range(workers)
        ]
        results = [f.result() for f in futures]
    for r in results:
        print(r)
    ok = sum(1 for r in results if r[2] == 201)
    rejected = sum(1 for r in results if r[2] == 409)
    print(f"placed={ok} rejected_for_stock={rejected} other={len(results) - ok - rejected}")
    return results


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrent checkout tool.")
    parser.add_argument("--product", type=int, required=True)
    parser.add_argument("--qty", type=int, default=1)
    parser.add_argument("--workers", type=int, default=8)
    parser.add_argument("--user", type=int, required=True, help="profile id sent as X-User-Id")
    parser.add_argument(
        "--idempotency",
        default=None,
        help="share one Idempotency-Key across all workers (expect a single order)",
    )
    args = parser.parse_args()
    if args.idempotency == "random":
        args.idempotency = uuid4().hex
    run(args.workers, args.product, args.qty, args.user, args.idempotency)
