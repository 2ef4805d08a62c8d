#!/usr/bin/env python3
"""
Seed categories, coffees and demo accounts.

Reads a JSON file when --file is given, otherwise uses the built-in menu.
The file may be a list of products or an object with "categories" and
"products" keys. Existing products (matched by name) are updated in place.

Usage:
    python scripts/seed_catalogue.py [--file menu.json] [--reset]
"""
import argparse
import json
import logging
import os
import sys

from brewhaven.db import SessionLocal, init_db
from brewhaven.models.product import Product
from brewhaven.repositories.product_repo import ProductRepository
from brewhaven.repositories.profile_repo import ProfileRepository

log = logging.getLogger("seed")

DEFAULT_CATEGORIES = ["Espresso Drinks", "Cold Coffee", "Specialty"]

DEFAULT_PRODUCTS = [
    {"name": "Espresso", "category": "Espresso Drinks", "type": "Hot", "unit_price": 120, "inventory_count": 50,
     "description": "Strong, concentrated shot", "featured": True},
    {"name": "Americano", "category": "Espresso Drinks", "type": "Hot", "unit_price": 150, "inventory_count": 40,
     "description": "Espresso diluted with hot water"},
    {"name": "Cappuccino", "category": "Espresso Drinks", "type": "Hot", "unit_price": 180, "inventory_count": 40,
     "description": "Equal parts espresso, steamed milk and foam", "featured": True},
    {"name": "Cold Brew", "category": "Cold Coffee", "type": "Cold", "unit_price": 220, "inventory_count": 25,
     "description": "Smooth, less acidic, steeped overnight"},
    {"name": "Iced Mocha", "category": "Cold Coffee", "type": "Cold", "unit_price": 250, "inventory_count": 20,
     "description": "Chocolate espresso over ice"},
    {"name": "Hazelnut Macchiato", "category": "Specialty", "type": "Hot", "unit_price": 300, "inventory_count": 10,
     "description": "Espresso marked with hazelnut foam"},
]

DEFAULT_USERS = [
    {"email": "admin@brewhaven.local", "full_name": "BrewHaven Admin", "admin": True},
    {"email": "shopper@brewhaven.local", "full_name": "Demo Shopper", "admin": False},
]


def _normalize_entry(entry: dict) -> dict:
    """Accept price/stock aliases used by older menu exports."""
    price = entry.get("unit_price", entry.get("price", 0))
    stock = entry.get("inventory_count", entry.get("inventory", entry.get("stock", 0)))
    return {
        "name": (entry.get("name") or "").strip(),
        "category": entry.get("category"),
        "type": entry.get("type") or "Hot",
        "unit_price": int(price or 0),
        "inventory_count": int(stock or 0),
        "description": entry.get("description") or "",
        "featured": bool(entry.get("featured", False)),
        "image_url": entry.get("image_url") or entry.get("image"),
    }


def load_source(path: str):
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        products = data
        categories = sorted({p.get("category") for p in products if p.get("category")})
    else:
        products = data.get("products", [])
        categories = data.get("categories", [])
    return categories, products


def seed(categories, products, users=DEFAULT_USERS):
    db = SessionLocal()
    repo = ProductRepository(db)
    profiles = ProfileRepository(db)
    try:
        cat_ids = {}
        for name in categories:
            c = repo.get_category_by_name(name) or repo.create_category(name)
            cat_ids[name] = c.id

        count = 0
        for raw in products:
            entry = _normalize_entry(raw)
            if not entry["name"]:
                continue
            fields = {k: v for k, v in entry.items() if k != "category"}
            fields["category_id"] = cat_ids.get(entry["category"])
            existing = db.query(Product).filter(Product.name == entry["name"]).first()
            if existing:
                repo.update(existing, **fields)
            else:
                repo.create(**fields)
            count += 1

        for u in users:
            if not profiles.get_by_email(u["email"]):
                profiles.create(u["email"], full_name=u["full_name"], admin=u["admin"])

        db.commit()
        log.info("Seeded %d categories, %d products", len(cat_ids), count)
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", default=None, help="Path to a menu json file")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    args = parser.parse_args()

    init_db(reset=args.reset)
    if args.file:
        if not os.path.exists(args.file):
            print("File not found:", args.file)
            sys.exit(1)
        cats, prods = load_source(args.file)
    else:
        cats, prods = DEFAULT_CATEGORIES, DEFAULT_PRODUCTS
    seed(cats, prods)
