import logging
from typing import Dict, List, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from brewhaven.config import settings
from brewhaven.models.chat import ChatMessage
from brewhaven.models.order import OrderLineItem
from brewhaven.models.product import Category, Product
from brewhaven.repositories.order_repo import OrderRepository
from brewhaven.repositories.product_repo import ProductRepository
from brewhaven.repositories.profile_repo import ProfileRepository
from brewhaven.services.auth import Principal, require_admin
from brewhaven.errors import NotFound, StorageError, ValidationError

log = logging.getLogger("catalogue")

PRODUCT_TYPES = ("Hot", "Cold")
EDITABLE_FIELDS = (
    "name",
    "description",
    "type",
    "category_id",
    "unit_price",
    "inventory_count",
    "featured",
    "image_url",
)
NOT_NULL_FIELDS = ("name", "type", "unit_price", "inventory_count", "featured")


class CatalogueService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepository(db)

    def list_products(self, **filters) -> Tuple[List[Product], int]:
        return self.repo.list(**filters)

    def get_product(self, product_id: int) -> Product:
        p = self.repo.get(product_id)
        if not p:
            raise NotFound(f"Product {product_id} not found")
        return p

    def list_categories(self) -> List[Category]:
        return self.repo.list_categories()

    def _clean(self, data: Dict, partial: bool = False) -> Dict:
        fields = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        nulled = sorted(k for k in NOT_NULL_FIELDS if k in fields and fields[k] is None)
        if nulled:
            raise ValidationError("Fields can not be null: " + ", ".join(nulled))
        if not partial:
            for required in ("name", "description", "category_id"):
                if not fields.get(required):
                    raise ValidationError("Please fill in all fields")
        if "name" in fields and not (fields["name"] or "").strip():
            raise ValidationError("Name must not be empty")
        if "unit_price" in fields and fields["unit_price"] < settings.MIN_PRODUCT_PRICE:
            raise ValidationError(f"Price must be at least {settings.MIN_PRODUCT_PRICE}")
        if "inventory_count" in fields and fields["inventory_count"] < 0:
            raise ValidationError("Inventory must not be negative")
        if "type" in fields and fields["type"] not in PRODUCT_TYPES:
            raise ValidationError(f"Unknown product type: {fields['type']}")
        if fields.get("category_id") is not None:
            if not self.repo.get_category(fields["category_id"]):
                raise ValidationError(f"Category {fields['category_id']} not found")
        if "image_url" in fields:
            fields["image_url"] = (fields["image_url"] or "").strip() or None
        return fields

    def create_product(self, principal: Principal, data: Dict) -> Product:
        require_admin(principal)
        fields = self._clean(data)
        fields.setdefault("unit_price", settings.MIN_PRODUCT_PRICE)
        try:
            p = self.repo.create(**fields)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Failed to create product: {e}")
        log.info("product %s created by admin=%s", p.id, principal.user_id)
        return p

    def update_product(self, principal: Principal, product_id: int, data: Dict) -> Product:
        require_admin(principal)
        p = self.get_product(product_id)
        fields = self._clean(data, partial=True)
        try:
            self.repo.update(p, **fields)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Failed to update product {product_id}: {e}")
        log.info("product %s updated by admin=%s: %s", p.id, principal.user_id, sorted(fields))
        return p

    def delete_product(self, principal: Principal, product_id: int) -> None:
        require_admin(principal)
        p = self.get_product(product_id)
        ordered = (
            self.db.query(OrderLineItem.id)
            .filter(OrderLineItem.product_id == product_id)
            .first()
        )
        if ordered:
            raise ValidationError("Product appears in existing orders and can not be deleted")
        try:
            self.repo.delete(p)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Failed to delete product {product_id}: {e}")
        log.info("product %s deleted by admin=%s", product_id, principal.user_id)

    def create_category(self, principal: Principal, name: str) -> Category:
        require_admin(principal)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name must not be empty")
        try:
            c = self.repo.create_category(name)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError(f"Category {name} already exists")
        return c

    def stats(self, principal: Principal) -> Dict[str, int]:
        require_admin(principal)
        return {
            "total_users": ProfileRepository(self.db).count(),
            "total_chats": self.db.query(ChatMessage).count(),
            "total_products": self.repo.count(),
            "total_orders": OrderRepository(self.db).count(),
        }
