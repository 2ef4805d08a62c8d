import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from brewhaven.domain.cart import Cart, CartItem
from brewhaven.domain.order_status import OrderStatus
from brewhaven.models.order import Order, OrderLineItem
from brewhaven.repositories.idempotency_repo import IdempotencyRepository
from brewhaven.repositories.order_repo import OrderRepository
from brewhaven.repositories.product_repo import ProductRepository
from brewhaven.services.auth import Principal, require_principal
from brewhaven.errors import (
    BrewHavenException,
    InsufficientInventory,
    StorageError,
    ValidationError,
)
from brewhaven.services.inventory_service import InventoryService

log = logging.getLogger("orders")

SUPPORTED_PAYMENT_METHODS = ("COD",)
REQUIRED_SHIPPING_FIELDS = ("address", "city", "postal_code", "phone")


class OrderService:
    def __init__(self, db: Session, inventory: Optional[InventoryService] = None):
        self.db = db
        self.orders = OrderRepository(db)
        self.products = ProductRepository(db)
        self.idem_repo = IdempotencyRepository(db)
        self.inventory = inventory or InventoryService(db)

    def _validate(self, lines: List[CartItem], shipping: Dict, payment_method: str) -> Dict:
        if not lines:
            raise ValidationError("Cart is empty")
        for line in lines:
            if line.quantity < 1:
                raise ValidationError(f"Invalid quantity for product {line.product_id}")
        shipping = shipping or {}
        cleaned = {}
        missing = []
        for field in REQUIRED_SHIPPING_FIELDS:
            value = (shipping.get(field) or "").strip()
            if not value:
                missing.append(field)
            cleaned[field] = value
        if missing:
            raise ValidationError(
                "Missing shipping fields: " + ", ".join(missing)
            )
        notes = (shipping.get("notes") or "").strip()
        cleaned["notes"] = notes or None
        if payment_method not in SUPPORTED_PAYMENT_METHODS:
            raise ValidationError(f"Unsupported payment method: {payment_method}")
        return cleaned

    def _replay(self, idempotency_key: str, principal: Principal) -> Optional[Order]:
        rec = self.idem_repo.get(idempotency_key)
        if not rec:
            return None
        if rec.owner_id != principal.user_id:
            raise ValidationError("Idempotency key already used")
        log.info("replaying order %s for key=%r", rec.order_id, idempotency_key)
        return self.orders.get(rec.order_id)

    def _write_order(
        self,
        principal: Principal,
        lines: List[CartItem],
        shipping: Dict,
        payment_method: str,
        idempotency_key: Optional[str],
    ) -> Order:
        # fresh read of every product under the inventory locks
        products = {
            p.id: p for p in self.products.get_many([l.product_id for l in lines])
        }

        items = []
        total_amount = 0
        for line in lines:
            prod = products.get(line.product_id)
            if not prod:
                raise ValidationError(f"Product {line.product_id} not found")
            if line.quantity > prod.inventory_count:
                raise InsufficientInventory(
                    prod.id, requested=line.quantity, available=prod.inventory_count
                )
            # priced at placement time, not from the cart snapshot
            unit_price = prod.unit_price
            subtotal = unit_price * line.quantity
            total_amount += subtotal
            items.append(
                OrderLineItem(
                    product_id=prod.id,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    subtotal=subtotal,
                )
            )

        now = datetime.now(timezone.utc)
        order = Order(
            owner_id=principal.user_id,
            status=OrderStatus.PENDING.value,
            payment_method=payment_method,
            shipping_address=shipping["address"],
            shipping_city=shipping["city"],
            shipping_postal_code=shipping["postal_code"],
            shipping_phone=shipping["phone"],
            notes=shipping["notes"],
            total_amount=total_amount,
            created_at=now,
            updated_at=now,
        )
        order.items = items
        self.orders.add(order)

        for line in lines:
            self.inventory.decrement(line.product_id, line.quantity)

        if idempotency_key:
            self.idem_repo.record(
                idempotency_key, "place_order", order.id, owner_id=principal.user_id
            )
        return order

    def place_order(
        self,
        principal: Principal,
        cart: Cart,
        shipping: Dict,
        payment_method: str = "COD",
        idempotency_key: Optional[str] = None,
    ) -> Order:
        """
        Turn the cart into a pending order with one line item per cart line and
        decrement stock for each line.

        Every write happens in one transaction while the product locks are
        held: either the order, all of its line items and every decrement
        commit together, or nothing does. The cart is cleared only after the
        commit; on any failure it is left as it was.
        """
        principal = require_principal(principal)

        # a retried request finds its order even though the cart was cleared
        if idempotency_key:
            existing = self._replay(idempotency_key, principal)
            if existing:
                cart.clear()
                return existing

        lines = cart.snapshot()
        cleaned = self._validate(lines, shipping, payment_method)

        with self.inventory.lock_products([l.product_id for l in lines]):
            try:
                order = self._write_order(
                    principal, lines, cleaned, payment_method, idempotency_key
                )
                self.db.commit()
            except BrewHavenException as e:
                self.db.rollback()
                log.info("order rejected for user=%s: %s", principal.user_id, e)
                raise
            except IntegrityError as e:
                self.db.rollback()
                if idempotency_key:
                    # a concurrent request with the same key committed first
                    existing = self._replay(idempotency_key, principal)
                    if existing:
                        cart.clear()
                        return existing
                log.error("order integrity failure for user=%s: %s", principal.user_id, e)
                raise StorageError(f"Failed to create order: {e.orig}")
            except SQLAlchemyError as e:
                self.db.rollback()
                log.error("order storage failure for user=%s: %s", principal.user_id, e)
                raise StorageError(f"Failed to create order: {e}")

        cart.clear()
        self.db.refresh(order)
        log.info(
            "order %s placed by user=%s total=%s lines=%d",
            order.id,
            principal.user_id,
            order.total_amount,
            len(order.items),
        )
        return order
