import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from brewhaven.domain.cart import Cart
from brewhaven.models.cart import CartSession
from brewhaven.repositories.cart_repo import CartRepository
from brewhaven.repositories.product_repo import ProductRepository
from brewhaven.errors import NotFound, ValidationError
from brewhaven.utils.transactions import smart_transaction

log = logging.getLogger("cart")


class CartService:
    """
    Loads the cart aggregate for a session token, applies one operation and
    writes it back. All cart rules live in brewhaven.domain.cart.
    """

    def __init__(self, db: Session):
        self.db = db
        self.cart_repo = CartRepository(db)
        self.product_repo = ProductRepository(db)

    def get_or_create_session(
        self, cart_uuid: Optional[str] = None, owner_id: Optional[int] = None
    ) -> CartSession:
        if cart_uuid:
            c = self.cart_repo.get_by_uuid(cart_uuid)
            if c:
                if owner_id is not None and c.owner_id is None:
                    c.owner_id = owner_id
                    self.db.commit()
                return c
        new_uuid = cart_uuid or uuid.uuid4().hex
        c = self.cart_repo.create_session(new_uuid, owner_id=owner_id)
        self.db.commit()
        return c

    def find_session(self, cart_uuid: Optional[str]) -> Optional[CartSession]:
        if not cart_uuid:
            return None
        return self.cart_repo.get_by_uuid(cart_uuid)

    def load(self, session: CartSession) -> Cart:
        return self.cart_repo.load(session)

    def save(self, session: CartSession, cart: Cart) -> Cart:
        self.cart_repo.save(session, cart)
        self.db.commit()
        return cart

    def add_item(self, session: CartSession, product_id: int, qty: int) -> Cart:
        product = self.product_repo.get(product_id)
        if not product:
            raise NotFound(f"Product {product_id} not found")
        if not product.available:
            raise ValidationError(f"{product.name} is out of stock")
        cart = self.load(session)
        cart.add(product.id, product.unit_price, qty)
        return self.save(session, cart)

    def set_quantity(self, session: CartSession, product_id: int, qty: int) -> Cart:
        cart = self.load(session)
        cart.set_quantity(product_id, qty)
        return self.save(session, cart)

    def remove_item(self, session: CartSession, product_id: int) -> Cart:
        cart = self.load(session)
        cart.remove(product_id)
        return self.save(session, cart)

    def clear(self, session: CartSession) -> Cart:
        cart = self.load(session)
        cart.clear()
        return self.save(session, cart)

    def purge_stale(self, ttl_seconds: int) -> int:
        """Delete cart sessions untouched for longer than ttl_seconds."""
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=ttl_seconds)
        with smart_transaction(self.db):
            purged = self.cart_repo.delete_stale(cutoff)
        if purged:
            log.info("purged %d stale cart sessions", len(purged))
        return len(purged)
