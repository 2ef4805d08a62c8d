from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from brewhaven.domain.cart import Cart, CartItem
from brewhaven.models.cart import CartSession, CartSessionItem


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_uuid(self, cart_uuid: str) -> Optional[CartSession]:
        return self.db.query(CartSession).filter(CartSession.cart_uuid == cart_uuid).first()

    def create_session(self, cart_uuid: str, owner_id: Optional[int] = None) -> CartSession:
        c = CartSession(cart_uuid=cart_uuid, owner_id=owner_id)
        self.db.add(c)
        self.db.flush()
        return c

    def load(self, session: CartSession) -> Cart:
        return Cart(
            [CartItem(it.product_id, it.unit_price, it.quantity) for it in session.items]
        )

    def save(self, session: CartSession, cart: Cart) -> CartSession:
        """Replace the persisted lines with the aggregate's current lines."""
        by_product = {it.product_id: it for it in session.items}
        wanted = {line.product_id: line for line in cart}
        for product_id, row in by_product.items():
            if product_id not in wanted:
                session.items.remove(row)
        for product_id, line in wanted.items():
            row = by_product.get(product_id)
            if row:
                row.quantity = line.quantity
                row.unit_price = line.unit_price
            else:
                session.items.append(
                    CartSessionItem(
                        product_id=product_id,
                        quantity=line.quantity,
                        unit_price=line.unit_price,
                    )
                )
        # children-only changes do not fire onupdate on the parent row
        session.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return session

    def delete_stale(self, older_than: datetime) -> List[str]:
        stale = self.db.query(CartSession).filter(CartSession.updated_at < older_than).all()
        uuids = []
        for c in stale:
            uuids.append(c.cart_uuid)
            self.db.delete(c)
        self.db.flush()
        return uuids
