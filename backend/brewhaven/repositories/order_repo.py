from typing import List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from brewhaven.models.order import Order, OrderLineItem


class OrderRepository:
    def __init__(self, db: Session):
        self.db = db

    def _with_items(self):
        return self.db.query(Order).options(
            selectinload(Order.items).joinedload(OrderLineItem.product)
        )

    def get(self, order_id: int) -> Optional[Order]:
        return self._with_items().filter(Order.id == order_id).first()

    def get_for_update(self, order_id: int) -> Optional[Order]:
        return (
            self.db.query(Order)
            .filter(Order.id == order_id)
            .with_for_update()
            .first()
        )

    def list_for_owner(self, owner_id: int) -> List[Order]:
        return (
            self._with_items()
            .filter(Order.owner_id == owner_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def list_all(self, status: Optional[str] = None, limit: Optional[int] = None) -> List[Order]:
        query = self._with_items().options(joinedload(Order.owner))
        if status:
            query = query.filter(Order.status == status)
        query = query.order_by(Order.created_at.desc(), Order.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def add(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()
        return order

    def count(self) -> int:
        return self.db.query(Order).count()
