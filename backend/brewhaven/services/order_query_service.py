from typing import List, Optional

from sqlalchemy.orm import Session

from brewhaven.domain.order_status import parse_status
from brewhaven.models.order import Order
from brewhaven.repositories.order_repo import OrderRepository
from brewhaven.services.auth import Principal, require_admin, require_principal
from brewhaven.errors import NotFound


class OrderQueryService:
    """Read-only order projections for shoppers and the back-office."""

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepository(db)

    def list_orders_for_shopper(self, principal: Principal) -> List[Order]:
        principal = require_principal(principal)
        return self.orders.list_for_owner(principal.user_id)

    def list_all_orders(
        self,
        principal: Principal,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Order]:
        require_admin(principal)
        if status:
            status = parse_status(status).value
        return self.orders.list_all(status=status, limit=limit)

    def get_order(self, principal: Principal, order_id: int) -> Order:
        principal = require_principal(principal)
        order = self.orders.get(order_id)
        if not order:
            raise NotFound(f"Order {order_id} not found")
        if order.owner_id != principal.user_id and not principal.is_admin:
            # do not reveal other shoppers' order ids
            raise NotFound(f"Order {order_id} not found")
        return order
