import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from brewhaven.config import settings
from brewhaven.domain.order_status import OrderStatus, check_transition, parse_status
from brewhaven.models.order import Order
from brewhaven.repositories.order_repo import OrderRepository
from brewhaven.services.auth import Principal, require_admin
from brewhaven.errors import BrewHavenException, NotFound, StorageError
from brewhaven.services.inventory_service import InventoryService

log = logging.getLogger("orders.status")


class OrderStatusService:
    def __init__(self, db: Session, restock_on_cancel: Optional[bool] = None):
        self.db = db
        self.orders = OrderRepository(db)
        self.inventory = InventoryService(db)
        self.restock_on_cancel = (
            settings.RESTOCK_ON_CANCEL if restock_on_cancel is None else restock_on_cancel
        )

    def set_status(self, principal: Principal, order_id: int, new_status: str) -> Order:
        """
        Move an order to new_status. Admin only; the role is checked before
        anything is read. Only status and updated_at change, unless
        restock_on_cancel is on, in which case cancelling puts each line's
        quantity back into stock in the same transaction.
        """
        require_admin(principal)
        requested = parse_status(new_status)
        try:
            order = self.orders.get_for_update(order_id)
            if not order:
                raise NotFound(f"Order {order_id} not found")
            previous = order.status
            check_transition(previous, requested)

            if requested == OrderStatus.CANCELLED and self.restock_on_cancel:
                for item in order.items:
                    self.inventory.increment(item.product_id, item.quantity)

            order.status = requested.value
            order.updated_at = datetime.now(timezone.utc)
            self.db.commit()
        except BrewHavenException:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Failed to update order {order_id}: {e}")

        log.info(
            "order %s status %s -> %s by admin=%s",
            order_id,
            previous,
            order.status,
            principal.user_id,
        )
        return self.orders.get(order_id)
