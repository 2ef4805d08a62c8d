import logging
import os
import tempfile
from contextlib import ExitStack, contextmanager
from typing import Iterable, Optional

from filelock import FileLock, Timeout
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from brewhaven.config import settings
from brewhaven.models.product import Product
from brewhaven.services.auth import Principal, require_admin
from brewhaven.errors import (
    InsufficientInventory,
    NotFound,
    StorageError,
    ValidationError,
)

log = logging.getLogger("inventory")


def _locks_dir() -> str:
    path = settings.LOCK_DIR or os.path.join(tempfile.gettempdir(), "brewhaven_locks")
    os.makedirs(path, exist_ok=True)
    return path


class InventoryService:
    """
    Inventory ledger: the per-product stock counter and its update discipline.

    decrement() never reads then writes; it issues one conditional UPDATE and
    treats zero affected rows as a lost race or a shortfall. It does not
    commit, so it composes with the caller's transaction.
    """

    def __init__(self, db: Session, lock_timeout: Optional[float] = None):
        self.db = db
        self.lock_timeout = (
            lock_timeout if lock_timeout is not None else settings.INVENTORY_LOCK_TIMEOUT_SECONDS
        )

    @contextmanager
    def lock_products(self, product_ids: Iterable[int]):
        """
        Hold one file lock per product for the duration of the block.
        Locks are taken in ascending id order so two callers can not deadlock.
        """
        locks_dir = _locks_dir()
        with ExitStack() as stack:
            for pid in sorted(set(product_ids)):
                lock = FileLock(os.path.join(locks_dir, f"product_{pid}.lock"))
                try:
                    stack.enter_context(lock.acquire(timeout=self.lock_timeout))
                except Timeout:
                    log.warning("lock timeout for product %s", pid)
                    raise StorageError(
                        f"Could not acquire inventory lock for product {pid}; try again"
                    )
            yield

    def available(self, product_id: int) -> int:
        count = (
            self.db.query(Product.inventory_count)
            .filter(Product.id == product_id)
            .scalar()
        )
        if count is None:
            raise NotFound(f"Product {product_id} not found")
        return int(count)

    def decrement(self, product_id: int, qty: int) -> None:
        if qty <= 0:
            raise ValidationError("Quantity must be positive")
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.inventory_count >= qty)
            .values(inventory_count=Product.inventory_count - qty)
        )
        if result.rowcount == 1:
            return
        # nothing matched: either the product is gone or stock is short
        current = self.available(product_id)
        log.info(
            "decrement rejected product=%s requested=%s available=%s",
            product_id,
            qty,
            current,
        )
        raise InsufficientInventory(product_id, requested=qty, available=current)

    def increment(self, product_id: int, qty: int) -> None:
        if qty <= 0:
            raise ValidationError("Quantity must be positive")
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(inventory_count=Product.inventory_count + qty)
        )
        if result.rowcount != 1:
            raise NotFound(f"Product {product_id} not found")

    def restock(self, principal: Principal, product_id: int, qty: int) -> int:
        """Admin restock; commits and returns the new inventory count."""
        require_admin(principal)
        try:
            self.increment(product_id, qty)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(f"Failed to restock product {product_id}: {e}")
        except Exception:
            self.db.rollback()
            raise
        new_count = self.available(product_id)
        log.info(
            "restocked product=%s by %s to %s (admin=%s)",
            product_id,
            qty,
            new_count,
            principal.user_id,
        )
        return new_count
