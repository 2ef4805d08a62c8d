import logging
from typing import Optional

from sqlalchemy.orm import Session

from brewhaven.models.idempotency import IdempotencyRecord

log = logging.getLogger("idempotency")


class IdempotencyRepository:
    """
    Idempotency keys for checkout. A record is written in the same transaction
    as the order it protects, so it exists if and only if that order committed.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[IdempotencyRecord]:
        return self.db.query(IdempotencyRecord).filter(IdempotencyRecord.key == key).first()

    def record(self, key: str, operation: str, order_id: int, owner_id: Optional[int] = None):
        rec = IdempotencyRecord(
            key=key, operation=operation, order_id=order_id, owner_id=owner_id
        )
        self.db.add(rec)
        self.db.flush()
        log.debug("recorded key=%r operation=%s order_id=%s", key, operation, order_id)
        return rec
