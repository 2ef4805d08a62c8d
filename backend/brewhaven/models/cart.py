from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from brewhaven.db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class CartSession(Base):
    """Persisted form of a shopper's cart, keyed by the cart_uuid cookie."""

    __tablename__ = "cart_sessions"
    id = Column(Integer, primary_key=True, index=True)
    cart_uuid = Column(String(64), unique=True, index=True, nullable=False)
    owner_id = Column(Integer, nullable=True, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    items = relationship(
        "CartSessionItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartSessionItem.id",
    )


class CartSessionItem(Base):
    __tablename__ = "cart_session_items"
    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(
        Integer,
        ForeignKey("cart_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = Column(Integer, nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Integer, nullable=False, default=0)  # price at time of add

    cart = relationship("CartSession", back_populates="items")
