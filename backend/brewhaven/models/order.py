from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from brewhaven.db import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    status = Column(
        String(32), nullable=False, default="pending"
    )  # pending, confirmed, processing, out_for_delivery, delivered, cancelled
    payment_method = Column(String(16), nullable=False, default="COD")
    shipping_address = Column(Text, nullable=False)
    shipping_city = Column(String(128), nullable=False)
    shipping_postal_code = Column(String(16), nullable=False)
    shipping_phone = Column(String(32), nullable=False)
    notes = Column(Text, nullable=True)
    total_amount = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, nullable=False)

    items = relationship(
        "OrderLineItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLineItem.id",
    )
    owner = relationship("Profile")


class OrderLineItem(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)  # price snapshot at placement
    subtotal = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
