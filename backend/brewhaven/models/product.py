from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from brewhaven.db import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(128), unique=True, nullable=False)

    products = relationship("Product", back_populates="category")


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("inventory_count >= 0", name="ck_products_inventory_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(32), nullable=False, default="Hot")  # Hot, Cold
    image_url = Column(String(512), nullable=True)
    unit_price = Column(Integer, nullable=False, default=0)
    inventory_count = Column(Integer, nullable=False, default=0)
    featured = Column(Boolean, nullable=False, default=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    category = relationship("Category", back_populates="products")

    @property
    def available(self) -> bool:
        return (self.inventory_count or 0) > 0

    def __repr__(self):
        return f"<Product id={self.id} name={self.name}>"
