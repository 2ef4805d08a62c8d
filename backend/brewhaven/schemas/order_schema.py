from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ShippingIn(BaseModel):
    address: str = ""
    city: str = ""
    postal_code: str = ""
    phone: str = ""
    notes: Optional[str] = None


class CheckoutIn(BaseModel):
    shipping: ShippingIn
    payment_method: str = "COD"


class StatusUpdateIn(BaseModel):
    status: str


class RestockIn(BaseModel):
    qty: int = Field(..., gt=0)


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    product_id: int
    quantity: int
    unit_price: int
    subtotal: int
    product_name: Optional[str] = None
    product_image_url: Optional[str] = None


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    owner_id: int
    status: str
    payment_method: str
    shipping_address: str
    shipping_city: str
    shipping_postal_code: str
    shipping_phone: str
    notes: Optional[str] = None
    total_amount: int
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut] = []


class AdminOrderOut(OrderOut):
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None


def order_out(order, admin: bool = False):
    items = [
        OrderItemOut(
            id=it.id,
            product_id=it.product_id,
            quantity=it.quantity,
            unit_price=it.unit_price,
            subtotal=it.subtotal,
            product_name=it.product.name if it.product else None,
            product_image_url=it.product.image_url if it.product else None,
        )
        for it in order.items
    ]
    base = OrderOut.model_validate(order).model_dump(exclude={"items"})
    if admin:
        owner = order.owner
        return AdminOrderOut(
            **base,
            items=items,
            owner_name=owner.full_name if owner else None,
            owner_email=owner.email if owner else None,
        )
    return OrderOut(**base, items=items)
