from typing import List

from pydantic import BaseModel, Field

from brewhaven.domain.cart import Cart


class AddItemIn(BaseModel):
    product_id: int
    qty: int = Field(1, gt=0)


class SetQuantityIn(BaseModel):
    qty: int


class CartLineOut(BaseModel):
    product_id: int
    unit_price: int
    quantity: int
    subtotal: int


class CartOut(BaseModel):
    cart_uuid: str
    items: List[CartLineOut]
    item_count: int
    subtotal: int


def cart_out(cart_uuid: str, cart: Cart) -> CartOut:
    count, subtotal = cart.totals()
    return CartOut(
        cart_uuid=cart_uuid,
        items=[
            CartLineOut(
                product_id=it.product_id,
                unit_price=it.unit_price,
                quantity=it.quantity,
                subtotal=it.subtotal,
            )
            for it in cart
        ],
        item_count=count,
        subtotal=subtotal,
    )
