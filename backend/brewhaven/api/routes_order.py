from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from brewhaven.api.deps import get_principal
from brewhaven.api.errors import http_error
from brewhaven.api.routes_cart import CART_COOKIE
from brewhaven.db import get_db
from brewhaven.domain.cart import Cart
from brewhaven.schemas.order_schema import CheckoutIn, order_out
from brewhaven.services.auth import Principal
from brewhaven.services.cart_service import CartService
from brewhaven.errors import BrewHavenException, ValidationError
from brewhaven.services.order_query_service import OrderQueryService
from brewhaven.services.order_service import OrderService

router = APIRouter(tags=["orders"])


@router.post("", summary="Place order from the session cart", status_code=201)
def place_order(
    payload: CheckoutIn,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
):
    carts = CartService(db)
    try:
        session = carts.find_session(request.cookies.get(CART_COOKIE))
        if session is None and not idempotency_key:
            raise ValidationError("Cart is empty")
        cart = carts.load(session) if session is not None else Cart()
        order = OrderService(db).place_order(
            principal,
            cart,
            payload.shipping.model_dump(),
            payment_method=payload.payment_method,
            idempotency_key=idempotency_key,
        )
        # the aggregate was cleared by a successful placement
        if session is not None:
            carts.save(session, cart)
    except BrewHavenException as e:
        raise http_error(e)
    return order_out(order)


@router.get("", summary="List my orders")
def my_orders(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    svc = OrderQueryService(db)
    return [order_out(o) for o in svc.list_orders_for_shopper(principal)]


@router.get("/{order_id}", summary="Get one order")
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    try:
        order = OrderQueryService(db).get_order(principal, order_id)
    except BrewHavenException as e:
        raise http_error(e)
    return order_out(order, admin=principal.is_admin)
