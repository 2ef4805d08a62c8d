from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from brewhaven.api.deps import get_optional_principal
from brewhaven.api.errors import http_error
from brewhaven.db import get_db
from brewhaven.schemas.cart_schema import AddItemIn, SetQuantityIn, cart_out
from brewhaven.services.auth import Principal
from brewhaven.services.cart_service import CartService
from brewhaven.errors import BrewHavenException

router = APIRouter(prefix="/api/cart", tags=["cart"])

CART_COOKIE = "cart_uuid"


def _get_cart_uuid_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(CART_COOKIE)


def _session(request: Request, response: Response, svc: CartService, principal: Optional[Principal]):
    owner_id = principal.user_id if principal else None
    session = svc.get_or_create_session(_get_cart_uuid_cookie(request), owner_id=owner_id)
    response.set_cookie(CART_COOKIE, session.cart_uuid, httponly=False, samesite="Lax")
    return session


@router.get("", summary="Get cart")
def get_cart(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    svc = CartService(db)
    session = _session(request, response, svc, principal)
    return cart_out(session.cart_uuid, svc.load(session))


@router.post("/items", summary="Add item to cart")
def add_item(
    payload: AddItemIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    svc = CartService(db)
    session = _session(request, response, svc, principal)
    try:
        cart = svc.add_item(session, payload.product_id, payload.qty)
    except BrewHavenException as e:
        raise http_error(e)
    return cart_out(session.cart_uuid, cart)


@router.put("/items/{product_id}", summary="Set item quantity (0 removes)")
def set_quantity(
    product_id: int,
    payload: SetQuantityIn,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    svc = CartService(db)
    session = _session(request, response, svc, principal)
    try:
        cart = svc.set_quantity(session, product_id, payload.qty)
    except BrewHavenException as e:
        raise http_error(e)
    return cart_out(session.cart_uuid, cart)


@router.delete("/items/{product_id}", summary="Remove item")
def remove_item(
    product_id: int,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    svc = CartService(db)
    session = _session(request, response, svc, principal)
    return cart_out(session.cart_uuid, svc.remove_item(session, product_id))


@router.delete("", summary="Clear cart")
def clear_cart(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    svc = CartService(db)
    session = _session(request, response, svc, principal)
    return cart_out(session.cart_uuid, svc.clear(session))
