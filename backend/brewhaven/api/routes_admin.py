from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from brewhaven.api.deps import get_principal
from brewhaven.api.errors import http_error
from brewhaven.db import get_db
from brewhaven.schemas.order_schema import RestockIn, StatusUpdateIn, order_out
from brewhaven.schemas.product_schema import CategoryIn, CategoryOut, ProductIn, ProductOut, ProductUpdate
from brewhaven.services.auth import Principal
from brewhaven.services.catalogue_service import CatalogueService
from brewhaven.errors import BrewHavenException
from brewhaven.services.inventory_service import InventoryService
from brewhaven.services.order_query_service import OrderQueryService
from brewhaven.services.order_status_service import OrderStatusService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/orders", summary="List all orders")
def list_orders(
    status: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    try:
        orders = OrderQueryService(db).list_all_orders(principal, status=status, limit=limit)
    except BrewHavenException as e:
        raise http_error(e)
    return [order_out(o, admin=True) for o in orders]


@router.patch("/orders/{order_id}/status", summary="Change order status")
def set_status(
    order_id: int,
    payload: StatusUpdateIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    try:
        order = OrderStatusService(db).set_status(principal, order_id, payload.status)
    except BrewHavenException as e:
        raise http_error(e)
    return order_out(order, admin=True)


@router.post("/products", summary="Create product", status_code=201)
def create_product(
    payload: ProductIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    try:
        p = CatalogueService(db).create_product(principal, payload.model_dump())
    except BrewHavenException as e:
        raise http_error(e)
    return ProductOut.model_validate(p).model_dump()


@router.put("/products/{product_id}", summary="Update product")
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    try:
        p = CatalogueService(db).update_product(
            principal, product_id, payload.model_dump(exclude_unset=True)
        )
    except BrewHavenException as e:
        raise http_error(e)
    return ProductOut.model_validate(p).model_dump()


@router.delete("/products/{product_id}", summary="Delete product")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    try:
        CatalogueService(db).delete_product(principal, product_id)
    except BrewHavenException as e:
        raise http_error(e)
    return {"ok": True}


@router.post("/categories", summary="Create category", status_code=201)
def create_category(
    payload: CategoryIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    try:
        c = CatalogueService(db).create_category(principal, payload.name)
    except BrewHavenException as e:
        raise http_error(e)
    return CategoryOut.model_validate(c).model_dump()


@router.post("/inventory/{product_id}/restock", summary="Add stock")
def restock(
    product_id: int,
    payload: RestockIn,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    try:
        count = InventoryService(db).restock(principal, product_id, payload.qty)
    except BrewHavenException as e:
        raise http_error(e)
    return {"product_id": product_id, "inventory_count": count}


@router.get("/stats", summary="Back-office counters")
def stats(db: Session = Depends(get_db), principal: Principal = Depends(get_principal)):
    try:
        return CatalogueService(db).stats(principal)
    except BrewHavenException as e:
        raise http_error(e)
