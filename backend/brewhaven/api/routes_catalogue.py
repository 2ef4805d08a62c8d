from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from brewhaven.api.errors import http_error
from brewhaven.db import get_db
from brewhaven.schemas.product_schema import CategoryOut, ProductOut
from brewhaven.services.catalogue_service import CatalogueService
from brewhaven.errors import BrewHavenException

router = APIRouter(tags=["catalogue"])


@router.get("", summary="List products")
def list_products(
    q: Optional[str] = Query(None, description="search term"),
    category_id: Optional[int] = None,
    type: Optional[str] = Query(None, description="Hot or Cold"),
    featured: Optional[bool] = None,
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    svc = CatalogueService(db)
    items, total = svc.list_products(
        q=q, category_id=category_id, type_=type, featured=featured, page=page, size=size
    )
    return {
        "items": [ProductOut.model_validate(p).model_dump() for p in items],
        "total": total,
    }


@router.get("/categories", summary="List categories")
def list_categories(db: Session = Depends(get_db)):
    return [CategoryOut.model_validate(c).model_dump() for c in CatalogueService(db).list_categories()]


@router.get("/{product_id}", summary="Get product")
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        p = CatalogueService(db).get_product(product_id)
    except BrewHavenException as e:
        raise http_error(e)
    return ProductOut.model_validate(p).model_dump()
