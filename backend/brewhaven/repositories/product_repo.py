from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from brewhaven.models.product import Category, Product


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def get_many(self, product_ids: List[int]) -> List[Product]:
        if not product_ids:
            return []
        return (
            self.db.query(Product)
            .filter(Product.id.in_(product_ids))
            .order_by(Product.id)
            .populate_existing()
            .all()
        )

    def list(
        self,
        q: Optional[str] = None,
        category_id: Optional[int] = None,
        type_: Optional[str] = None,
        featured: Optional[bool] = None,
        page: int = 1,
        size: int = 20,
    ) -> Tuple[List[Product], int]:
        query = self.db.query(Product)
        if q:
            like = f"%{q}%"
            query = query.filter(
                (Product.name.ilike(like)) | (Product.description.ilike(like))
            )
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        if type_:
            query = query.filter(Product.type == type_)
        if featured is not None:
            query = query.filter(Product.featured == featured)
        total = query.with_entities(func.count(Product.id)).scalar() or 0
        items = (
            query.order_by(Product.featured.desc(), Product.created_at.desc(), Product.id.desc())
            .offset((page - 1) * size)
            .limit(size)
            .all()
        )
        return items, total

    def count(self) -> int:
        return self.db.query(func.count(Product.id)).scalar() or 0

    def create(self, **fields) -> Product:
        p = Product(**fields)
        self.db.add(p)
        self.db.flush()
        return p

    def update(self, product: Product, **fields) -> Product:
        for name, value in fields.items():
            setattr(product, name, value)
        self.db.flush()
        return product

    def delete(self, product: Product) -> None:
        self.db.delete(product)
        self.db.flush()

    # categories

    def get_category(self, category_id: int) -> Optional[Category]:
        return self.db.get(Category, category_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.name == name).first()

    def list_categories(self) -> List[Category]:
        return self.db.query(Category).order_by(Category.name).all()

    def create_category(self, name: str) -> Category:
        c = Category(name=name)
        self.db.add(c)
        self.db.flush()
        return c
