from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str


class CategoryIn(BaseModel):
    name: str


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    description: Optional[str] = None
    type: str
    image_url: Optional[str] = None
    unit_price: int
    inventory_count: int
    featured: bool
    category_id: Optional[int] = None
    available: bool
    created_at: datetime


class ProductIn(BaseModel):
    name: str
    description: str
    type: str = "Hot"
    category_id: int
    unit_price: int = 100
    inventory_count: int = Field(0, ge=0)
    featured: bool = False
    image_url: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    category_id: Optional[int] = None
    unit_price: Optional[int] = None
    inventory_count: Optional[int] = Field(None, ge=0)
    featured: Optional[bool] = None
    image_url: Optional[str] = None
