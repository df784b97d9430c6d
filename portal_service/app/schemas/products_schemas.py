from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime

from shared.core.schemas import CommonQueryParams


class ProductBase(BaseModel):
    sku: Optional[str] = None
    name: Optional[str] = None
    manufacturer: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    our_cost: Optional[float] = None
    partner_price: Optional[float] = None
    retail_price: Optional[float] = None
    msrp: Optional[float] = None
    description: Optional[str] = None
    specifications: Optional[Dict[str, Any]] = None
    image_url: Optional[str] = None
    product_url: Optional[str] = None
    in_stock: Optional[bool] = None
    stock_quantity: Optional[int] = None
    lead_time_days: Optional[int] = None
    is_featured: Optional[bool] = None
    sort_order: Optional[int] = None
    tags: Optional[List[str]] = None


class ProductCreate(ProductBase):
    name: str
    is_approved: Optional[bool] = False


class ProductUpdate(ProductBase):
    pass


class ProductApprovalUpdate(BaseModel):
    is_approved: bool


class ProductOut(ProductBase):
    id: UUID
    is_approved: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class ProductRequest(CommonQueryParams):
    category: Optional[str] = None
    approved: Optional[bool] = None


class ProductListResponse(BaseModel):
    data: List[ProductOut]
    total: int
