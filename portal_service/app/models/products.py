# app/models/products.py
import uuid
from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text, Uuid, func
from shared.core.database import Base, JsonType


class Product(Base):
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sku = Column(String(64), unique=True, index=True)
    name = Column(String(200), nullable=False)
    manufacturer = Column(String(100))
    category = Column(String(64), index=True)
    subcategory = Column(String(64))
    our_cost = Column(Numeric(12, 2))
    partner_price = Column(Numeric(12, 2))
    retail_price = Column(Numeric(12, 2))
    msrp = Column(Numeric(12, 2))
    description = Column(Text)
    specifications = Column(JsonType, default=dict)
    image_url = Column(Text)
    product_url = Column(Text)
    in_stock = Column(Boolean, default=True)
    stock_quantity = Column(Integer, default=0)
    lead_time_days = Column(Integer)
    # partners only see approved catalog items
    is_approved = Column(Boolean, default=False, nullable=False)
    is_featured = Column(Boolean, default=False)
    sort_order = Column(Integer, default=0)
    tags = Column(JsonType, default=list)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())
