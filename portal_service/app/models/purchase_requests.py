# app/models/purchase_requests.py
import uuid
from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid, func
from shared.core.database import Base


class PurchaseRequest(Base):
    __tablename__ = "device_purchase_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    request_number = Column(String(16), unique=True, index=True)  # PR-2025-00001
    source = Column(String(32), nullable=False)
    # plain string: rows written outside this service may carry other values
    status = Column(String(32), nullable=False, index=True)

    location_partner_id = Column(Uuid, ForeignKey("location_partners.id"), index=True)
    venue_id = Column(Uuid, ForeignKey("venues.id"))
    product_id = Column(Uuid, ForeignKey("products.id"))
    product_name = Column(String(200))
    product_sku = Column(String(64))
    quantity = Column(Integer, nullable=False, default=1)
    unit_cost = Column(Numeric(12, 2))
    total_cost = Column(Numeric(12, 2))
    ownership = Column(String(32), nullable=False)
    urgency = Column(String(16), default="normal")
    requires_approval = Column(Boolean, default=True)

    approved_by = Column(Uuid)
    approved_at = Column(DateTime(timezone=True))
    approval_notes = Column(Text)
    ordered_at = Column(DateTime(timezone=True))
    order_reference = Column(String(100))
    supplier = Column(String(100))
    expected_delivery_date = Column(Date)
    shipped_at = Column(DateTime(timezone=True))
    tracking_number = Column(String(100))
    received_at = Column(DateTime(timezone=True))
    received_by = Column(Uuid)
    assigned_at = Column(DateTime(timezone=True))
    device_id = Column(Uuid)

    requested_by = Column(Uuid)
    notes = Column(Text)
    internal_notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())
