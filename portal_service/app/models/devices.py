# app/models/devices.py
import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Device(Base):
    __tablename__ = "devices"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    device_id = Column(String(16), unique=True, index=True)  # DEV-00001
    venue_id = Column(Uuid, ForeignKey("venues.id"), index=True)
    product_id = Column(Uuid, ForeignKey("products.id"))
    purchase_request_id = Column(Uuid, ForeignKey("device_purchase_requests.id"))
    device_name = Column(String(200))
    device_type = Column(String(64), default="access_point")
    serial_number = Column(String(100))
    mac_address = Column(String(32))
    ownership = Column(String(32), default="skyyield_owned")
    unit_cost = Column(Numeric(12, 2))
    status = Column(String(32), default="pending_install")
    installed_at = Column(DateTime(timezone=True))
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    venue = relationship("Venue", back_populates="devices")
