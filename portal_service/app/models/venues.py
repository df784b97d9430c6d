# app/models/venues.py
import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base


class Venue(Base):
    __tablename__ = "venues"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    location_partner_id = Column(Uuid, ForeignKey(
        "location_partners.id"), nullable=False, index=True)
    venue_name = Column(String(200), nullable=False)
    venue_type = Column(String(64))
    address_line_1 = Column(String(200))
    city = Column(String(100))
    state = Column(String(64))
    zip = Column(String(16))
    square_footage = Column(Integer)
    notes = Column(Text)
    status = Column(String(16), default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    devices = relationship("Device", back_populates="venue")
