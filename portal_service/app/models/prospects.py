# app/models/prospects.py
import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid, func
from sqlalchemy.orm import relationship
from shared.core.database import Base, JsonType


class Prospect(Base):
    __tablename__ = "prospects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    prospect_type = Column(String(32), default="location_partner", index=True)
    status = Column(String(16), default="new", index=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    email = Column(String(200))
    phone = Column(String(32))
    title = Column(String(100))
    company_name = Column(String(200))
    company_type = Column(String(64))
    city = Column(String(100))
    state = Column(String(64))
    source = Column(String(64))
    source_detail = Column(String(200))
    estimated_value = Column(Numeric(12, 2))
    probability = Column(Integer)
    assigned_to = Column(String(100))
    notes = Column(Text)
    tags = Column(JsonType, default=list)
    last_contact_date = Column(DateTime(timezone=True))
    follow_up_count = Column(Integer, default=0, nullable=False)
    converted_partner_id = Column(Uuid)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    activities = relationship(
        "ProspectActivity", back_populates="prospect",
        cascade="all, delete-orphan",
        order_by="ProspectActivity.created_at.desc()")


class ProspectActivity(Base):
    __tablename__ = "prospect_activities"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    prospect_id = Column(Uuid, ForeignKey("prospects.id"), nullable=False, index=True)
    type = Column(String(32), nullable=False)
    description = Column(Text)
    created_by = Column(String(100), default="Admin")
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JsonType, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    prospect = relationship("Prospect", back_populates="activities")
