import uuid
from sqlalchemy import Boolean, Column, DateTime, String, Text, Uuid, func
from shared.core.database import Base, JsonType


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    clerk_id = Column(String(64), unique=True, index=True, nullable=True)
    email = Column(String(200), index=True, nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    image_url = Column(Text)

    user_type = Column(String(32), nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    roles = Column(JsonType, default=list)

    # approval workflow
    status = Column(String(16), nullable=False, default="pending")
    is_approved = Column(Boolean, default=False, nullable=False)
    approved_at = Column(DateTime(timezone=True))
    rejected_at = Column(DateTime(timezone=True))
    portal_status = Column(String(32), default="pending_form")

    # partner rows this user may act on
    location_partner_ids = Column(JsonType, default=list)
    referral_partner_ids = Column(JsonType, default=list)

    last_login_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)
