import uuid
from sqlalchemy import Column, DateTime, String, Text, Uuid, func
from shared.core.database import Base, JsonType


class ActivityLog(Base):
    """Append-only audit trail written by webhooks and workflow actions."""
    __tablename__ = "activity_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=True)
    entity_type = Column(String(64), nullable=False, index=True)
    entity_id = Column(String(64), nullable=False, index=True)
    action = Column(String(64), nullable=False)
    description = Column(Text)
    details = Column(JsonType, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


def log_activity(db, entity_type: str, entity_id, action: str,
                 details: dict = None, description: str = None, user_id=None) -> ActivityLog:
    entry = ActivityLog(
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        description=description,
        details=details or {},
        user_id=user_id,
    )
    db.add(entry)
    return entry
