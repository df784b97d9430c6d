import uuid
from typing import Optional

from sqlalchemy.orm import Session

from shared.models.users import User
from shared.utils.enums import UserRole


def get_user_by_identifier(db: Session, identifier: str) -> Optional[User]:
    """Look a user up by primary key or by Clerk id"""
    try:
        user = db.query(User).filter(User.id == uuid.UUID(str(identifier))).first()
        if user:
            return user
    except ValueError:
        pass
    return db.query(User).filter(User.clerk_id == str(identifier)).first()


def partner_list_attr(role: UserRole) -> Optional[str]:
    if role == UserRole.LOCATION_PARTNER:
        return "location_partner_ids"
    if role == UserRole.REFERRAL_PARTNER:
        return "referral_partner_ids"
    return None


def link_partner(user: User, role: UserRole, partner_id) -> bool:
    attr = partner_list_attr(role)
    if attr is None or partner_id is None:
        return False
    current = [str(p) for p in (getattr(user, attr) or [])]
    if str(partner_id) in current:
        return False
    # reassign so the JSON column is flagged dirty
    setattr(user, attr, current + [str(partner_id)])
    return True


def unlink_partners(user: User, role: UserRole) -> None:
    attr = partner_list_attr(role)
    if attr is not None:
        setattr(user, attr, [])
