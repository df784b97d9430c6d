import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List

from fastapi import status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.authorization import AccessDecision
from shared.core.schemas import SessionClaims
from shared.helpers.code_generator import generate_referral_code
from shared.helpers.json_response_helper import error_response, not_found
from shared.helpers.user_helper import get_user_by_identifier, link_partner, unlink_partners
from shared.models.activity_log import log_activity
from shared.models.partners import LocationPartner, ReferralPartner
from shared.models.users import User
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import PortalStatus, UserRole, UserStatus

from ..helpers.clerk_helper import push_public_metadata
from ..schemas.userschema import (
    CurrentUserOut,
    UserListRequest,
    UserListResponse,
    UserOut,
    UserRoleUpdate,
    UserRolesResponse,
    UserStatusResponse,
    UserStatusUpdate,
)
from . import portal_routing

logger = logging.getLogger(__name__)

# groups shown on the admin users page
USER_GROUPS = [
    "admin",
    UserRole.LOCATION_PARTNER.value,
    UserRole.REFERRAL_PARTNER.value,
    UserRole.CHANNEL_PARTNER.value,
    UserRole.RELATIONSHIP_PARTNER.value,
    UserRole.CONTRACTOR.value,
    UserRole.EMPLOYEE.value,
    UserRole.CALCULATOR_USER.value,
    UserRole.CUSTOMER.value,
]

DEFAULT_REFERRAL_COMMISSION = 15


def get_current_user_profile(db: Session, claims: SessionClaims) -> CurrentUserOut:
    user = db.query(User).filter(User.clerk_id == claims.user_id).first()
    if not user:
        return not_found("User")

    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    route = portal_routing.resolve_for(None, user)
    return CurrentUserOut.model_validate(
        {**UserOut.model_validate(user).model_dump(), "redirect": route["redirect"]}
    )


def partner_counts(db: Session) -> Dict[str, int]:
    return {
        UserRole.LOCATION_PARTNER.value: db.query(func.count(LocationPartner.id))
        .filter(LocationPartner.is_deleted == False).scalar() or 0,
        UserRole.REFERRAL_PARTNER.value: db.query(func.count(ReferralPartner.id))
        .filter(ReferralPartner.is_deleted == False).scalar() or 0,
    }


def get_users(db: Session, params: UserListRequest) -> UserListResponse:
    query = db.query(User)

    if params.user_type and params.user_type.lower() != "all":
        query = query.filter(User.user_type == params.user_type)

    if params.search:
        search_term = f"%{params.search}%"
        query = query.filter(
            or_(
                User.email.ilike(search_term),
                User.first_name.ilike(search_term),
                User.last_name.ilike(search_term),
            )
        )

    total = query.with_entities(func.count(User.id)).scalar()

    users = (
        query.order_by(User.created_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    results = [UserOut.model_validate(u) for u in users]

    grouped: Dict[str, List[UserOut]] = {group: [] for group in USER_GROUPS}
    for user in results:
        if user.is_admin:
            grouped["admin"].append(user)
        if user.user_type in grouped and user.user_type != "admin":
            grouped[user.user_type].append(user)

    return UserListResponse(
        users=results,
        grouped=grouped,
        counts=partner_counts(db),
        total=total,
    )


def get_user(db: Session, user_id: str) -> UserOut:
    user = get_user_by_identifier(db, user_id)
    if not user:
        return not_found("User")
    return UserOut.model_validate(user)


def update_user_status(db: Session, payload: UserStatusUpdate, actor: AccessDecision) -> UserStatusResponse:
    user = get_user_by_identifier(db, payload.user_id)
    if not user:
        return not_found("User")

    now = datetime.now(timezone.utc)
    previous = user.status
    user.status = payload.status.value
    user.is_approved = payload.status == UserStatus.approved

    if payload.status == UserStatus.approved:
        user.approved_at = now
        user.rejected_at = None
        user.portal_status = PortalStatus.account_active.value
    elif payload.status == UserStatus.rejected:
        user.rejected_at = now
        user.approved_at = None
        user.portal_status = PortalStatus.pending_form.value
    else:
        user.approved_at = None
        user.rejected_at = None
        user.portal_status = PortalStatus.pending_form.value

    log_activity(
        db,
        entity_type="user",
        entity_id=user.id,
        action="status_change",
        description=f"User status: {previous} -> {user.status}",
        details={"old_status": previous, "new_status": user.status},
        user_id=actor.user.id if actor.user else None,
    )
    db.commit()
    db.refresh(user)

    push_public_metadata(user.clerk_id, {
        "status": user.status,
        "userType": user.user_type,
    })
    return UserStatusResponse(user=UserOut.model_validate(user))


def _uuid_list(values) -> list:
    ids = []
    for value in values or []:
        try:
            ids.append(uuid.UUID(str(value)))
        except ValueError:
            logger.warning("Ignoring malformed partner id %s", value)
    return ids


def _linked_partners(db: Session, user: User) -> Dict[str, list]:
    location_ids = _uuid_list(user.location_partner_ids)
    referral_ids = _uuid_list(user.referral_partner_ids)

    location = [
        {"id": str(p.id), "name": p.display_name, "pipeline_stage": p.pipeline_stage}
        for p in db.query(LocationPartner).filter(LocationPartner.id.in_(location_ids)).all()
    ] if location_ids else []
    referral = [
        {"id": str(p.id), "referral_code": p.referral_code,
         "commission_type": p.commission_type,
         "commission_percentage": float(p.commission_percentage) if p.commission_percentage is not None else None}
        for p in db.query(ReferralPartner).filter(ReferralPartner.id.in_(referral_ids)).all()
    ] if referral_ids else []
    return {"location_partners": location, "referral_partners": referral}


def get_user_roles(db: Session, user_id: str) -> UserRolesResponse:
    user = get_user_by_identifier(db, user_id)
    if not user:
        return not_found("User")
    return UserRolesResponse(user=UserOut.model_validate(user), partners=_linked_partners(db, user))


def update_user_roles(db: Session, payload: UserRoleUpdate) -> UserRolesResponse:
    user = get_user_by_identifier(db, payload.user_id)
    if not user:
        return not_found("User")

    role = payload.role
    roles = [r for r in (user.roles or []) if r != role.value]

    if payload.action == "remove":
        unlink_partners(user, role)
        user.roles = roles
        if role in (UserRole.ADMIN, UserRole.SUPER_ADMIN):
            user.is_admin = False
        if user.user_type == role.value:
            user.user_type = roles[0] if roles else None
    else:
        partner_id = payload.partner_id
        if role == UserRole.REFERRAL_PARTNER and not partner_id:
            partner = ReferralPartner(
                contact_name=user.full_name or None,
                contact_email=user.email,
                referral_code=generate_referral_code(db),
                commission_type="percentage",
                commission_percentage=DEFAULT_REFERRAL_COMMISSION,
                pipeline_stage="active",
            )
            db.add(partner)
            db.flush()
            partner_id = str(partner.id)
        elif role == UserRole.LOCATION_PARTNER and partner_id:
            exists = db.query(LocationPartner.id).filter(
                LocationPartner.id == _as_uuid(partner_id)).first()
            if not exists:
                return error_response(
                    message="Location partner not found",
                    status_code=AppStatusCode.RECORD_NOT_FOUND,
                    http_status=status.HTTP_404_NOT_FOUND
                )

        link_partner(user, role, partner_id)
        user.roles = roles + [role.value]
        if role in (UserRole.ADMIN, UserRole.SUPER_ADMIN):
            user.is_admin = True
        if not user.user_type:
            user.user_type = role.value

    log_activity(
        db,
        entity_type="user",
        entity_id=user.id,
        action=f"role_{payload.action}",
        details={"role": role.value, "partner_id": payload.partner_id},
    )
    db.commit()
    db.refresh(user)
    return UserRolesResponse(user=UserOut.model_validate(user), partners=_linked_partners(db, user))


def _as_uuid(value: str):
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return error_response(
            message="Invalid partner id",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST
        )
