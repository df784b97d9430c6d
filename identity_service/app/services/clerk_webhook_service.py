import json
import logging
from typing import Optional

from fastapi import status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.helpers.json_response_helper import error_response
from shared.helpers.user_helper import link_partner
from shared.helpers.webhook_signature import verify_svix_signature
from shared.models.activity_log import log_activity
from shared.models.partners import LocationPartner, ReferralPartner
from shared.models.users import User
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import SELF_SERVE_ROLES, PortalStatus, UserRole, UserStatus

logger = logging.getLogger(__name__)

# partner pipeline stages that already grant portal access
ACTIVE_STAGES = {"trial_active", "active"}


def verify_and_parse(payload: bytes, headers) -> dict:
    secret = settings.CLERK_WEBHOOK_SECRET
    if not secret:
        logger.error("Clerk webhook received but CLERK_WEBHOOK_SECRET is not set")
        return error_response(
            message="Webhook secret not configured",
            status_code=AppStatusCode.WEBHOOK_NOT_CONFIGURED,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    svix_id = headers.get("svix-id")
    svix_timestamp = headers.get("svix-timestamp")
    svix_signature = headers.get("svix-signature")
    if not svix_id or not svix_timestamp or not svix_signature:
        return error_response(
            message="Missing svix headers",
            status_code=AppStatusCode.REQUIRED_FIELD_MISSING,
            http_status=status.HTTP_400_BAD_REQUEST
        )

    if not verify_svix_signature(secret, svix_id, svix_timestamp, payload, svix_signature):
        logger.warning("Rejected Clerk webhook %s: invalid signature", svix_id)
        return error_response(
            message="Invalid signature",
            status_code=AppStatusCode.WEBHOOK_SIGNATURE_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    try:
        body = json.loads(payload)
    except ValueError:
        return error_response(
            message="Invalid JSON payload",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST
        )
    if not isinstance(body, dict):
        return error_response(
            message="Webhook payload must be a JSON object",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST
        )
    return body


def _primary_email(data: dict) -> Optional[str]:
    primary_id = data.get("primary_email_address_id")
    addresses = data.get("email_addresses") or []
    for address in addresses:
        if address.get("id") == primary_id:
            return address.get("email_address")
    return addresses[0].get("email_address") if addresses else None


def _metadata_user_type(data: dict) -> Optional[str]:
    """Role set server-side through Clerk `public_metadata`."""
    public = data.get("public_metadata") or {}
    role = UserRole.parse(public.get("user_type") or public.get("userType"))
    return role.value if role else None


def _requested_user_type(data: dict) -> Optional[str]:
    """Role picked by the user at signup; `unsafe_metadata` is browser-writable."""
    unsafe = data.get("unsafe_metadata") or {}
    role = UserRole.parse(unsafe.get("userType") or unsafe.get("user_type"))
    return role.value if role else None


def _metadata_is_admin(data: dict) -> Optional[bool]:
    public = data.get("public_metadata") or {}
    if "is_admin" not in public:
        return None
    return public.get("is_admin") is True


def _activate(user: User) -> None:
    user.status = UserStatus.approved.value
    user.is_approved = True
    user.portal_status = PortalStatus.account_active.value


def match_user_to_partner(db: Session, user: User) -> None:
    """Link a new user to the partner row that was created for the same contact email."""
    if not user.email:
        return

    location = db.query(LocationPartner).filter(
        LocationPartner.contact_email == user.email,
        LocationPartner.is_deleted == False).first()
    if location:
        link_partner(user, UserRole.LOCATION_PARTNER, location.id)
        user.user_type = UserRole.LOCATION_PARTNER.value
        if location.pipeline_stage in ACTIVE_STAGES:
            _activate(user)
        logger.info("Linked user %s to location partner %s", user.id, location.id)
        return

    referral = db.query(ReferralPartner).filter(
        ReferralPartner.contact_email == user.email,
        ReferralPartner.is_deleted == False).first()
    if referral:
        link_partner(user, UserRole.REFERRAL_PARTNER, referral.id)
        user.user_type = UserRole.REFERRAL_PARTNER.value
        if referral.pipeline_stage in ACTIVE_STAGES:
            _activate(user)
        logger.info("Linked user %s to referral partner %s", user.id, referral.id)


def handle_user_created(db: Session, data: dict) -> User:
    clerk_id = data.get("id")
    email = _primary_email(data)
    if not email:
        logger.error("Clerk user %s has no email address", clerk_id)
        return error_response(
            message="No email",
            status_code=AppStatusCode.REQUIRED_FIELD_MISSING,
            http_status=status.HTTP_400_BAD_REQUEST
        )

    existing = db.query(User).filter(
        or_(User.clerk_id == clerk_id, User.email == email)).first()
    if existing:
        existing.clerk_id = clerk_id
        existing.first_name = data.get("first_name") or existing.first_name
        existing.last_name = data.get("last_name") or existing.last_name
        existing.image_url = data.get("image_url") or existing.image_url
        db.commit()
        logger.info("Linked existing user %s to Clerk id %s", existing.id, clerk_id)
        return existing

    # a requested privileged role stays pending until an admin approves it
    user_type = _metadata_user_type(data) or _requested_user_type(data)
    self_serve = UserRole.parse(user_type) in SELF_SERVE_ROLES
    user = User(
        clerk_id=clerk_id,
        email=email,
        first_name=data.get("first_name") or "",
        last_name=data.get("last_name") or "",
        image_url=data.get("image_url") or "",
        user_type=user_type,
        is_admin=bool(_metadata_is_admin(data)),
        roles=[user_type] if user_type else [],
        status=UserStatus.approved.value if self_serve else UserStatus.pending.value,
        is_approved=self_serve,
        portal_status=PortalStatus.account_active.value if self_serve else PortalStatus.pending_form.value,
        location_partner_ids=[],
        referral_partner_ids=[],
    )
    db.add(user)
    db.flush()

    match_user_to_partner(db, user)
    log_activity(db, entity_type="user", entity_id=user.id, action="created",
                 description=f"User signed up as {user.user_type or 'unknown'}")
    db.commit()
    db.refresh(user)
    logger.info("Created user %s for Clerk id %s", user.id, clerk_id)
    return user


def handle_user_updated(db: Session, data: dict) -> Optional[User]:
    user = db.query(User).filter(User.clerk_id == data.get("id")).first()
    if not user:
        logger.warning("Clerk user.updated for unknown user %s", data.get("id"))
        return None

    email = _primary_email(data)
    if email:
        user.email = email
    for field in ("first_name", "last_name", "image_url"):
        if data.get(field):
            setattr(user, field, data[field])

    user_type = _metadata_user_type(data)
    requested = _requested_user_type(data)
    if user_type:
        user.user_type = user_type
    elif requested and user.status != UserStatus.approved.value:
        user.user_type = requested
    is_admin = _metadata_is_admin(data)
    if is_admin is not None:
        user.is_admin = is_admin

    db.commit()
    return user


def handle_user_deleted(db: Session, data: dict) -> Optional[User]:
    user = db.query(User).filter(User.clerk_id == data.get("id")).first()
    if not user:
        return None
    # rows are kept for audit history
    user.portal_status = PortalStatus.deleted.value
    user.is_approved = False
    log_activity(db, entity_type="user", entity_id=user.id, action="deleted",
                 description="Clerk account deleted")
    db.commit()
    return user


def process_event(db: Session, payload: bytes, headers) -> dict:
    event = verify_and_parse(payload, headers)
    event_type = event.get("type")
    data = event.get("data")
    if not isinstance(data, dict):
        data = {}
    logger.info("Clerk webhook: %s %s", event_type, data.get("id"))

    if event_type == "user.created":
        handle_user_created(db, data)
    elif event_type == "user.updated":
        handle_user_updated(db, data)
    elif event_type == "user.deleted":
        handle_user_deleted(db, data)
    else:
        logger.info("Unhandled Clerk event: %s", event_type)

    return {"received": True, "type": event_type}
