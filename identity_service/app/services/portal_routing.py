"""Decides which portal a signed-in user lands on."""
from typing import Optional

from shared.models.users import User
from shared.utils.enums import UserRole, UserStatus

SIGN_IN_PATH = "/sign-in"
PENDING_APPROVAL_PATH = "/pending-approval"
COMPLETE_SIGNUP_PATH = "/complete-signup"

PORTAL_PATHS = {
    UserRole.ADMIN: "/portals/admin",
    UserRole.SUPER_ADMIN: "/portals/admin",
    UserRole.EMPLOYEE: "/portals/employee",
    UserRole.LOCATION_PARTNER: "/portals/location",
    UserRole.REFERRAL_PARTNER: "/portals/referral",
    UserRole.CHANNEL_PARTNER: "/portals/channel",
    UserRole.RELATIONSHIP_PARTNER: "/portals/relationship",
    UserRole.CONTRACTOR: "/portals/contractor",
    UserRole.CALCULATOR_USER: "/portals/calculator",
    UserRole.CUSTOMER: "/portals/customer",
}


def resolve_portal_path(user_type: Optional[str], status: Optional[str], signed_in: bool = True) -> str:
    if not signed_in:
        return SIGN_IN_PATH

    normalized = (status or "").strip().lower()
    if normalized != UserStatus.approved.value:
        # rejected users see the same page in its rejected state
        return PENDING_APPROVAL_PATH

    role = UserRole.parse(user_type)
    if role is None:
        return COMPLETE_SIGNUP_PATH
    return PORTAL_PATHS[role]


def effective_status(user: Optional[User]) -> Optional[str]:
    """Stored approval state folded into one status value."""
    if user is None:
        return None
    if user.status == UserStatus.rejected.value:
        return UserStatus.rejected.value
    if user.is_admin or user.is_approved or user.status == UserStatus.approved.value:
        return UserStatus.approved.value
    return user.status or UserStatus.pending.value


def effective_user_type(user: Optional[User]) -> Optional[str]:
    if user is None:
        return None
    if user.is_admin:
        return UserRole.ADMIN.value
    return user.user_type


def resolve_for(metadata: Optional[dict], user: Optional[User], signed_in: bool = True) -> dict:
    """Clerk metadata (`userType`, `status`) wins; the stored row fills whatever it lacks."""
    metadata = metadata or {}
    user_type = metadata.get("userType") or metadata.get("user_type") or effective_user_type(user)
    status = metadata.get("status") or effective_status(user)
    if user is not None and user.is_admin:
        user_type, status = UserRole.ADMIN.value, UserStatus.approved.value
    return {
        "redirect": resolve_portal_path(user_type, status, signed_in=signed_in),
        "userType": user_type,
        "status": status,
    }
