"""Single authorization component shared by every route.

`authorize` resolves the caller's stored role and answers allow/deny with a
reason. The FastAPI dependencies below wrap it so that a denial turns into a
403 before the route touches any data.
"""
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Set

from fastapi import Depends, status
from sqlalchemy.orm import Session

from shared.core.auth import validate_session
from shared.core.database import get_db
from shared.core.schemas import SessionClaims
from shared.helpers.json_response_helper import error_response
from shared.models.users import User
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import ADMIN_ROLES, PRIVILEGED_ROLES, UserRole, UserStatus

logger = logging.getLogger(__name__)


@dataclass
class AccessDecision:
    allowed: bool
    reason: str
    user: Optional[User] = None
    role: Optional[UserRole] = None
    partner_ids: Set[str] = field(default_factory=set)

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def can_access_partner(self, partner_id) -> bool:
        return self.is_privileged or str(partner_id) in self.partner_ids


def resolve_role(user: Optional[User]) -> Optional[UserRole]:
    if user is None:
        return None
    if user.is_admin:
        return UserRole.ADMIN
    return UserRole.parse(user.user_type)


def partner_ids_for(user: User) -> Set[str]:
    ids = list(user.location_partner_ids or []) + \
        list(user.referral_partner_ids or [])
    return {str(i) for i in ids}


def authorize(
    db: Session,
    caller_id: str,
    required_roles: Iterable[UserRole],
    resource_owner_id=None,
) -> AccessDecision:
    user = db.query(User).filter(User.clerk_id == caller_id).first()
    if not user:
        return AccessDecision(False, "Caller has no user record")

    # unapproved signups keep whatever role they asked for but act as nobody
    if not user.is_admin and user.status != UserStatus.approved.value:
        return AccessDecision(False, f"Caller status is '{user.status}'", user=user)

    role = resolve_role(user)
    if role is None:
        return AccessDecision(False, "Caller has no recognised role", user=user)

    partner_ids = partner_ids_for(user)
    decision = AccessDecision(True, "ok", user=user,
                              role=role, partner_ids=partner_ids)

    required = frozenset(required_roles or ())
    if required and role not in required:
        decision.allowed = False
        decision.reason = f"Role '{role.value}' is not permitted"
        return decision

    if resource_owner_id is not None and not decision.can_access_partner(resource_owner_id):
        decision.allowed = False
        decision.reason = "Partner is not in the caller's access list"
    return decision


def _deny(caller_id: str, decision: AccessDecision):
    logger.info("Access denied for %s: %s", caller_id, decision.reason)
    return error_response(
        message="Forbidden",
        status_code=AppStatusCode.AUTHORIZATION_ROLE_DENIED,
        http_status=status.HTTP_403_FORBIDDEN
    )


def require_roles(*roles: UserRole):
    """Dependency factory: the caller's stored role must be one of `roles` (any role when empty)."""
    allowed: FrozenSet[UserRole] = frozenset(roles)

    def dependency(
        claims: SessionClaims = Depends(validate_session),
        db: Session = Depends(get_db),
    ) -> AccessDecision:
        decision = authorize(db, claims.user_id, allowed)
        if not decision.allowed:
            return _deny(claims.user_id, decision)
        return decision

    return dependency


def require_partner_access(*roles: UserRole):
    """Like `require_roles`, additionally scoped to the `partner_id` path parameter."""
    allowed: FrozenSet[UserRole] = frozenset(roles)

    def dependency(
        partner_id: str,
        claims: SessionClaims = Depends(validate_session),
        db: Session = Depends(get_db),
    ) -> AccessDecision:
        decision = authorize(db, claims.user_id, allowed,
                             resource_owner_id=partner_id)
        if not decision.allowed:
            return _deny(claims.user_id, decision)
        return decision

    return dependency


def ensure_partner_access(decision: AccessDecision, partner_id) -> None:
    """Ownership check for rows whose partner id is only known after loading them."""
    if partner_id is None and not decision.is_privileged:
        return error_response(
            message="Forbidden",
            status_code=AppStatusCode.AUTHORIZATION_PARTNER_DENIED,
            http_status=status.HTTP_403_FORBIDDEN
        )
    if partner_id is not None and not decision.can_access_partner(partner_id):
        logger.info("Partner access denied for user %s on partner %s",
                    decision.user.id if decision.user else None, partner_id)
        return error_response(
            message="Forbidden",
            status_code=AppStatusCode.AUTHORIZATION_PARTNER_DENIED,
            http_status=status.HTTP_403_FORBIDDEN
        )


PRIVILEGED = tuple(PRIVILEGED_ROLES)
ADMINS = tuple(ADMIN_ROLES)
