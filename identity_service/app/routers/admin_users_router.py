from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.authorization import ADMINS, PRIVILEGED, AccessDecision, require_roles
from shared.core.database import get_db
from ..schemas.userschema import (
    UserListRequest,
    UserListResponse,
    UserOut,
    UserRoleRequest,
    UserRoleUpdate,
    UserRolesResponse,
    UserStatusResponse,
    UserStatusUpdate,
)
from ..services import userservices

router = APIRouter(prefix="/api/admin/users", tags=["Admin Users"])


@router.get("", response_model=UserListResponse)
def get_users(
    params: UserListRequest = Depends(),
    db: Session = Depends(get_db),
    _: AccessDecision = Depends(require_roles(*ADMINS))
):
    return userservices.get_users(db, params)


# ---------------- Approval status ----------------
@router.post("/status", response_model=UserStatusResponse)
def update_user_status(
    payload: UserStatusUpdate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*ADMINS))
):
    return userservices.update_user_status(db, payload, current)


# ---------------- Roles ----------------
@router.get("/roles", response_model=UserRolesResponse)
def get_user_roles(
    params: UserRoleRequest = Depends(),
    db: Session = Depends(get_db),
    _: AccessDecision = Depends(require_roles(*ADMINS))
):
    return userservices.get_user_roles(db, params.userId)


@router.post("/roles", response_model=UserRolesResponse)
def update_user_roles(
    payload: UserRoleUpdate,
    db: Session = Depends(get_db),
    _: AccessDecision = Depends(require_roles(*ADMINS))
):
    return userservices.update_user_roles(db, payload)


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
    _: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return userservices.get_user(db, user_id)
