from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID
from datetime import datetime

from shared.utils.enums import UserRole, UserStatus
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from shared.core.schemas import CamelModel, CommonQueryParams


# For reading a user (response model)
class UserOut(CamelModel):
    id: UUID
    clerk_id: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    full_name: Optional[str] = None
    image_url: Optional[str] = None
    user_type: Optional[str] = None
    is_admin: bool = False
    roles: Optional[List[str]] = None
    status: Optional[str] = None
    is_approved: bool = False
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    portal_status: Optional[str] = None
    location_partner_ids: Optional[List[str]] = None
    referral_partner_ids: Optional[List[str]] = None
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class CurrentUserOut(UserOut):
    redirect: str


class UserListRequest(CommonQueryParams):
    user_type: Optional[str] = None


class UserListResponse(BaseModel):
    users: List[UserOut]
    grouped: Dict[str, List[UserOut]]
    counts: Dict[str, int]
    total: int


class UserStatusUpdate(CamelModel):
    user_id: str
    status: UserStatus


class UserStatusResponse(CamelModel):
    success: bool = True
    user: UserOut


class UserRoleUpdate(CamelModel):
    user_id: str
    role: UserRole
    partner_id: Optional[str] = None
    action: Literal["add", "remove"] = "add"


class UserRoleRequest(EmptyStringModel):
    userId: str


class UserRolesResponse(CamelModel):
    user: UserOut
    partners: Dict[str, List[Dict[str, Any]]] = {}


class PortalRouteResponse(BaseModel):
    redirect: str
    userType: Optional[str] = None
    status: Optional[str] = None
