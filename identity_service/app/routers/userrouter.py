from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_session
from shared.core.database import get_db
from shared.core.schemas import SessionClaims
from shared.models.users import User
from ..schemas.userschema import CurrentUserOut, PortalRouteResponse
from ..services import userservices, portal_routing

router = APIRouter(tags=["Users"])


@router.get("/api/users/me", response_model=CurrentUserOut)
def read_current_user(
    claims: SessionClaims = Depends(validate_session),
    db: Session = Depends(get_db)
):
    return userservices.get_current_user_profile(db, claims)


@router.get("/api/portal/route", response_model=PortalRouteResponse)
def portal_route(
    claims: SessionClaims = Depends(validate_session),
    db: Session = Depends(get_db)
):
    user: Optional[User] = db.query(User).filter(
        User.clerk_id == claims.user_id).first()
    return portal_routing.resolve_for(claims.metadata, user)
