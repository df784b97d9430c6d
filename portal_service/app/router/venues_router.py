# app/router/venues_router.py
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.authorization import PRIVILEGED, AccessDecision, require_roles
from shared.core.database import get_db
from shared.utils.enums import UserRole
from ..crud import venues_crud as crud
from ..schemas.venues_schemas import (
    VenueCreate,
    VenueListResponse,
    VenueOut,
    VenueRequest,
    VenueUpdate,
)

router = APIRouter(prefix="/api/venues", tags=["Venues"])

# venue ownership is checked against the venue's location partner inside the crud layer
VENUE_EDITORS = (*PRIVILEGED, UserRole.LOCATION_PARTNER)


@router.get("", response_model=VenueListResponse)
def get_venues(
    params: VenueRequest = Depends(),
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles())
):
    return crud.get_venues(db, params, current)


@router.get("/{venue_id}", response_model=VenueOut)
def get_venue(
    venue_id: UUID,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles())
):
    return crud.get_venue(db, venue_id, current)


@router.post("", response_model=VenueOut)
def create_venue(
    payload: VenueCreate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*VENUE_EDITORS))
):
    return crud.create_venue(db, payload, current)


@router.put("/{venue_id}", response_model=VenueOut)
def update_venue(
    venue_id: UUID,
    payload: VenueUpdate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*VENUE_EDITORS))
):
    return crud.update_venue(db, venue_id, payload, current)


@router.delete("/{venue_id}", response_model=VenueOut)
def delete_venue(
    venue_id: UUID,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.delete_venue(db, venue_id, current)
