# app/crud/venues_crud.py
import uuid
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.authorization import AccessDecision, ensure_partner_access
from shared.helpers.json_response_helper import not_found
from shared.models.activity_log import log_activity
from ..models.devices import Device
from ..models.venues import Venue
from ..schemas.venues_schemas import VenueCreate, VenueListResponse, VenueOut, VenueRequest, VenueUpdate
from .partners_crud import scoped_partner_ids, get_location_partner


def _to_out(db: Session, venue: Venue) -> VenueOut:
    device_count = db.query(func.count(Device.id)).filter(
        Device.venue_id == venue.id).scalar() or 0
    return VenueOut.model_validate(venue).model_copy(update={"device_count": device_count})


def get_venues(db: Session, params: VenueRequest, decision: AccessDecision) -> VenueListResponse:
    filters = []
    if not decision.is_privileged:
        filters.append(Venue.location_partner_id.in_(scoped_partner_ids(decision)))
    if params.location_partner_id:
        filters.append(Venue.location_partner_id == params.location_partner_id)
    if params.status and params.status.lower() != "all":
        filters.append(Venue.status == params.status)
    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(Venue.venue_name.ilike(search_term),
                           Venue.city.ilike(search_term)))

    base_query = db.query(Venue).filter(*filters)
    total = base_query.with_entities(func.count(Venue.id)).scalar()
    venues = (
        base_query
        .order_by(Venue.venue_name.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return VenueListResponse(data=[_to_out(db, v) for v in venues], total=total)


def get_venue_by_id(db: Session, venue_id) -> Optional[Venue]:
    return db.query(Venue).filter(Venue.id == venue_id).first()


def get_venue(db: Session, venue_id: uuid.UUID, decision: AccessDecision) -> VenueOut:
    venue = get_venue_by_id(db, venue_id)
    if not venue:
        return not_found("Venue")
    ensure_partner_access(decision, venue.location_partner_id)
    return _to_out(db, venue)


def create_venue(db: Session, payload: VenueCreate, decision: AccessDecision) -> VenueOut:
    ensure_partner_access(decision, payload.location_partner_id)
    get_location_partner(db, payload.location_partner_id)

    venue = Venue(**payload.model_dump())
    db.add(venue)
    db.flush()
    log_activity(db, "venue", venue.id, "created",
                 description=f"Venue {venue.venue_name} created",
                 user_id=decision.user.id)
    db.commit()
    db.refresh(venue)
    return _to_out(db, venue)


def update_venue(db: Session, venue_id: uuid.UUID, payload: VenueUpdate, decision: AccessDecision) -> VenueOut:
    venue = get_venue_by_id(db, venue_id)
    if not venue:
        return not_found("Venue")
    ensure_partner_access(decision, venue.location_partner_id)

    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(venue, key, value)
    db.commit()
    db.refresh(venue)
    return _to_out(db, venue)


def delete_venue(db: Session, venue_id: uuid.UUID, decision: AccessDecision) -> VenueOut:
    venue = get_venue_by_id(db, venue_id)
    if not venue:
        return not_found("Venue")
    result = _to_out(db, venue)
    # devices outlive the venue they were installed at
    db.query(Device).filter(Device.venue_id == venue.id).update(
        {Device.venue_id: None}, synchronize_session=False)
    log_activity(db, "venue", venue.id, "deleted", user_id=decision.user.id)
    db.delete(venue)
    db.commit()
    return result
