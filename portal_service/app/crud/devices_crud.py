# app/crud/devices_crud.py
import uuid

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.authorization import AccessDecision, ensure_partner_access
from shared.helpers.json_response_helper import not_found
from shared.models.activity_log import log_activity
from ..models.devices import Device
from ..models.venues import Venue
from ..schemas.devices_schemas import DeviceCreate, DeviceListResponse, DeviceOut, DeviceRequest, DeviceUpdate
from .partners_crud import scoped_partner_ids
from .venues_crud import get_venue_by_id

DEVICE_ID_PREFIX = "DEV-"


def next_device_id(db: Session) -> str:
    last = (
        db.query(Device.device_id)
        .filter(Device.device_id.like(f"{DEVICE_ID_PREFIX}%"))
        .order_by(Device.device_id.desc())
        .first()
    )
    number = int(last[0][len(DEVICE_ID_PREFIX):]) + 1 if last else 1
    return f"{DEVICE_ID_PREFIX}{number:05d}"


def _device_partner_id(device: Device):
    return device.venue.location_partner_id if device.venue else None


def get_devices(db: Session, params: DeviceRequest, decision: AccessDecision) -> DeviceListResponse:
    base_query = db.query(Device)
    if not decision.is_privileged:
        base_query = base_query.join(Venue, Device.venue_id == Venue.id).filter(
            Venue.location_partner_id.in_(scoped_partner_ids(decision)))
    if params.venue_id:
        base_query = base_query.filter(Device.venue_id == params.venue_id)
    if params.status and params.status.lower() != "all":
        base_query = base_query.filter(Device.status == params.status)
    if params.search:
        search_term = f"%{params.search}%"
        base_query = base_query.filter(or_(
            Device.device_id.ilike(search_term),
            Device.serial_number.ilike(search_term),
            Device.mac_address.ilike(search_term),
        ))

    total = base_query.with_entities(func.count(Device.id)).scalar()
    devices = (
        base_query
        .order_by(Device.device_id.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return DeviceListResponse(data=[DeviceOut.model_validate(d) for d in devices], total=total)


def get_device(db: Session, device_id: uuid.UUID, decision: AccessDecision) -> Device:
    device = db.query(Device).filter(Device.id == device_id).first()
    if not device:
        return not_found("Device")
    ensure_partner_access(decision, _device_partner_id(device))
    return device


def create_device(db: Session, payload: DeviceCreate, decision: AccessDecision) -> Device:
    venue = get_venue_by_id(db, payload.venue_id)
    if not venue:
        return not_found("Venue")

    device = Device(device_id=next_device_id(db), **payload.model_dump())
    db.add(device)
    db.flush()
    log_activity(db, "device", device.id, "created",
                 description=f"Device {device.device_id} registered at {venue.venue_name}",
                 user_id=decision.user.id if decision.user else None)
    db.commit()
    db.refresh(device)
    return device


def update_device(db: Session, device_id: uuid.UUID, payload: DeviceUpdate, decision: AccessDecision) -> Device:
    device = get_device(db, device_id, decision)
    update_data = payload.model_dump(exclude_unset=True)
    if update_data.get("venue_id") and not get_venue_by_id(db, update_data["venue_id"]):
        return not_found("Venue")
    for key, value in update_data.items():
        setattr(device, key, value)
    db.commit()
    db.refresh(device)
    return device


def delete_device(db: Session, device_id: uuid.UUID, decision: AccessDecision) -> Device:
    device = get_device(db, device_id, decision)
    result = DeviceOut.model_validate(device)
    log_activity(db, "device", device.id, "deleted", user_id=decision.user.id)
    db.delete(device)
    db.commit()
    return result
