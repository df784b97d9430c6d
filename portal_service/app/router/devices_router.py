# app/router/devices_router.py
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.authorization import PRIVILEGED, AccessDecision, require_roles
from shared.core.database import get_db
from ..crud import devices_crud as crud
from ..schemas.devices_schemas import (
    DeviceCreate,
    DeviceListResponse,
    DeviceOut,
    DeviceRequest,
    DeviceUpdate,
)

router = APIRouter(prefix="/api/devices", tags=["Devices"])


@router.get("", response_model=DeviceListResponse)
def get_devices(
    params: DeviceRequest = Depends(),
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles())
):
    return crud.get_devices(db, params, current)


@router.get("/{device_id}", response_model=DeviceOut)
def get_device(
    device_id: UUID,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles())
):
    return crud.get_device(db, device_id, current)


@router.post("", response_model=DeviceOut)
def create_device(
    payload: DeviceCreate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.create_device(db, payload, current)


@router.put("/{device_id}", response_model=DeviceOut)
def update_device(
    device_id: UUID,
    payload: DeviceUpdate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.update_device(db, device_id, payload, current)


@router.delete("/{device_id}", response_model=DeviceOut)
def delete_device(
    device_id: UUID,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.delete_device(db, device_id, current)
