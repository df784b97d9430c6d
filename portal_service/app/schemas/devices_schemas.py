from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from shared.core.schemas import CommonQueryParams
from ..enum.portal_enum import DeviceOwnership, DeviceStatus


class DeviceBase(BaseModel):
    model_config = {"use_enum_values": True}

    venue_id: Optional[UUID] = None
    product_id: Optional[UUID] = None
    device_name: Optional[str] = None
    device_type: Optional[str] = None
    serial_number: Optional[str] = None
    mac_address: Optional[str] = None
    ownership: Optional[DeviceOwnership] = None
    status: Optional[DeviceStatus] = None
    installed_at: Optional[datetime] = None
    notes: Optional[str] = None


class DeviceCreate(DeviceBase):
    venue_id: UUID
    device_type: Optional[str] = "access_point"
    ownership: Optional[DeviceOwnership] = DeviceOwnership.skyyield_owned.value
    status: Optional[DeviceStatus] = DeviceStatus.pending_install.value


class DeviceUpdate(DeviceBase):
    pass


class DeviceOut(DeviceBase):
    id: UUID
    device_id: Optional[str] = None
    ownership: Optional[str] = None
    status: Optional[str] = None
    purchase_request_id: Optional[UUID] = None
    unit_cost: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "use_enum_values": True,
    }


class DeviceRequest(CommonQueryParams):
    venue_id: Optional[UUID] = None
    status: Optional[str] = None


class DeviceListResponse(BaseModel):
    data: List[DeviceOut]
    total: int
