from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from shared.core.schemas import CommonQueryParams
from ..enum.portal_enum import VenueStatus


class VenueBase(BaseModel):
    model_config = {"use_enum_values": True}

    venue_name: Optional[str] = None
    venue_type: Optional[str] = None
    address_line_1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    square_footage: Optional[int] = None
    notes: Optional[str] = None
    status: Optional[VenueStatus] = None


class VenueCreate(VenueBase):
    location_partner_id: UUID
    venue_name: str
    status: Optional[VenueStatus] = VenueStatus.pending.value


class VenueUpdate(VenueBase):
    pass


class VenueOut(VenueBase):
    id: UUID
    location_partner_id: UUID
    status: Optional[str] = None
    device_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "use_enum_values": True,
    }


class VenueRequest(CommonQueryParams):
    location_partner_id: Optional[UUID] = None
    status: Optional[str] = None


class VenueListResponse(BaseModel):
    data: List[VenueOut]
    total: int
