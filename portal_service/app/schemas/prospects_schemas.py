from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from uuid import UUID
from datetime import datetime

from shared.core.schemas import CommonQueryParams
from ..enum.portal_enum import ProspectActivityType, ProspectStatus, ProspectType


class ProspectBase(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    company_name: Optional[str] = None
    company_type: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    source: Optional[str] = None
    source_detail: Optional[str] = None
    estimated_value: Optional[float] = None
    probability: Optional[int] = None
    assigned_to: Optional[str] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None


class ProspectCreate(ProspectBase):
    model_config = {"use_enum_values": True}

    prospect_type: Optional[ProspectType] = ProspectType.location_partner.value
    status: Optional[ProspectStatus] = ProspectStatus.new.value


class ProspectUpdate(ProspectBase):
    model_config = {"use_enum_values": True}

    prospect_type: Optional[ProspectType] = None
    status: Optional[ProspectStatus] = None


class ProspectActivityCreate(BaseModel):
    model_config = {"use_enum_values": True}

    type: ProspectActivityType
    description: Optional[str] = None
    created_by: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class ProspectActivityOut(BaseModel):
    id: UUID
    prospect_id: UUID
    type: str
    description: Optional[str] = None
    created_by: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias="meta")
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "populate_by_name": True,
    }


class ProspectOut(ProspectBase):
    id: UUID
    prospect_type: Optional[str] = None
    status: Optional[str] = None
    last_contact_date: Optional[datetime] = None
    follow_up_count: int = 0
    converted_partner_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    activities: List[ProspectActivityOut] = []

    model_config = {
        "from_attributes": True
    }


class ProspectRequest(CommonQueryParams):
    type: Optional[str] = None
    status: Optional[str] = None


class ProspectListResponse(BaseModel):
    prospects: List[ProspectOut]
    total: int


class ProspectResponse(BaseModel):
    prospect: ProspectOut


class ProspectActivityResponse(BaseModel):
    activity: ProspectActivityOut


class ProspectActivityListResponse(BaseModel):
    activities: List[ProspectActivityOut]


class ProspectConvertResponse(BaseModel):
    success: bool = True
    message: str
    partnerId: Optional[UUID] = None
    partnerType: str
