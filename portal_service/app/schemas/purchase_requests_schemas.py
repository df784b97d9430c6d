from pydantic import BaseModel, ConfigDict
from typing import List, Literal, Optional
from uuid import UUID
from datetime import date, datetime

from shared.core.schemas import CamelModel, PaginationInfo
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel
from ..enum.portal_enum import DeviceOwnership, Urgency


# ---------------- Create ----------------
class PurchaseRequestCreate(CamelModel):
    model_config = ConfigDict(use_enum_values=True)

    location_partner_id: Optional[UUID] = None
    venue_id: Optional[UUID] = None
    product_id: Optional[UUID] = None
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    quantity: Optional[int] = 1
    unit_cost: Optional[float] = None
    ownership: Optional[DeviceOwnership] = None
    urgency: Optional[Urgency] = Urgency.normal.value
    notes: Optional[str] = None
    internal_notes: Optional[str] = None


# ---------------- Status action ----------------
class PurchaseRequestStatusUpdate(CamelModel):
    action: str
    notes: Optional[str] = None
    order_reference: Optional[str] = None
    supplier: Optional[str] = None
    expected_delivery_date: Optional[date] = None
    tracking_number: Optional[str] = None


# ---------------- Output ----------------
class PurchaseRequestOut(BaseModel):
    id: UUID
    request_number: Optional[str] = None
    source: str
    status: str
    location_partner_id: Optional[UUID] = None
    venue_id: Optional[UUID] = None
    product_id: Optional[UUID] = None
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    quantity: int
    unit_cost: Optional[float] = None
    total_cost: Optional[float] = None
    ownership: str
    urgency: Optional[str] = None
    requires_approval: Optional[bool] = None
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    approval_notes: Optional[str] = None
    ordered_at: Optional[datetime] = None
    order_reference: Optional[str] = None
    supplier: Optional[str] = None
    expected_delivery_date: Optional[date] = None
    shipped_at: Optional[datetime] = None
    tracking_number: Optional[str] = None
    received_at: Optional[datetime] = None
    received_by: Optional[UUID] = None
    assigned_at: Optional[datetime] = None
    device_id: Optional[UUID] = None
    requested_by: Optional[UUID] = None
    notes: Optional[str] = None
    internal_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class PurchaseRequestSummary(BaseModel):
    pending_approval: int = 0
    auto_created: int = 0
    approved: int = 0
    ordered: int = 0
    shipped: int = 0
    received: int = 0
    assigned: int = 0
    cancelled: int = 0
    total: int = 0


class PurchaseRequestRequest(EmptyStringModel):
    status: Optional[str] = None
    source: Optional[str] = None
    ownership: Optional[str] = None
    location_partner_id: Optional[UUID] = None
    search: Optional[str] = None
    page: Optional[int] = 1
    limit: Optional[int] = 50
    sort: Optional[str] = "created_at"
    order: Optional[Literal["asc", "desc"]] = "desc"


class PurchaseRequestListResponse(BaseModel):
    data: List[PurchaseRequestOut]
    pagination: PaginationInfo
    summary: PurchaseRequestSummary


class PurchaseRequestResponse(BaseModel):
    success: bool = True
    data: PurchaseRequestOut
