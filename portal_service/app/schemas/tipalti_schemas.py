from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel

from shared.core.schemas import CamelModel
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class TipaltiQuery(EmptyStringModel):
    action: Optional[str] = None
    payeeId: Optional[str] = None


class TipaltiAddress(CamelModel):
    street1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = "US"


class TipaltiActionRequest(CamelModel):
    action: Optional[str] = None

    # createPayee
    payee_id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    entity_type: Optional[str] = "Individual"
    address: Optional[TipaltiAddress] = None
    partner_type: Optional[str] = None
    partner_id: Optional[UUID] = None

    # createBill
    invoice_number: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[str] = "USD"
    description: Optional[str] = None
    due_date: Optional[str] = None


class TipaltiResponse(BaseModel):
    success: bool = True
    data: Optional[Any] = None
    payeeId: Optional[str] = None


class WebhookAck(BaseModel):
    received: bool = True
    event: Optional[str] = None
    details: Dict[str, Any] = {}
