# app/router/purchase_requests_router.py
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.authorization import ADMINS, PRIVILEGED, AccessDecision, require_roles
from shared.core.database import get_db
from shared.utils.enums import UserRole
from ..crud import purchase_requests_crud as crud
from ..schemas.purchase_requests_schemas import (
    PurchaseRequestCreate,
    PurchaseRequestListResponse,
    PurchaseRequestOut,
    PurchaseRequestRequest,
    PurchaseRequestResponse,
    PurchaseRequestStatusUpdate,
    PurchaseRequestSummary,
)

router = APIRouter(prefix="/api/admin/purchase-requests", tags=["Purchase Requests"])


@router.get("", response_model=PurchaseRequestListResponse)
def get_purchase_requests(
    params: PurchaseRequestRequest = Depends(),
    db: Session = Depends(get_db),
    _: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.get_purchase_requests(db, params)


# declared before /{request_id} so "summary" is not parsed as an id
@router.get("/summary", response_model=PurchaseRequestSummary)
def get_summary(
    db: Session = Depends(get_db),
    _: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.get_summary(db)


@router.get("/{request_id}", response_model=PurchaseRequestResponse)
def get_purchase_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    _: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    purchase_request = crud.get_purchase_request(db, request_id)
    return PurchaseRequestResponse(data=PurchaseRequestOut.model_validate(purchase_request))


@router.post("", response_model=PurchaseRequestResponse)
def create_purchase_request(
    payload: PurchaseRequestCreate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED, UserRole.LOCATION_PARTNER))
):
    purchase_request = crud.create_purchase_request(db, payload, current)
    return PurchaseRequestResponse(data=PurchaseRequestOut.model_validate(purchase_request))


@router.patch("/{request_id}/status", response_model=PurchaseRequestResponse)
def update_status(
    request_id: UUID,
    payload: PurchaseRequestStatusUpdate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*ADMINS))
):
    return crud.update_status(db, request_id, payload, current)
