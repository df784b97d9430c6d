# app/crud/purchase_requests_crud.py
import logging
import math
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

from fastapi import status
from sqlalchemy import or_, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.core.authorization import AccessDecision, ensure_partner_access
from shared.core.schemas import PaginationInfo
from shared.helpers.json_response_helper import error_response, not_found
from shared.models.activity_log import log_activity
from shared.models.partners import LocationPartner
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import ADMIN_ROLES, UserRole
from ..enum.portal_enum import (
    DeviceStatus,
    PurchaseRequestAction,
    PurchaseRequestSource,
    PurchaseRequestStatus,
)
from ..models.devices import Device
from ..models.purchase_requests import PurchaseRequest
from ..schemas.purchase_requests_schemas import (
    PurchaseRequestCreate,
    PurchaseRequestListResponse,
    PurchaseRequestOut,
    PurchaseRequestRequest,
    PurchaseRequestResponse,
    PurchaseRequestStatusUpdate,
    PurchaseRequestSummary,
)
from .devices_crud import next_device_id
from .products_crud import get_product_by_id
from .venues_crud import get_venue_by_id

logger = logging.getLogger(__name__)

ENTITY_TYPE = "device_purchase_request"

# ---------------- Summary ----------------

SUMMARY_FUNCTION_SQL = """
CREATE OR REPLACE FUNCTION get_purchase_request_summary()
RETURNS TABLE (
  pending_approval BIGINT,
  auto_created BIGINT,
  approved BIGINT,
  ordered BIGINT,
  shipped BIGINT,
  received BIGINT,
  assigned BIGINT,
  cancelled BIGINT,
  total BIGINT
)
LANGUAGE SQL
STABLE
AS $$
  SELECT
    COUNT(*) FILTER (WHERE status = 'pending_approval'),
    COUNT(*) FILTER (WHERE status = 'auto_created'),
    COUNT(*) FILTER (WHERE status = 'approved'),
    COUNT(*) FILTER (WHERE status = 'ordered'),
    COUNT(*) FILTER (WHERE status = 'shipped'),
    COUNT(*) FILTER (WHERE status = 'received'),
    COUNT(*) FILTER (WHERE status = 'assigned'),
    COUNT(*) FILTER (WHERE status = 'cancelled'),
    COUNT(*)
  FROM device_purchase_requests;
$$;
"""


def install_summary_function(engine) -> bool:
    if engine.dialect.name != "postgresql":
        return False
    with engine.begin() as conn:
        conn.execute(text(SUMMARY_FUNCTION_SQL))
    return True


def tally_statuses(statuses: Iterable[Optional[str]]) -> PurchaseRequestSummary:
    counts = {s.value: 0 for s in PurchaseRequestStatus}
    total = 0
    for value in statuses:
        total += 1
        if value in counts:
            counts[value] += 1
    return PurchaseRequestSummary(**counts, total=total)


def get_summary(db: Session) -> PurchaseRequestSummary:
    try:
        row = db.execute(
            text("SELECT * FROM get_purchase_request_summary()")).mappings().first()
        if row is not None:
            return PurchaseRequestSummary(**{k: int(v or 0) for k, v in row.items()})
    except SQLAlchemyError as e:
        db.rollback()
        logger.info("Summary function unavailable, counting rows instead: %s",
                    e.__class__.__name__)

    return tally_statuses(s for (s,) in db.query(PurchaseRequest.status).all())


# ---------------- Queries ----------------

SORT_COLUMNS = {
    "created_at": PurchaseRequest.created_at,
    "updated_at": PurchaseRequest.updated_at,
    "request_number": PurchaseRequest.request_number,
    "status": PurchaseRequest.status,
    "quantity": PurchaseRequest.quantity,
    "total_cost": PurchaseRequest.total_cost,
}
MAX_PAGE_SIZE = 200


def build_purchase_request_filters(params: PurchaseRequestRequest):
    filters = []
    if params.status and params.status.lower() != "all":
        filters.append(PurchaseRequest.status == params.status)
    if params.source and params.source.lower() != "all":
        filters.append(PurchaseRequest.source == params.source)
    if params.ownership and params.ownership.lower() != "all":
        filters.append(PurchaseRequest.ownership == params.ownership)
    if params.location_partner_id:
        filters.append(PurchaseRequest.location_partner_id == params.location_partner_id)
    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(
            PurchaseRequest.request_number.ilike(search_term),
            PurchaseRequest.product_name.ilike(search_term),
            PurchaseRequest.product_sku.ilike(search_term),
        ))
    return filters


def get_purchase_requests(db: Session, params: PurchaseRequestRequest) -> PurchaseRequestListResponse:
    page = max(params.page or 1, 1)
    limit = min(max(params.limit or 50, 1), MAX_PAGE_SIZE)

    base_query = db.query(PurchaseRequest).filter(*build_purchase_request_filters(params))
    total = base_query.count()

    column = SORT_COLUMNS.get(params.sort or "", PurchaseRequest.created_at)
    ordering = column.asc() if params.order == "asc" else column.desc()
    rows = (
        base_query
        .order_by(ordering)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return PurchaseRequestListResponse(
        data=[PurchaseRequestOut.model_validate(r) for r in rows],
        pagination=PaginationInfo(
            total=total,
            page=page,
            limit=limit,
            totalPages=math.ceil(total / limit) if total else 0,
        ),
        summary=get_summary(db),
    )


def get_purchase_request(db: Session, request_id: uuid.UUID) -> PurchaseRequest:
    purchase_request = db.query(PurchaseRequest).filter(
        PurchaseRequest.id == request_id).first()
    if not purchase_request:
        return not_found("Purchase request")
    return purchase_request


# ---------------- Create ----------------

def next_request_number(db: Session, now: datetime) -> str:
    prefix = f"PR-{now.year}-"
    last = (
        db.query(PurchaseRequest.request_number)
        .filter(PurchaseRequest.request_number.like(f"{prefix}%"))
        .order_by(PurchaseRequest.request_number.desc())
        .first()
    )
    number = int(last[0][len(prefix):]) + 1 if last else 1
    return f"{prefix}{number:05d}"


def _bad_request(message: str, code: str = AppStatusCode.INVALID_INPUT):
    return error_response(
        message=message,
        status_code=code,
        http_status=status.HTTP_400_BAD_REQUEST
    )


def _new_request(db: Session, **fields) -> PurchaseRequest:
    now = datetime.now(timezone.utc)
    quantity = fields["quantity"]
    unit_cost = fields.get("unit_cost")
    purchase_request = PurchaseRequest(
        request_number=next_request_number(db, now),
        total_cost=round(quantity * unit_cost, 2) if unit_cost is not None else None,
        **fields,
    )
    db.add(purchase_request)
    db.flush()
    log_activity(
        db, ENTITY_TYPE, purchase_request.id, "created",
        description=f"Purchase request {purchase_request.request_number} created ({purchase_request.source})",
        user_id=fields.get("requested_by"),
    )
    return purchase_request


def create_purchase_request(db: Session, payload: PurchaseRequestCreate, decision: AccessDecision) -> PurchaseRequest:
    quantity = payload.quantity if payload.quantity is not None else 1
    if quantity < 1:
        return _bad_request("Quantity must be at least 1")

    product_name, product_sku, unit_cost = payload.product_name, payload.product_sku, payload.unit_cost
    if payload.product_id:
        product = get_product_by_id(db, payload.product_id)
        if not product:
            return not_found("Product")
        product_name = product_name or product.name
        product_sku = product_sku or product.sku
        if unit_cost is None and product.our_cost is not None:
            unit_cost = float(product.our_cost)

    if unit_cost is None or unit_cost <= 0:
        return _bad_request("Unit cost must be greater than 0")
    if not payload.ownership:
        return _bad_request("Ownership is required", AppStatusCode.REQUIRED_FIELD_MISSING)

    if decision.role == UserRole.LOCATION_PARTNER:
        if not payload.location_partner_id:
            return _bad_request("locationPartnerId is required", AppStatusCode.REQUIRED_FIELD_MISSING)
        ensure_partner_access(decision, payload.location_partner_id)

    if payload.location_partner_id:
        exists = db.query(LocationPartner.id).filter(
            LocationPartner.id == payload.location_partner_id,
            LocationPartner.is_deleted == False).first()
        if not exists:
            return not_found("Location partner")

    if payload.venue_id:
        venue = get_venue_by_id(db, payload.venue_id)
        if not venue:
            return not_found("Venue")
        if payload.location_partner_id and venue.location_partner_id != payload.location_partner_id:
            return _bad_request("Venue does not belong to the location partner")

    now = datetime.now(timezone.utc)
    fields = dict(
        location_partner_id=payload.location_partner_id,
        venue_id=payload.venue_id,
        product_id=payload.product_id,
        product_name=product_name,
        product_sku=product_sku,
        quantity=quantity,
        unit_cost=unit_cost,
        ownership=payload.ownership,
        urgency=payload.urgency,
        notes=payload.notes,
        internal_notes=payload.internal_notes,
        requested_by=decision.user.id,
    )

    if decision.role in ADMIN_ROLES:
        # admin requests skip the approval queue
        fields.update(
            source=PurchaseRequestSource.admin.value,
            status=PurchaseRequestStatus.approved.value,
            requires_approval=False,
            approved_by=decision.user.id,
            approved_at=now,
        )
    elif decision.role == UserRole.EMPLOYEE:
        fields.update(
            source=PurchaseRequestSource.employee_request.value,
            status=PurchaseRequestStatus.pending_approval.value,
            requires_approval=True,
        )
    else:
        fields.update(
            source=PurchaseRequestSource.partner_request.value,
            status=PurchaseRequestStatus.pending_approval.value,
            requires_approval=True,
        )

    purchase_request = _new_request(db, **fields)
    db.commit()
    db.refresh(purchase_request)
    return purchase_request


def create_loi_purchase_request(db: Session, partner: LocationPartner, quantity: int,
                                ownership: str, venue_id=None) -> PurchaseRequest:
    """Queued automatically when a partner signs an LOI with SkyYield-owned devices. Caller commits."""
    return _new_request(
        db,
        source=PurchaseRequestSource.loi_auto.value,
        status=PurchaseRequestStatus.auto_created.value,
        requires_approval=False,
        location_partner_id=partner.id,
        venue_id=venue_id,
        quantity=quantity,
        ownership=ownership,
        urgency="normal",
        notes=f"Auto-created from signed LOI for {partner.display_name}",
    )


# ---------------- Status workflow ----------------

_ALL = {s.value for s in PurchaseRequestStatus}

# action -> (target status, statuses it may be applied from)
STATUS_TRANSITIONS = {
    PurchaseRequestAction.approve.value: (
        PurchaseRequestStatus.approved.value,
        {PurchaseRequestStatus.pending_approval.value, PurchaseRequestStatus.auto_created.value},
    ),
    PurchaseRequestAction.cancel.value: (
        PurchaseRequestStatus.cancelled.value,
        _ALL - {PurchaseRequestStatus.received.value,
                PurchaseRequestStatus.assigned.value,
                PurchaseRequestStatus.cancelled.value},
    ),
    PurchaseRequestAction.ordered.value: (
        PurchaseRequestStatus.ordered.value,
        {PurchaseRequestStatus.approved.value},
    ),
    PurchaseRequestAction.shipped.value: (
        PurchaseRequestStatus.shipped.value,
        {PurchaseRequestStatus.ordered.value},
    ),
    PurchaseRequestAction.received.value: (
        PurchaseRequestStatus.received.value,
        {PurchaseRequestStatus.shipped.value},
    ),
    PurchaseRequestAction.assign.value: (
        PurchaseRequestStatus.assigned.value,
        {PurchaseRequestStatus.received.value},
    ),
}


def _assign_device(db: Session, purchase_request: PurchaseRequest) -> Optional[Device]:
    if not purchase_request.venue_id:
        return None
    device = Device(
        device_id=next_device_id(db),
        venue_id=purchase_request.venue_id,
        product_id=purchase_request.product_id,
        purchase_request_id=purchase_request.id,
        device_type="access_point",
        ownership=purchase_request.ownership,
        status=DeviceStatus.pending_install.value,
        unit_cost=purchase_request.unit_cost,
    )
    db.add(device)
    db.flush()
    return device


def update_status(db: Session, request_id: uuid.UUID, payload: PurchaseRequestStatusUpdate,
                  decision: AccessDecision) -> PurchaseRequestResponse:
    purchase_request = get_purchase_request(db, request_id)

    rule = STATUS_TRANSITIONS.get(payload.action)
    if rule is None:
        return _bad_request(
            f"Invalid action. Valid actions: {', '.join(STATUS_TRANSITIONS)}")

    target, allowed_from = rule
    previous = purchase_request.status
    if previous not in allowed_from:
        return _bad_request(
            f"Cannot {payload.action} a request that is {previous}",
            AppStatusCode.INVALID_STATUS_TRANSITION)

    now = datetime.now(timezone.utc)
    purchase_request.status = target

    if payload.action == PurchaseRequestAction.approve.value:
        purchase_request.approved_at = now
        purchase_request.approved_by = decision.user.id
        purchase_request.approval_notes = payload.notes
    elif payload.action == PurchaseRequestAction.cancel.value:
        purchase_request.approval_notes = payload.notes
    elif payload.action == PurchaseRequestAction.ordered.value:
        purchase_request.ordered_at = now
        purchase_request.order_reference = payload.order_reference
        purchase_request.supplier = payload.supplier
        purchase_request.expected_delivery_date = payload.expected_delivery_date
    elif payload.action == PurchaseRequestAction.shipped.value:
        purchase_request.shipped_at = now
        purchase_request.tracking_number = payload.tracking_number
    elif payload.action == PurchaseRequestAction.received.value:
        purchase_request.received_at = now
        purchase_request.received_by = decision.user.id
    elif payload.action == PurchaseRequestAction.assign.value:
        purchase_request.assigned_at = now
        device = _assign_device(db, purchase_request)
        if device is not None:
            purchase_request.device_id = device.id

    if payload.notes and payload.action not in (PurchaseRequestAction.approve.value,
                                                PurchaseRequestAction.cancel.value):
        purchase_request.internal_notes = payload.notes

    log_activity(
        db, ENTITY_TYPE, purchase_request.id, "status_change",
        description=f"Purchase request status: {previous} -> {target}",
        details={"action": payload.action, "old_status": previous, "new_status": target},
        user_id=decision.user.id,
    )
    db.commit()
    db.refresh(purchase_request)
    return PurchaseRequestResponse(data=PurchaseRequestOut.model_validate(purchase_request))
