# app/crud/partners_crud.py
import logging
import uuid
from typing import Optional

from fastapi import status
from sqlalchemy import String, func, or_
from sqlalchemy.orm import Session

from shared.core.authorization import AccessDecision, ensure_partner_access
from shared.helpers.code_generator import generate_referral_code
from shared.helpers.json_response_helper import error_response, not_found
from shared.models.activity_log import log_activity
from shared.models.partners import LocationPartner, ReferralPartner
from shared.utils.app_status_code import AppStatusCode
from ..schemas.partners_schemas import (
    LocationPartnerContact,
    LocationPartnerCreate,
    LocationPartnerListResponse,
    LocationPartnerOut,
    LocationPartnerRequest,
    LocationPartnerUpdate,
    PipelineStageUpdate,
    ReferralPartnerCreate,
    ReferralPartnerListResponse,
    ReferralPartnerOut,
    ReferralPartnerRequest,
    ReferralPartnerUpdate,
)

logger = logging.getLogger(__name__)


def scoped_partner_ids(decision: AccessDecision):
    ids = []
    for value in decision.partner_ids:
        try:
            ids.append(uuid.UUID(value))
        except ValueError:
            continue
    return ids


# ----------------- Location partners -----------------

def build_location_partner_filters(params: LocationPartnerRequest, decision: AccessDecision):
    filters = [LocationPartner.is_deleted == False]

    # partner callers only ever see their own rows
    if not decision.is_privileged:
        filters.append(LocationPartner.id.in_(scoped_partner_ids(decision)))

    if params.pipeline_stage and params.pipeline_stage.lower() != "all":
        filters.append(LocationPartner.pipeline_stage == params.pipeline_stage)

    if params.status and params.status.lower() != "all":
        filters.append(LocationPartner.status == params.status)

    if params.tipalti_status:
        filters.append(LocationPartner.tipalti_status == params.tipalti_status)

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(
            or_(
                LocationPartner.company_legal_name.ilike(search_term),
                LocationPartner.dba_name.ilike(search_term),
                LocationPartner.contact_email.ilike(search_term),
                func.cast(LocationPartner.id, String).ilike(search_term),
            )
        )
    return filters


def get_location_partners(db: Session, params: LocationPartnerRequest, decision: AccessDecision) -> LocationPartnerListResponse:
    filters = build_location_partner_filters(params, decision)
    base_query = db.query(LocationPartner).filter(*filters)

    total = base_query.with_entities(func.count(LocationPartner.id)).scalar()
    partners = (
        base_query
        .order_by(LocationPartner.company_legal_name.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return LocationPartnerListResponse(
        data=[LocationPartnerOut.model_validate(p) for p in partners],
        total=total,
    )


def get_location_partner_by_id(db: Session, partner_id) -> Optional[LocationPartner]:
    return db.query(LocationPartner).filter(
        LocationPartner.id == partner_id,
        LocationPartner.is_deleted == False
    ).first()


def get_location_partner(db: Session, partner_id: uuid.UUID) -> LocationPartner:
    partner = get_location_partner_by_id(db, partner_id)
    if not partner:
        return not_found("Location partner")
    return partner


def create_location_partner(db: Session, payload: LocationPartnerCreate, decision: AccessDecision) -> LocationPartner:
    data = payload.model_dump(exclude_unset=False)
    data["status"] = payload.status or "active"
    data["tags"] = payload.tags or []
    partner = LocationPartner(**data)
    db.add(partner)
    db.flush()
    log_activity(db, "location_partner", partner.id, "created",
                 description=f"Location partner {partner.display_name} created",
                 user_id=decision.user.id)
    db.commit()
    db.refresh(partner)
    return partner


def update_location_partner(db: Session, partner_id: uuid.UUID, payload, decision: AccessDecision) -> LocationPartner:
    partner = get_location_partner(db, partner_id)

    if decision.is_privileged:
        update_data = payload.model_dump(exclude_unset=True)
    else:
        # partners may only touch their own contact details
        ensure_partner_access(decision, partner.id)
        allowed = set(LocationPartnerContact.model_fields)
        update_data = {k: v for k, v in payload.model_dump(exclude_unset=True).items()
                       if k in allowed}

    for key, value in update_data.items():
        setattr(partner, key, value)

    db.commit()
    db.refresh(partner)
    return partner


def update_pipeline_stage(db: Session, partner_id: uuid.UUID, payload: PipelineStageUpdate, decision: AccessDecision) -> LocationPartner:
    partner = get_location_partner(db, partner_id)
    previous = partner.pipeline_stage
    partner.pipeline_stage = payload.pipeline_stage
    log_activity(db, "location_partner", partner.id, "stage_change",
                 description=f"Pipeline stage: {previous} -> {partner.pipeline_stage}",
                 details={"old_stage": previous, "new_stage": partner.pipeline_stage,
                          "notes": payload.notes},
                 user_id=decision.user.id)
    db.commit()
    db.refresh(partner)
    return partner


def delete_location_partner(db: Session, partner_id: uuid.UUID, decision: AccessDecision) -> LocationPartner:
    partner = get_location_partner(db, partner_id)
    partner.is_deleted = True
    partner.status = "inactive"
    log_activity(db, "location_partner", partner.id, "deleted",
                 user_id=decision.user.id)
    db.commit()
    db.refresh(partner)
    return partner


# ----------------- Referral partners -----------------

def get_referral_partners(db: Session, params: ReferralPartnerRequest, decision: AccessDecision) -> ReferralPartnerListResponse:
    filters = [ReferralPartner.is_deleted == False]
    if not decision.is_privileged:
        filters.append(ReferralPartner.id.in_(scoped_partner_ids(decision)))
    if params.pipeline_stage and params.pipeline_stage.lower() != "all":
        filters.append(ReferralPartner.pipeline_stage == params.pipeline_stage)
    if params.status and params.status.lower() != "all":
        filters.append(ReferralPartner.status == params.status)
    if params.search:
        search_term = f"%{params.search}%"
        filters.append(
            or_(
                ReferralPartner.contact_name.ilike(search_term),
                ReferralPartner.company_name.ilike(search_term),
                ReferralPartner.contact_email.ilike(search_term),
                ReferralPartner.referral_code.ilike(search_term),
            )
        )

    base_query = db.query(ReferralPartner).filter(*filters)
    total = base_query.with_entities(func.count(ReferralPartner.id)).scalar()
    partners = (
        base_query
        .order_by(ReferralPartner.created_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return ReferralPartnerListResponse(
        data=[ReferralPartnerOut.model_validate(p) for p in partners],
        total=total,
    )


def get_referral_partner(db: Session, partner_id: uuid.UUID) -> ReferralPartner:
    partner = db.query(ReferralPartner).filter(
        ReferralPartner.id == partner_id,
        ReferralPartner.is_deleted == False
    ).first()
    if not partner:
        return not_found("Referral partner")
    return partner


def _ensure_unique_code(db: Session, code: str, partner_id=None):
    query = db.query(ReferralPartner.id).filter(
        ReferralPartner.referral_code == code)
    if partner_id is not None:
        query = query.filter(ReferralPartner.id != partner_id)
    if query.first():
        return error_response(
            message=f"Referral code '{code}' is already in use",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST
        )


def create_referral_partner(db: Session, payload: ReferralPartnerCreate, decision: AccessDecision) -> ReferralPartner:
    data = payload.model_dump()
    if data.get("referral_code"):
        data["referral_code"] = data["referral_code"].upper()
        _ensure_unique_code(db, data["referral_code"])
    else:
        data["referral_code"] = generate_referral_code(db)
    data["commission_type"] = payload.commission_type or "percentage"
    data["status"] = payload.status or "active"

    partner = ReferralPartner(**data)
    db.add(partner)
    db.flush()
    log_activity(db, "referral_partner", partner.id, "created",
                 description=f"Referral partner {partner.referral_code} created",
                 user_id=decision.user.id)
    db.commit()
    db.refresh(partner)
    return partner


def update_referral_partner(db: Session, partner_id: uuid.UUID, payload: ReferralPartnerUpdate) -> ReferralPartner:
    partner = get_referral_partner(db, partner_id)
    update_data = payload.model_dump(exclude_unset=True)
    if update_data.get("referral_code"):
        update_data["referral_code"] = update_data["referral_code"].upper()
        _ensure_unique_code(db, update_data["referral_code"], partner.id)

    for key, value in update_data.items():
        setattr(partner, key, value)

    db.commit()
    db.refresh(partner)
    return partner


def delete_referral_partner(db: Session, partner_id: uuid.UUID, decision: AccessDecision) -> ReferralPartner:
    partner = get_referral_partner(db, partner_id)
    partner.is_deleted = True
    partner.status = "inactive"
    log_activity(db, "referral_partner", partner.id, "deleted",
                 user_id=decision.user.id)
    db.commit()
    db.refresh(partner)
    return partner
