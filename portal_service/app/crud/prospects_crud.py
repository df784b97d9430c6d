# app/crud/prospects_crud.py
import uuid
from datetime import datetime, timezone

from fastapi import status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from shared.core.authorization import AccessDecision
from shared.helpers.code_generator import generate_referral_code
from shared.helpers.json_response_helper import error_response, not_found
from shared.models.partners import LocationPartner, ReferralPartner
from shared.utils.app_status_code import AppStatusCode
from ..enum.portal_enum import (
    CONTACT_ACTIVITY_TYPES,
    PipelineStage,
    ProspectActivityType,
    ProspectStatus,
    ProspectType,
)
from ..models.prospects import Prospect, ProspectActivity
from ..schemas.prospects_schemas import (
    ProspectActivityCreate,
    ProspectActivityOut,
    ProspectConvertResponse,
    ProspectCreate,
    ProspectListResponse,
    ProspectOut,
    ProspectRequest,
    ProspectUpdate,
)


def _created_by(decision: AccessDecision) -> str:
    if decision.user is not None and decision.user.full_name:
        return decision.user.full_name
    return "Admin"


def add_activity(db: Session, prospect: Prospect, type: str, description: str,
                 created_by: str = "System", metadata: dict = None) -> ProspectActivity:
    activity = ProspectActivity(
        prospect_id=prospect.id,
        type=type,
        description=description,
        created_by=created_by,
        meta=metadata or {},
    )
    db.add(activity)
    return activity


def get_prospects(db: Session, params: ProspectRequest) -> ProspectListResponse:
    filters = []
    if params.type and params.type.lower() != "all":
        filters.append(Prospect.prospect_type == params.type)
    if params.status and params.status.lower() != "all":
        filters.append(Prospect.status == params.status)
    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(
            Prospect.first_name.ilike(search_term),
            Prospect.last_name.ilike(search_term),
            Prospect.email.ilike(search_term),
            Prospect.company_name.ilike(search_term),
        ))

    base_query = db.query(Prospect).filter(*filters)
    total = base_query.with_entities(func.count(Prospect.id)).scalar()
    prospects = (
        base_query
        .options(selectinload(Prospect.activities))
        .order_by(Prospect.created_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return ProspectListResponse(
        prospects=[ProspectOut.model_validate(p) for p in prospects],
        total=total,
    )


def get_prospect(db: Session, prospect_id: uuid.UUID) -> Prospect:
    prospect = db.query(Prospect).filter(Prospect.id == prospect_id).first()
    if not prospect:
        return not_found("Prospect")
    return prospect


def create_prospect(db: Session, payload: ProspectCreate) -> Prospect:
    data = payload.model_dump()
    data["tags"] = data.get("tags") or []
    prospect = Prospect(**data, follow_up_count=0)
    db.add(prospect)
    db.flush()
    add_activity(db, prospect, ProspectActivityType.note.value, "Prospect created")
    db.commit()
    db.refresh(prospect)
    return prospect


def update_prospect(db: Session, prospect_id: uuid.UUID, payload: ProspectUpdate, decision: AccessDecision) -> Prospect:
    prospect = get_prospect(db, prospect_id)
    update_data = payload.model_dump(exclude_unset=True)
    previous = prospect.status

    for key, value in update_data.items():
        setattr(prospect, key, value)

    new_status = update_data.get("status")
    if new_status and new_status != previous:
        add_activity(
            db, prospect, ProspectActivityType.status_change.value,
            f'Status changed from "{previous}" to "{new_status}"',
            created_by=_created_by(decision),
            metadata={"old_status": previous, "new_status": new_status},
        )

    db.commit()
    db.refresh(prospect)
    return prospect


def delete_prospect(db: Session, prospect_id: uuid.UUID) -> ProspectOut:
    prospect = get_prospect(db, prospect_id)
    result = ProspectOut.model_validate(prospect)
    # activities go with it through the relationship cascade
    db.delete(prospect)
    db.commit()
    return result


def get_activities(db: Session, prospect_id: uuid.UUID):
    prospect = get_prospect(db, prospect_id)
    return [ProspectActivityOut.model_validate(a) for a in prospect.activities]


def log_prospect_activity(db: Session, prospect_id: uuid.UUID, payload: ProspectActivityCreate,
                          decision: AccessDecision) -> ProspectActivity:
    prospect = get_prospect(db, prospect_id)
    activity = add_activity(
        db, prospect, payload.type, payload.description,
        created_by=payload.created_by or _created_by(decision),
        metadata=payload.metadata,
    )
    if payload.type in CONTACT_ACTIVITY_TYPES:
        prospect.last_contact_date = datetime.now(timezone.utc)
        prospect.follow_up_count = (prospect.follow_up_count or 0) + 1
    db.commit()
    db.refresh(activity)
    return activity


def convert_prospect(db: Session, prospect_id: uuid.UUID, decision: AccessDecision) -> ProspectConvertResponse:
    prospect = get_prospect(db, prospect_id)
    partner_type = prospect.prospect_type or ProspectType.location_partner.value

    if prospect.status == ProspectStatus.won.value and prospect.converted_partner_id:
        return error_response(
            message="Prospect has already been converted",
            status_code=AppStatusCode.INVALID_STATUS_TRANSITION,
            http_status=status.HTTP_400_BAD_REQUEST
        )

    full_name = " ".join(p for p in (prospect.first_name, prospect.last_name) if p)
    if partner_type == ProspectType.location_partner.value:
        partner = LocationPartner(
            contact_first_name=prospect.first_name,
            contact_last_name=prospect.last_name,
            contact_email=prospect.email,
            contact_phone=prospect.phone,
            company_legal_name=prospect.company_name,
            dba_name=prospect.company_name,
            city=prospect.city,
            state=prospect.state,
            pipeline_stage=PipelineStage.initial_review.value,
            referral_source=prospect.source or "CRM",
            notes=prospect.notes,
            tags=prospect.tags or [],
        )
    elif partner_type == ProspectType.referral_partner.value:
        partner = ReferralPartner(
            contact_name=full_name or None,
            contact_email=prospect.email,
            contact_phone=prospect.phone,
            company_name=prospect.company_name,
            city=prospect.city,
            state=prospect.state,
            referral_code=generate_referral_code(db),
            pipeline_stage=PipelineStage.application.value,
            notes=prospect.notes,
        )
    else:
        return error_response(
            message=f"Cannot convert a {partner_type.replace('_', ' ')} prospect",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST
        )

    db.add(partner)
    db.flush()

    prospect.status = ProspectStatus.won.value
    prospect.converted_partner_id = partner.id
    label = partner_type.replace("_", " ")
    add_activity(
        db, prospect, ProspectActivityType.status_change.value,
        f"Converted to {label} (ID: {partner.id})",
        created_by=_created_by(decision),
        metadata={"new_partner_id": str(partner.id), "partner_type": partner_type},
    )
    db.commit()

    return ProspectConvertResponse(
        message=f"Prospect converted to {label}",
        partnerId=partner.id,
        partnerType=partner_type,
    )
