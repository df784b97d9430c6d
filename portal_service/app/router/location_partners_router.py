# app/router/location_partners_router.py
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.authorization import (
    ADMINS,
    PRIVILEGED,
    AccessDecision,
    require_partner_access,
    require_roles,
)
from shared.core.database import get_db
from shared.utils.enums import UserRole
from ..crud import partners_crud as crud
from ..schemas.partners_schemas import (
    LocationPartnerCreate,
    LocationPartnerListResponse,
    LocationPartnerOut,
    LocationPartnerRequest,
    LocationPartnerUpdate,
    PipelineStageUpdate,
)

router = APIRouter(prefix="/api/partners/location", tags=["Location Partners"])


# ---------------- List (privileged: all, partner: own rows) ----------------
@router.get("", response_model=LocationPartnerListResponse)
def get_location_partners(
    params: LocationPartnerRequest = Depends(),
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles())
):
    return crud.get_location_partners(db, params, current)


@router.get("/{partner_id}", response_model=LocationPartnerOut)
def get_location_partner(
    partner_id: UUID,
    db: Session = Depends(get_db),
    _: AccessDecision = Depends(require_partner_access())
):
    return crud.get_location_partner(db, partner_id)


@router.post("", response_model=LocationPartnerOut)
def create_location_partner(
    payload: LocationPartnerCreate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.create_location_partner(db, payload, current)


@router.put("/{partner_id}", response_model=LocationPartnerOut)
def update_location_partner(
    partner_id: UUID,
    payload: LocationPartnerUpdate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.update_location_partner(db, partner_id, payload, current)


# partners may patch their own contact details, staff may patch anything
@router.patch("/{partner_id}", response_model=LocationPartnerOut)
def patch_location_partner(
    partner_id: UUID,
    payload: LocationPartnerUpdate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(
        require_partner_access(*PRIVILEGED, UserRole.LOCATION_PARTNER))
):
    return crud.update_location_partner(db, partner_id, payload, current)


@router.patch("/{partner_id}/stage", response_model=LocationPartnerOut)
def update_pipeline_stage(
    partner_id: UUID,
    payload: PipelineStageUpdate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.update_pipeline_stage(db, partner_id, payload, current)


# ---------------- Delete (Soft Delete) ----------------
@router.delete("/{partner_id}", response_model=LocationPartnerOut)
def delete_location_partner(
    partner_id: UUID,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*ADMINS))
):
    return crud.delete_location_partner(db, partner_id, current)
