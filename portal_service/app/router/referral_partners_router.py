# app/router/referral_partners_router.py
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
from ..crud import partners_crud as crud
from ..schemas.partners_schemas import (
    ReferralPartnerCreate,
    ReferralPartnerListResponse,
    ReferralPartnerOut,
    ReferralPartnerRequest,
    ReferralPartnerUpdate,
)

router = APIRouter(prefix="/api/partners/referral", tags=["Referral Partners"])


@router.get("", response_model=ReferralPartnerListResponse)
def get_referral_partners(
    params: ReferralPartnerRequest = Depends(),
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles())
):
    return crud.get_referral_partners(db, params, current)


@router.get("/{partner_id}", response_model=ReferralPartnerOut)
def get_referral_partner(
    partner_id: UUID,
    db: Session = Depends(get_db),
    _: AccessDecision = Depends(require_partner_access())
):
    return crud.get_referral_partner(db, partner_id)


@router.post("", response_model=ReferralPartnerOut)
def create_referral_partner(
    payload: ReferralPartnerCreate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.create_referral_partner(db, payload, current)


@router.put("/{partner_id}", response_model=ReferralPartnerOut)
def update_referral_partner(
    partner_id: UUID,
    payload: ReferralPartnerUpdate,
    db: Session = Depends(get_db),
    _: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.update_referral_partner(db, partner_id, payload)


@router.delete("/{partner_id}", response_model=ReferralPartnerOut)
def delete_referral_partner(
    partner_id: UUID,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*ADMINS))
):
    return crud.delete_referral_partner(db, partner_id, current)
