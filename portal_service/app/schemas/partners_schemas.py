from pydantic import BaseModel, EmailStr
from typing import List, Optional
from uuid import UUID
from datetime import date, datetime

from shared.core.schemas import CommonQueryParams
from ..enum.portal_enum import PipelineStage, TipaltiStatus


# ---------------- Location partners ----------------
class LocationPartnerContact(BaseModel):
    model_config = {"use_enum_values": True}

    contact_first_name: Optional[str] = None
    contact_last_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


class LocationPartnerBase(LocationPartnerContact):
    company_legal_name: Optional[str] = None
    dba_name: Optional[str] = None
    referral_source: Optional[str] = None
    commission_percentage: Optional[float] = None
    notes: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[str] = None


class LocationPartnerCreate(LocationPartnerBase):
    company_legal_name: str
    pipeline_stage: Optional[PipelineStage] = PipelineStage.application.value


class LocationPartnerUpdate(LocationPartnerBase):
    pipeline_stage: Optional[PipelineStage] = None
    loi_status: Optional[str] = None
    loi_device_ownership: Optional[str] = None
    loi_device_count: Optional[int] = None
    contract_status: Optional[str] = None
    tipalti_payee_id: Optional[str] = None
    tipalti_status: Optional[TipaltiStatus] = None
    tipalti_payment_method: Optional[str] = None


class PipelineStageUpdate(BaseModel):
    model_config = {"use_enum_values": True}

    pipeline_stage: PipelineStage
    notes: Optional[str] = None


class LocationPartnerOut(LocationPartnerBase):
    id: UUID
    contact_email: Optional[str] = None
    pipeline_stage: Optional[str] = None
    loi_status: Optional[str] = None
    loi_viewed_at: Optional[datetime] = None
    loi_signed_at: Optional[datetime] = None
    loi_device_ownership: Optional[str] = None
    loi_device_count: Optional[int] = None
    contract_status: Optional[str] = None
    contract_viewed_at: Optional[datetime] = None
    contract_signed_at: Optional[datetime] = None
    tipalti_payee_id: Optional[str] = None
    tipalti_status: Optional[str] = None
    tipalti_payment_method: Optional[str] = None
    tipalti_onboarded_at: Optional[datetime] = None
    last_payment_date: Optional[date] = None
    last_payment_amount: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "use_enum_values": True,
    }


class LocationPartnerRequest(CommonQueryParams):
    pipeline_stage: Optional[str] = None
    status: Optional[str] = None
    tipalti_status: Optional[str] = None


class LocationPartnerListResponse(BaseModel):
    data: List[LocationPartnerOut]
    total: int

    model_config = {"from_attributes": True}


# ---------------- Referral partners ----------------
class ReferralPartnerBase(BaseModel):
    model_config = {"use_enum_values": True}

    contact_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    company_name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    commission_type: Optional[str] = None
    commission_percentage: Optional[float] = None
    commission_per_referral: Optional[float] = None
    notes: Optional[str] = None
    status: Optional[str] = None


class ReferralPartnerCreate(ReferralPartnerBase):
    contact_name: str
    referral_code: Optional[str] = None
    pipeline_stage: Optional[PipelineStage] = PipelineStage.application.value


class ReferralPartnerUpdate(ReferralPartnerBase):
    referral_code: Optional[str] = None
    pipeline_stage: Optional[PipelineStage] = None
    tipalti_payee_id: Optional[str] = None
    tipalti_status: Optional[TipaltiStatus] = None


class ReferralPartnerOut(ReferralPartnerBase):
    id: UUID
    contact_email: Optional[str] = None
    referral_code: Optional[str] = None
    total_referrals: Optional[int] = 0
    active_referrals: Optional[int] = 0
    total_earned: Optional[float] = 0
    pipeline_stage: Optional[str] = None
    agreement_status: Optional[str] = None
    agreement_signed_at: Optional[datetime] = None
    tipalti_payee_id: Optional[str] = None
    tipalti_status: Optional[str] = None
    tipalti_onboarded_at: Optional[datetime] = None
    last_payment_date: Optional[date] = None
    last_payment_amount: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
        "use_enum_values": True,
    }


class ReferralPartnerRequest(CommonQueryParams):
    pipeline_stage: Optional[str] = None
    status: Optional[str] = None


class ReferralPartnerListResponse(BaseModel):
    data: List[ReferralPartnerOut]
    total: int

    model_config = {"from_attributes": True}
