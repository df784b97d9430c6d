import uuid
from sqlalchemy import Boolean, Column, Date, DateTime, Integer, Numeric, String, Text, Uuid, func
from shared.core.database import Base, JsonType


class LocationPartner(Base):
    __tablename__ = "location_partners"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    company_legal_name = Column(String(200))
    dba_name = Column(String(200))
    contact_first_name = Column(String(100))
    contact_last_name = Column(String(100))
    contact_email = Column(String(200), index=True)
    contact_phone = Column(String(32))
    address_line_1 = Column(String(200))
    address_line_2 = Column(String(200))
    city = Column(String(100))
    state = Column(String(64))
    zip = Column(String(16))
    referral_source = Column(String(100))

    pipeline_stage = Column(String(32), default="application")

    # letter of intent
    loi_status = Column(String(32))
    loi_viewed_at = Column(DateTime(timezone=True))
    loi_signed_at = Column(DateTime(timezone=True))
    loi_device_ownership = Column(String(32))
    loi_device_count = Column(Integer)

    contract_status = Column(String(32))
    contract_viewed_at = Column(DateTime(timezone=True))
    contract_signed_at = Column(DateTime(timezone=True))

    # payouts
    tipalti_payee_id = Column(String(64), index=True)
    tipalti_status = Column(String(32))
    tipalti_payment_method = Column(String(32))
    tipalti_onboarded_at = Column(DateTime(timezone=True))
    last_payment_date = Column(Date)
    last_payment_amount = Column(Numeric(12, 2))
    commission_percentage = Column(Numeric(5, 2))

    notes = Column(Text)
    tags = Column(JsonType, default=list)
    status = Column(String(16), default="active")
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())

    @property
    def display_name(self) -> str:
        return self.dba_name or self.company_legal_name or self.contact_email or str(self.id)


class ReferralPartner(Base):
    __tablename__ = "referral_partners"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    contact_name = Column(String(200))
    contact_email = Column(String(200), index=True)
    contact_phone = Column(String(32))
    company_name = Column(String(200))
    city = Column(String(100))
    state = Column(String(64))

    referral_code = Column(String(32), unique=True, index=True)
    commission_type = Column(String(32), default="percentage")
    commission_percentage = Column(Numeric(5, 2))
    commission_per_referral = Column(Numeric(12, 2))
    total_referrals = Column(Integer, default=0)
    active_referrals = Column(Integer, default=0)
    total_earned = Column(Numeric(12, 2), default=0)

    pipeline_stage = Column(String(32), default="application")

    # partner agreement
    agreement_status = Column(String(32))
    agreement_viewed_at = Column(DateTime(timezone=True))
    agreement_signed_at = Column(DateTime(timezone=True))

    tipalti_payee_id = Column(String(64), index=True)
    tipalti_status = Column(String(32))
    tipalti_payment_method = Column(String(32))
    tipalti_onboarded_at = Column(DateTime(timezone=True))
    last_payment_date = Column(Date)
    last_payment_amount = Column(Numeric(12, 2))

    notes = Column(Text)
    status = Column(String(16), default="active")
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())
