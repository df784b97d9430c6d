import secrets
import string

from sqlalchemy.orm import Session

from shared.models.partners import ReferralPartner


def generate_referral_code(db: Session, length: int = 6, prefix: str = "SKY") -> str:
    """Random upper-case referral code, re-drawn until unused"""
    alphabet = string.ascii_uppercase + string.digits
    while True:
        code = prefix + "".join(secrets.choice(alphabet) for _ in range(length))
        exists = db.query(ReferralPartner.id).filter(
            ReferralPartner.referral_code == code).first()
        if not exists:
            return code


def tipalti_payee_id(partner_type: str, partner_id) -> str:
    # LP-1A2B3C4D / RP-1A2B3C4D
    prefix = "LP" if partner_type == "location_partner" else "RP"
    return f"{prefix}-{str(partner_id).replace('-', '')[:8].upper()}"
