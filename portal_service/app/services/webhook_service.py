"""Inbound Tipalti and DocuSeal webhooks.

Both providers sign the raw request body with a hex HMAC-SHA256. Events are
matched to partner rows and every accepted event lands in the activity log.
"""
import json
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import status
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.helpers.json_response_helper import error_response
from shared.helpers.webhook_signature import verify_hex_signature
from shared.models.activity_log import log_activity
from shared.models.partners import LocationPartner, ReferralPartner
from shared.utils.app_status_code import AppStatusCode
from ..crud.purchase_requests_crud import create_loi_purchase_request
from ..enum.portal_enum import DeviceOwnership, PipelineStage, TipaltiStatus
from ..schemas.tipalti_schemas import WebhookAck

logger = logging.getLogger(__name__)

TIPALTI_SIGNATURE_HEADER = "x-tipalti-signature"
DOCUSEAL_SIGNATURE_HEADER = "x-docuseal-signature"

# Tipalti has shipped three spellings of each event name
TIPALTI_EVENTS = {
    "payee_onboarded": "payee_onboarded",
    "payee.onboarded": "payee_onboarded",
    "PayeeOnboarded": "payee_onboarded",
    "payment_submitted": "payment_submitted",
    "payment.submitted": "payment_submitted",
    "PaymentSubmitted": "payment_submitted",
    "payment_completed": "payment_completed",
    "payment.completed": "payment_completed",
    "PaymentCompleted": "payment_completed",
    "payment_failed": "payment_failed",
    "payment.failed": "payment_failed",
    "PaymentFailed": "payment_failed",
}


def verify_and_parse(provider: str, secret: Optional[str], payload: bytes, signature: Optional[str]) -> dict:
    if not secret:
        logger.error("%s webhook received but no secret is configured", provider)
        return error_response(
            message="Webhook secret not configured",
            status_code=AppStatusCode.WEBHOOK_NOT_CONFIGURED,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    if not verify_hex_signature(secret, payload, signature):
        logger.warning("Rejected %s webhook: invalid signature", provider)
        return error_response(
            message="Invalid signature",
            status_code=AppStatusCode.WEBHOOK_SIGNATURE_INVALID,
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    try:
        body = json.loads(payload)
    except ValueError:
        return error_response(
            message="Invalid JSON payload",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST
        )
    if not isinstance(body, dict):
        return error_response(
            message="Webhook payload must be a JSON object",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST
        )
    return body


# ---------------- Tipalti ----------------

def partners_by_payee(db: Session, payee_id: str) -> list:
    partners = []
    for model in (LocationPartner, ReferralPartner):
        partners.extend(db.query(model).filter(model.tipalti_payee_id == payee_id).all())
    return partners


def _payment_date(value: Optional[str]) -> date:
    if value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            logger.warning("Unparseable Tipalti timestamp %s", value)
    return datetime.now(timezone.utc).date()


def handle_tipalti_event(db: Session, event: dict) -> WebhookAck:
    raw_type = event.get("eventType")
    event_type = TIPALTI_EVENTS.get(raw_type)
    payee_id = event.get("payeeId")
    logger.info("Tipalti webhook: %s payee=%s", raw_type, payee_id)

    if event_type is None:
        logger.info("Unhandled Tipalti event: %s", raw_type)
        return WebhookAck(event=raw_type)

    updated = []
    if event_type == "payee_onboarded" and payee_id:
        for partner in partners_by_payee(db, payee_id):
            partner.tipalti_status = TipaltiStatus.active.value
            partner.tipalti_onboarded_at = datetime.now(timezone.utc)
            if event.get("paymentMethod"):
                partner.tipalti_payment_method = event["paymentMethod"]
            updated.append(str(partner.id))

    elif event_type == "payment_completed" and payee_id:
        for partner in partners_by_payee(db, payee_id):
            partner.last_payment_date = _payment_date(event.get("timestamp"))
            if event.get("amount") is not None:
                partner.last_payment_amount = event["amount"]
            updated.append(str(partner.id))

    elif event_type == "payment_failed":
        logger.warning("Tipalti payment failed for %s (%s): %s",
                       payee_id, event.get("invoiceRefCode"), event.get("errorMessage"))

    log_activity(
        db,
        entity_type="tipalti_webhook",
        entity_id=payee_id or event.get("invoiceRefCode") or "unknown",
        action=event_type,
        details={**event, "updated_partners": updated},
    )
    db.commit()
    return WebhookAck(event=raw_type, details={"updatedPartners": updated})


def process_tipalti(db: Session, payload: bytes, headers) -> WebhookAck:
    event = verify_and_parse("Tipalti", settings.TIPALTI_WEBHOOK_SECRET, payload,
                             headers.get(TIPALTI_SIGNATURE_HEADER))
    return handle_tipalti_event(db, event)


# ---------------- DocuSeal ----------------

# metadata.partner_type -> model; other partner types have no table here
PARTNER_MODELS = {
    "location_partner": LocationPartner,
    "referral_partner": ReferralPartner,
}


def detect_document_type(name: str) -> str:
    lowered = (name or "").lower()
    if "letter of intent" in lowered or "loi" in lowered:
        return "loi"
    if "deployment" in lowered or "contract" in lowered:
        return "contract"
    if "partner" in lowered or "agreement" in lowered:
        return "partner_agreement"
    return "other"


def _partner(db: Session, partner_type: str, partner_id):
    model = PARTNER_MODELS.get(partner_type)
    if model is None:
        logger.warning("DocuSeal metadata names unsupported partner type %s", partner_type)
        return None
    try:
        pid = uuid.UUID(str(partner_id))
    except ValueError:
        logger.warning("DocuSeal metadata carries malformed partner id %s", partner_id)
        return None
    return db.query(model).filter(model.id == pid).first()


def _device_count(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def handle_document_viewed(db: Session, partner, partner_type: str, document_type: str) -> dict:
    now = datetime.now(timezone.utc)
    # a late view never downgrades a signed document
    if document_type == "loi" and isinstance(partner, LocationPartner):
        if partner.loi_status != "signed":
            partner.loi_status = "viewed"
        partner.loi_viewed_at = now
    elif document_type == "contract" and isinstance(partner, LocationPartner):
        if partner.contract_status != "signed":
            partner.contract_status = "viewed"
        partner.contract_viewed_at = now
    elif document_type == "partner_agreement" and isinstance(partner, ReferralPartner):
        if partner.agreement_status != "signed":
            partner.agreement_status = "viewed"
        partner.agreement_viewed_at = now
    else:
        return {}

    log_activity(db, entity_type=partner_type, entity_id=partner.id, action="document_viewed",
                 description=f"{document_type.upper()} viewed")
    return {"documentType": document_type, "viewed": True}


def handle_loi_signed(db: Session, partner: LocationPartner, values: dict, submission_id) -> dict:
    now = datetime.now(timezone.utc)
    partner.loi_status = "signed"
    partner.loi_signed_at = now
    partner.pipeline_stage = PipelineStage.loi_signed.value
    if values.get("device_ownership"):
        partner.loi_device_ownership = values["device_ownership"]
    if values.get("device_count"):
        partner.loi_device_count = _device_count(values["device_count"])

    result = {"documentType": "loi"}
    count = partner.loi_device_count or 0
    if partner.loi_device_ownership == DeviceOwnership.skyyield_owned.value and count > 0:
        request = create_loi_purchase_request(db, partner, count, DeviceOwnership.skyyield_owned.value)
        if values.get("device_type"):
            request.product_name = values["device_type"]
        result["purchaseRequest"] = request.request_number
        logger.info("Auto-created purchase request %s for %s devices", request.request_number, count)

    log_activity(db, entity_type="location_partner", entity_id=partner.id, action="loi_signed",
                 description="LOI signed via DocuSeal", details={"submission_id": submission_id})
    return result


def handle_contract_signed(db: Session, partner: LocationPartner, submission_id) -> dict:
    partner.contract_status = "signed"
    partner.contract_signed_at = datetime.now(timezone.utc)
    partner.pipeline_stage = PipelineStage.active.value
    partner.status = "active"
    log_activity(db, entity_type="location_partner", entity_id=partner.id, action="contract_signed",
                 description="Deployment contract signed - partner is now active",
                 details={"submission_id": submission_id})
    return {"documentType": "contract"}


def handle_agreement_signed(db: Session, partner: ReferralPartner, partner_type: str, submission_id) -> dict:
    partner.agreement_status = "signed"
    partner.agreement_signed_at = datetime.now(timezone.utc)
    partner.status = "approved"
    partner.pipeline_stage = PipelineStage.active.value
    log_activity(db, entity_type=partner_type, entity_id=partner.id, action="agreement_signed",
                 description=f"{partner_type} agreement signed",
                 details={"submission_id": submission_id})
    return {"documentType": "partner_agreement"}


def handle_document_signed(db: Session, partner, partner_type: str, document_type: str,
                           data: dict, submission_id) -> dict:
    if document_type == "loi" and isinstance(partner, LocationPartner):
        return handle_loi_signed(db, partner, data.get("values") or data.get("fields") or {},
                                 submission_id)
    if document_type == "contract" and isinstance(partner, LocationPartner):
        return handle_contract_signed(db, partner, submission_id)
    if document_type == "partner_agreement" and isinstance(partner, ReferralPartner):
        return handle_agreement_signed(db, partner, partner_type, submission_id)
    logger.info("No partner update for %s %s on %s", partner_type, partner.id, document_type)
    return {}


def handle_docuseal_event(db: Session, body: dict) -> WebhookAck:
    event_type = body.get("event_type")
    data = body.get("data")
    if not isinstance(data, dict):
        data = {}
    submission = data.get("submission") or {}
    submission_id = data.get("submission_id") or data.get("id")
    metadata = data.get("metadata") or submission.get("metadata") or {}
    document_type = metadata.get("document_type") or detect_document_type(submission.get("name"))
    partner_type = metadata.get("partner_type") or "location_partner"
    partner_id = metadata.get("partner_id")
    logger.info("DocuSeal webhook: %s submission=%s %s=%s",
                event_type, submission_id, partner_type, partner_id)

    log_activity(db, entity_type="docuseal_webhook", entity_id=submission_id or "unknown",
                 action=event_type or "unknown", description=f"DocuSeal event: {event_type}")

    details = {}
    submitters = submission.get("submitters")
    # multi-signer forms wait for submission.completed
    single_signer = not submitters or len(submitters) == 1
    signed = event_type == "submission.completed" or (event_type == "form.completed" and single_signer)

    if event_type == "submission.archived":
        logger.info("DocuSeal submission %s archived", submission_id)
        details = {"archived": True}
    elif event_type == "form.viewed" or signed:
        partner = _partner(db, partner_type, partner_id) if partner_id else None
        if not partner_id:
            logger.warning("DocuSeal submission %s has no partner_id in metadata", submission_id)
        elif partner is None:
            logger.warning("DocuSeal event for unknown %s %s", partner_type, partner_id)
        elif event_type == "form.viewed":
            details = handle_document_viewed(db, partner, partner_type, document_type)
        else:
            details = handle_document_signed(db, partner, partner_type, document_type,
                                             data, submission_id)
    else:
        logger.info("Unhandled DocuSeal event: %s", event_type)

    db.commit()
    return WebhookAck(event=event_type, details=details)


def process_docuseal(db: Session, payload: bytes, headers) -> WebhookAck:
    body = verify_and_parse("DocuSeal", settings.DOCUSEAL_WEBHOOK_SECRET, payload,
                            headers.get(DOCUSEAL_SIGNATURE_HEADER))
    return handle_docuseal_event(db, body)
