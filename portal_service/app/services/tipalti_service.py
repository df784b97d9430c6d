"""Signed pass-through to the Tipalti REST API."""
import json
import logging
import time
from datetime import date, timedelta
from typing import Optional

import requests
from dateutil import parser as date_parser
from fastapi import status
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.helpers.code_generator import tipalti_payee_id
from shared.helpers.json_response_helper import error_response, not_found
from shared.helpers.webhook_signature import hex_signature
from shared.models.activity_log import log_activity
from shared.models.partners import LocationPartner, ReferralPartner
from shared.utils.app_status_code import AppStatusCode
from shared.utils.errors import UpstreamError
from ..enum.portal_enum import TipaltiStatus
from ..schemas.tipalti_schemas import TipaltiActionRequest, TipaltiQuery, TipaltiResponse

logger = logging.getLogger(__name__)

GET_ACTIONS = ["status", "payee", "payments", "bills", "invoices"]
POST_ACTIONS = ["createPayee", "createBill"]

DEFAULT_BILL_DAYS = 30

# partnerType as sent by the admin UI -> partner model
PARTNER_MODELS = {
    "location": LocationPartner,
    "location_partner": LocationPartner,
    "referral": ReferralPartner,
    "referral_partner": ReferralPartner,
}


class TipaltiClient:
    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.base_url = settings.tipalti_base_url

    def signed_headers(self, payload: str = "") -> dict:
        timestamp = str(int(time.time()))
        signature = hex_signature(settings.TIPALTI_HMAC_SECRET, (timestamp + payload).encode("utf-8"))
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {settings.TIPALTI_API_KEY}",
            "X-Tipalti-Payer": settings.TIPALTI_PAYER_NAME,
            "X-Tipalti-Timestamp": timestamp,
            "X-Tipalti-Signature": signature,
        }

    def _request(self, method: str, path: str, body: dict = None):
        # signature covers the exact bytes sent
        payload = json.dumps(body) if body is not None else ""
        try:
            response = self.session.request(
                method,
                f"{self.base_url}{path}",
                data=payload or None,
                headers=self.signed_headers(payload),
                timeout=settings.HTTP_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            raise UpstreamError("Tipalti", str(e)) from e

        if not response.ok:
            raise UpstreamError("Tipalti", response.text or response.reason, response.status_code)
        try:
            return response.json()
        except ValueError:
            return {}

    def get_payee(self, payee_id: str) -> dict:
        return self._request("GET", f"/api/v1/payees/{payee_id}")

    def get_payee_status(self, payee_id: str) -> dict:
        data = self.get_payee(payee_id)
        return {
            "status": data.get("payeeStatus") or "unknown",
            "isPayable": bool(data.get("isPayable")),
            "paymentMethod": data.get("paymentMethod"),
        }

    def get_payments(self, payee_id: str) -> list:
        return self._request("GET", f"/api/v1/payees/{payee_id}/payments").get("payments") or []

    def get_bills(self, payee_id: str) -> list:
        return self._request("GET", f"/api/v1/payees/{payee_id}/bills").get("bills") or []

    def get_invoices(self, payee_id: str) -> list:
        return self._request("GET", f"/api/v1/payees/{payee_id}/invoices").get("invoices") or []

    def create_payee(self, payee_id: str, name: str, email: str, entity_type: str = "Individual",
                     address: dict = None) -> dict:
        address = address or {}
        return self._request("POST", "/api/v1/payees", {
            "idap": payee_id,
            "alias": name,
            "email": email,
            "payeeEntityType": entity_type,
            "payeeName": name,
            "street1": address.get("street1") or "",
            "city": address.get("city") or "",
            "state": address.get("state") or "",
            "zip": address.get("zip") or "",
            "country": address.get("country") or "US",
        })

    def create_bill(self, payee_id: str, invoice_number: str, amount: float, due_date: date,
                    currency: str = "USD", description: str = None) -> dict:
        return self._request("POST", "/api/v1/bills", {
            "idap": payee_id,
            "invoiceRefCode": invoice_number,
            "invoiceDate": date.today().isoformat(),
            "invoiceDueDate": due_date.isoformat(),
            "currency": currency or "USD",
            "invoiceLines": [{
                "amount": amount,
                "description": description or "Partner Commission Payment",
            }],
        })


def _bad_request(message: str, code: str = AppStatusCode.INVALID_INPUT):
    return error_response(
        message=message,
        status_code=code,
        http_status=status.HTTP_400_BAD_REQUEST
    )


def parse_due_date(value: Optional[str]) -> date:
    if not value:
        return date.today() + timedelta(days=DEFAULT_BILL_DAYS)
    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError):
        return _bad_request(f"Invalid dueDate: {value}")


def handle_get(client: TipaltiClient, params: TipaltiQuery) -> TipaltiResponse:
    if params.action not in GET_ACTIONS:
        return _bad_request(f"Invalid action. Valid actions: {', '.join(GET_ACTIONS)}")
    if not params.payeeId:
        return _bad_request("payeeId required", AppStatusCode.REQUIRED_FIELD_MISSING)

    payee_id = params.payeeId
    if params.action == "status":
        data = client.get_payee_status(payee_id)
    elif params.action == "payee":
        data = client.get_payee(payee_id)
    elif params.action == "payments":
        data = client.get_payments(payee_id)
    elif params.action == "bills":
        data = client.get_bills(payee_id)
    else:
        data = client.get_invoices(payee_id)
    return TipaltiResponse(data=data, payeeId=payee_id)


def _linked_partner(db: Session, payload: TipaltiActionRequest):
    if not payload.partner_type or not payload.partner_id:
        return None, None
    model = PARTNER_MODELS.get(payload.partner_type)
    if model is None:
        return _bad_request("Invalid partnerType. Use: location, referral")
    partner = db.query(model).filter(model.id == payload.partner_id, model.is_deleted == False).first()
    if not partner:
        return not_found("Partner")
    kind = "location_partner" if model is LocationPartner else "referral_partner"
    return partner, kind


def create_payee(db: Session, client: TipaltiClient, payload: TipaltiActionRequest) -> TipaltiResponse:
    partner, kind = _linked_partner(db, payload)

    payee_id = payload.payee_id
    name = payload.name
    email = payload.email
    if partner is not None:
        payee_id = payee_id or tipalti_payee_id(kind, partner.id)
        email = email or partner.contact_email
        if not name:
            name = partner.display_name if kind == "location_partner" else (
                partner.contact_name or partner.company_name)

    if not payee_id or not name or not email:
        return _bad_request("payeeId, name and email are required", AppStatusCode.REQUIRED_FIELD_MISSING)

    address = payload.address.model_dump() if payload.address else None
    data = client.create_payee(payee_id, name, email, payload.entity_type or "Individual", address)

    if partner is not None:
        partner.tipalti_payee_id = payee_id
        partner.tipalti_status = TipaltiStatus.pending_onboarding.value
        log_activity(db, entity_type=kind, entity_id=partner.id, action="tipalti_payee_created",
                     details={"payee_id": payee_id})
        db.commit()
        logger.info("Linked %s %s to Tipalti payee %s", kind, partner.id, payee_id)

    return TipaltiResponse(data=data, payeeId=payee_id)


def create_bill(client: TipaltiClient, payload: TipaltiActionRequest) -> TipaltiResponse:
    if not payload.payee_id or not payload.invoice_number or payload.amount is None:
        return _bad_request("payeeId, invoiceNumber and amount are required",
                            AppStatusCode.REQUIRED_FIELD_MISSING)
    due_date = parse_due_date(payload.due_date)
    data = client.create_bill(
        payload.payee_id,
        payload.invoice_number,
        payload.amount,
        due_date,
        currency=payload.currency,
        description=payload.description,
    )
    return TipaltiResponse(data=data, payeeId=payload.payee_id)


def handle_post(db: Session, client: TipaltiClient, payload: TipaltiActionRequest) -> TipaltiResponse:
    if payload.action == "createPayee":
        return create_payee(db, client, payload)
    if payload.action == "createBill":
        return create_bill(client, payload)
    return _bad_request(f"Invalid action. Valid actions: {', '.join(POST_ACTIONS)}")


def get_tipalti_client() -> TipaltiClient:
    return TipaltiClient()
