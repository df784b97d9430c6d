import json
from datetime import date, timedelta

import pytest
import requests

from portal_service.app.main import app
from portal_service.app.services.tipalti_service import TipaltiClient, get_tipalti_client, parse_due_date
from shared.helpers.webhook_signature import hex_signature
from shared.models.partners import LocationPartner

from conftest import auth_headers


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=""):
        self.payload = payload or {}
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = text
        self.reason = "Error"

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.requests = []

    def request(self, method, url, data=None, headers=None, timeout=None):
        self.requests.append({"method": method, "url": url, "data": data, "headers": headers})
        if self.error:
            raise self.error
        for suffix, response in self.responses.items():
            if url.endswith(suffix):
                return response
        return FakeResponse({})


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def tipalti(session):
    app.dependency_overrides[get_tipalti_client] = lambda: TipaltiClient(session=session)
    yield session
    app.dependency_overrides.clear()


def test_signed_headers():
    client = TipaltiClient(session=FakeSession())
    headers = client.signed_headers('{"a": 1}')
    expected = hex_signature("tipalti-hmac-secret", (headers["X-Tipalti-Timestamp"] + '{"a": 1}').encode())
    assert headers["X-Tipalti-Signature"] == expected
    assert headers["Authorization"] == "Bearer tipalti-api-key"
    assert headers["X-Tipalti-Payer"] == "SkyYield"


def test_requires_authentication(portal_client, tipalti):
    assert portal_client.get("/api/tipalti", params={"action": "status", "payeeId": "LP-1"}).status_code == 401


def test_payee_status(portal_client, employee, tipalti):
    tipalti.responses["/api/v1/payees/LP-1"] = FakeResponse(
        {"payeeStatus": "Active", "isPayable": True, "paymentMethod": "ACH"})
    resp = portal_client.get("/api/tipalti", params={"action": "status", "payeeId": "LP-1"},
                             headers=auth_headers("employee_1"))
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "payeeId": "LP-1",
                           "data": {"status": "Active", "isPayable": True, "paymentMethod": "ACH"}}
    assert tipalti.requests[0]["method"] == "GET"


def test_payments_list(portal_client, employee, tipalti):
    tipalti.responses["/payments"] = FakeResponse({"payments": [{"amount": 10}]})
    resp = portal_client.get("/api/tipalti", params={"action": "payments", "payeeId": "LP-1"},
                             headers=auth_headers("employee_1"))
    assert resp.json()["data"] == [{"amount": 10}]


def test_invalid_get_action(portal_client, employee, tipalti):
    resp = portal_client.get("/api/tipalti", params={"action": "delete", "payeeId": "LP-1"},
                             headers=auth_headers("employee_1"))
    assert resp.status_code == 400
    assert "Valid actions" in resp.json()["error"]
    assert tipalti.requests == []


def test_missing_payee_id(portal_client, employee, tipalti):
    resp = portal_client.get("/api/tipalti", params={"action": "bills"}, headers=auth_headers("employee_1"))
    assert resp.status_code == 400


def test_create_payee_links_partner(portal_client, db, admin, location_partner, tipalti):
    resp = portal_client.post("/api/tipalti", json={
        "action": "createPayee",
        "partnerType": "location",
        "partnerId": str(location_partner.id),
    }, headers=auth_headers("admin_1"))
    assert resp.status_code == 200
    payee_id = resp.json()["payeeId"]
    assert payee_id.startswith("LP-")

    sent = json.loads(tipalti.requests[0]["data"])
    assert sent["idap"] == payee_id
    assert sent["email"] == "ada@coffee.example.com"
    assert sent["payeeName"] == "Coffee Co"

    db.expire_all()
    partner = db.get(LocationPartner, location_partner.id)
    assert partner.tipalti_payee_id == payee_id
    assert partner.tipalti_status == "pending_onboarding"


def test_create_bill_defaults_due_date(portal_client, admin, tipalti):
    resp = portal_client.post("/api/tipalti", json={
        "action": "createBill", "payeeId": "RP-1", "invoiceNumber": "INV-9", "amount": 42.5,
    }, headers=auth_headers("admin_1"))
    assert resp.status_code == 200
    sent = json.loads(tipalti.requests[0]["data"])
    assert sent["invoiceDueDate"] == (date.today() + timedelta(days=30)).isoformat()
    assert sent["invoiceLines"][0]["description"] == "Partner Commission Payment"
    assert tipalti.requests[0]["url"].endswith("/api/v1/bills")


def test_create_bill_requires_amount(portal_client, admin, tipalti):
    resp = portal_client.post("/api/tipalti", json={"action": "createBill", "payeeId": "RP-1"},
                              headers=auth_headers("admin_1"))
    assert resp.status_code == 400


def test_invalid_post_action(portal_client, admin, tipalti):
    resp = portal_client.post("/api/tipalti", json={"action": "refund"}, headers=auth_headers("admin_1"))
    assert resp.status_code == 400


def test_upstream_failure_is_500(portal_client, employee, session, tipalti):
    session.error = requests.ConnectionError("connection refused")
    resp = portal_client.get("/api/tipalti", params={"action": "payee", "payeeId": "LP-1"},
                             headers=auth_headers("employee_1"))
    assert resp.status_code == 500
    assert "Tipalti" in resp.json()["error"]


def test_upstream_error_status_is_500(portal_client, employee, tipalti):
    tipalti.responses["/api/v1/payees/LP-1"] = FakeResponse(status_code=404, text="payee not found")
    resp = portal_client.get("/api/tipalti", params={"action": "payee", "payeeId": "LP-1"},
                             headers=auth_headers("employee_1"))
    assert resp.status_code == 500


def test_parse_due_date():
    assert parse_due_date("2026-12-01") == date(2026, 12, 1)
