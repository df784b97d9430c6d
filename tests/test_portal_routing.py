import pytest

from identity_service.app.services.portal_routing import resolve_for, resolve_portal_path

from conftest import auth_headers


@pytest.mark.parametrize("user_type,status,expected", [
    ("admin", "approved", "/portals/admin"),
    ("super_admin", "approved", "/portals/admin"),
    ("employee", "approved", "/portals/employee"),
    ("location_partner", "approved", "/portals/location"),
    ("referral_partner", "approved", "/portals/referral"),
    ("Location Partner", "approved", "/portals/location"),
    ("calculator_user", "approved", "/portals/calculator"),
    ("location_partner", "pending", "/pending-approval"),
    ("location_partner", "rejected", "/pending-approval"),
    ("location_partner", None, "/pending-approval"),
    (None, "approved", "/complete-signup"),
])
def test_resolve_portal_path(user_type, status, expected):
    assert resolve_portal_path(user_type, status) == expected


def test_signed_out_goes_to_sign_in():
    assert resolve_portal_path("admin", "approved", signed_in=False) == "/sign-in"


def test_metadata_wins_over_stored_row(make_user):
    user = make_user("meta_user", user_type="customer", status="approved")
    route = resolve_for({"userType": "referral_partner", "status": "pending"}, user)
    assert route["redirect"] == "/pending-approval"
    assert route["userType"] == "referral_partner"


def test_admin_flag_forces_admin_portal(make_user):
    user = make_user("boss", user_type="employee", is_admin=True, status="pending")
    assert resolve_for({}, user)["redirect"] == "/portals/admin"


def test_route_endpoint_uses_stored_row(identity_client, make_user):
    make_user("stored", user_type="contractor", status="approved")
    resp = identity_client.get("/api/portal/route", headers=auth_headers("stored"))
    assert resp.status_code == 200
    assert resp.json() == {"redirect": "/portals/contractor", "userType": "contractor", "status": "approved"}


def test_route_endpoint_reads_token_metadata(identity_client):
    headers = auth_headers("no_row", metadata={"userType": "employee", "status": "approved"})
    resp = identity_client.get("/api/portal/route", headers=headers)
    assert resp.json()["redirect"] == "/portals/employee"
