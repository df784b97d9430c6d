from shared.core.authorization import authorize
from shared.utils.enums import UserRole

from conftest import auth_headers

PRIVILEGED = (UserRole.ADMIN, UserRole.SUPER_ADMIN, UserRole.EMPLOYEE)


def test_unknown_caller_is_denied(db):
    decision = authorize(db, "nobody", PRIVILEGED)
    assert decision.allowed is False
    assert decision.user is None


def test_is_admin_promotes_role(db, make_user):
    make_user("flagged", user_type="customer", is_admin=True)
    decision = authorize(db, "flagged", (UserRole.ADMIN,))
    assert decision.allowed
    assert decision.role == UserRole.ADMIN


def test_role_outside_allow_list_is_denied(db, make_user):
    make_user("calc", user_type="calculator_user")
    decision = authorize(db, "calc", PRIVILEGED)
    assert not decision.allowed
    assert "not permitted" in decision.reason


def test_partner_scope_is_checked(db, partner_user, location_partner, other_location_partner):
    own = authorize(db, "partner_1", (), resource_owner_id=location_partner.id)
    other = authorize(db, "partner_1", (), resource_owner_id=other_location_partner.id)
    assert own.allowed
    assert not other.allowed


def test_privileged_roles_bypass_partner_scope(db, employee, other_location_partner):
    decision = authorize(db, "employee_1", PRIVILEGED, resource_owner_id=other_location_partner.id)
    assert decision.allowed


def test_foreign_partner_row_is_forbidden_without_data(portal_client, partner_user, other_location_partner):
    resp = portal_client.get(f"/api/partners/location/{other_location_partner.id}",
                             headers=auth_headers("partner_1"))
    assert resp.status_code == 403
    body = resp.json()
    assert body["error"] == "Forbidden"
    assert "companyLegalName" not in body and "company_legal_name" not in body


def test_partner_role_cannot_reach_admin_routes(identity_client, partner_user):
    resp = identity_client.get("/api/admin/users", headers=auth_headers("partner_1"))
    assert resp.status_code == 403


def test_unapproved_caller_is_denied_before_role_check(db, make_user):
    make_user("waiting", user_type="employee", status="pending")
    make_user("turned_down", user_type="employee", status="rejected")
    for caller in ("waiting", "turned_down"):
        decision = authorize(db, caller, PRIVILEGED)
        assert not decision.allowed
        assert "status" in decision.reason
        assert decision.role is None


def test_admin_flag_skips_the_approval_gate(db, make_user):
    make_user("boss", user_type="employee", is_admin=True, status="pending")
    assert authorize(db, "boss", (UserRole.ADMIN,)).allowed


def test_pending_employee_cannot_list_purchase_requests(portal_client, make_user):
    make_user("new_hire", user_type="employee", status="pending")
    resp = portal_client.get("/api/admin/purchase-requests", headers=auth_headers("new_hire"))
    assert resp.status_code == 403
