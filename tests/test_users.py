from shared.models.activity_log import ActivityLog
from shared.models.partners import ReferralPartner
from shared.models.users import User

from conftest import auth_headers


def test_approve_user_then_read_back(identity_client, admin, make_user):
    make_user("u1", user_type="location_partner", status="pending")

    resp = identity_client.post("/api/admin/users/status",
                                json={"userId": "u1", "status": "approved"},
                                headers=auth_headers("admin_1"))
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    resp = identity_client.get("/api/admin/users/u1", headers=auth_headers("admin_1"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "approved"
    assert body["isApproved"] is True
    assert body["approvedAt"] is not None
    assert body["rejectedAt"] is None


def test_reject_user_sets_rejected_at(identity_client, db, admin, make_user):
    make_user("u2", user_type="referral_partner", status="pending")

    resp = identity_client.post("/api/admin/users/status",
                                json={"userId": "u2", "status": "rejected"},
                                headers=auth_headers("admin_1"))
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["status"] == "rejected"
    assert user["rejectedAt"] is not None
    assert user["approvedAt"] is None

    entries = db.query(ActivityLog).filter(ActivityLog.entity_type == "user").all()
    assert [e.action for e in entries] == ["status_change"]


def test_status_update_rejects_unknown_status(identity_client, admin, make_user):
    make_user("u3", status="pending")
    resp = identity_client.post("/api/admin/users/status",
                                json={"userId": "u3", "status": "maybe"},
                                headers=auth_headers("admin_1"))
    assert resp.status_code == 400


def test_status_update_for_missing_user(identity_client, admin):
    resp = identity_client.post("/api/admin/users/status",
                                json={"userId": "nobody", "status": "approved"},
                                headers=auth_headers("admin_1"))
    assert resp.status_code == 404


def test_employee_cannot_change_status(identity_client, employee, make_user):
    make_user("u4", status="pending")
    resp = identity_client.post("/api/admin/users/status",
                                json={"userId": "u4", "status": "approved"},
                                headers=auth_headers("employee_1"))
    assert resp.status_code == 403


def test_employee_can_read_single_user(identity_client, employee, make_user):
    make_user("u5", user_type="customer")
    resp = identity_client.get("/api/admin/users/u5", headers=auth_headers("employee_1"))
    assert resp.status_code == 200
    assert resp.json()["userType"] == "customer"


def test_list_users_groups_and_counts(identity_client, admin, make_user, location_partner, referral_partner):
    make_user("lp_user", user_type="location_partner")
    make_user("rp_user", user_type="referral_partner")

    resp = identity_client.get("/api/admin/users", headers=auth_headers("admin_1"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 3
    assert len(body["grouped"]["admin"]) == 1
    assert [u["clerkId"] for u in body["grouped"]["location_partner"]] == ["lp_user"]
    assert body["counts"] == {"location_partner": 1, "referral_partner": 1}

    resp = identity_client.get("/api/admin/users", params={"user_type": "referral_partner"},
                               headers=auth_headers("admin_1"))
    assert [u["clerkId"] for u in resp.json()["users"]] == ["rp_user"]


def test_add_location_role_links_partner(identity_client, db, admin, make_user, location_partner):
    make_user("new_lp", status="approved")

    resp = identity_client.post("/api/admin/users/roles", json={
        "userId": "new_lp",
        "role": "location_partner",
        "partnerId": str(location_partner.id),
    }, headers=auth_headers("admin_1"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["userType"] == "location_partner"
    assert body["user"]["locationPartnerIds"] == [str(location_partner.id)]
    assert body["partners"]["location_partners"][0]["name"] == "Coffee Co"


def test_add_referral_role_creates_partner(identity_client, db, admin, make_user):
    make_user("new_rp", status="approved")

    resp = identity_client.post("/api/admin/users/roles", json={
        "userId": "new_rp", "role": "referral_partner",
    }, headers=auth_headers("admin_1"))
    assert resp.status_code == 200

    partner = db.query(ReferralPartner).filter(ReferralPartner.contact_email == "new_rp@example.com").one()
    assert partner.referral_code.startswith("SKY")
    assert resp.json()["user"]["referralPartnerIds"] == [str(partner.id)]


def test_add_role_with_unknown_partner(identity_client, admin, make_user):
    make_user("lonely", status="approved")
    resp = identity_client.post("/api/admin/users/roles", json={
        "userId": "lonely",
        "role": "location_partner",
        "partnerId": "00000000-0000-0000-0000-000000000000",
    }, headers=auth_headers("admin_1"))
    assert resp.status_code == 404


def test_remove_role_unlinks_partners(identity_client, db, admin, make_user, location_partner):
    make_user("leaving", user_type="location_partner", location_partner_ids=[location_partner.id])

    resp = identity_client.post("/api/admin/users/roles", json={
        "userId": "leaving", "role": "location_partner", "action": "remove",
    }, headers=auth_headers("admin_1"))
    assert resp.status_code == 200

    db.expire_all()
    user = db.query(User).filter(User.clerk_id == "leaving").one()
    assert user.location_partner_ids == []
    assert user.user_type is None

    resp = identity_client.get("/api/admin/users/roles", params={"userId": "leaving"},
                               headers=auth_headers("admin_1"))
    assert resp.json()["partners"]["location_partners"] == []


def test_list_total_counts_every_match(identity_client, admin, make_user):
    for n in range(3):
        make_user(f"page_{n}", user_type="contractor")

    resp = identity_client.get("/api/admin/users", params={"user_type": "contractor", "limit": 2},
                               headers=auth_headers("admin_1"))
    body = resp.json()
    assert len(body["users"]) == 2
    assert body["total"] == 3


def test_moving_back_to_pending_leaves_the_portal(identity_client, db, admin, make_user):
    make_user("u5", user_type="location_partner", status="pending")
    for new_status in ("approved", "pending"):
        resp = identity_client.post("/api/admin/users/status",
                                    json={"userId": "u5", "status": new_status},
                                    headers=auth_headers("admin_1"))
        assert resp.status_code == 200

    user = db.query(User).filter(User.clerk_id == "u5").one()
    db.refresh(user)
    assert user.portal_status == "pending_form"
    assert user.is_approved is False

    resp = identity_client.get("/api/portal/route", headers=auth_headers("u5"))
    assert resp.json()["redirect"] == "/pending-approval"
    assert resp.json()["status"] == "pending"
