from shared.models.activity_log import ActivityLog
from shared.models.partners import LocationPartner

from conftest import auth_headers


def test_admin_lists_all_location_partners(portal_client, admin, location_partner, other_location_partner):
    resp = portal_client.get("/api/partners/location", headers=auth_headers("admin_1"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert {p["company_legal_name"] for p in body["data"]} == {"Coffee Co LLC", "Gym Corp"}


def test_partner_only_sees_own_rows(portal_client, partner_user, location_partner, other_location_partner):
    resp = portal_client.get("/api/partners/location", headers=auth_headers("partner_1"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["data"][0]["id"] == str(location_partner.id)


def test_partner_reads_own_row(portal_client, partner_user, location_partner):
    resp = portal_client.get(f"/api/partners/location/{location_partner.id}",
                             headers=auth_headers("partner_1"))
    assert resp.status_code == 200
    assert resp.json()["dba_name"] == "Coffee Co"


def test_employee_creates_location_partner(portal_client, db, employee):
    resp = portal_client.post("/api/partners/location", json={
        "company_legal_name": "Bakery Inc",
        "contact_email": "owner@bakery.example.com",
    }, headers=auth_headers("employee_1"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["pipeline_stage"] == "application"
    assert body["status"] == "active"
    assert db.query(ActivityLog).filter(ActivityLog.entity_type == "location_partner").count() == 1


def test_partner_cannot_create_location_partner(portal_client, partner_user):
    resp = portal_client.post("/api/partners/location", json={"company_legal_name": "Mine"},
                              headers=auth_headers("partner_1"))
    assert resp.status_code == 403


def test_partner_patch_only_touches_contact_fields(portal_client, db, partner_user, location_partner):
    resp = portal_client.patch(f"/api/partners/location/{location_partner.id}", json={
        "contact_phone": "555-0100",
        "pipeline_stage": "active",
        "company_legal_name": "Renamed",
    }, headers=auth_headers("partner_1"))
    assert resp.status_code == 200

    db.expire_all()
    partner = db.get(LocationPartner, location_partner.id)
    assert partner.contact_phone == "555-0100"
    assert partner.pipeline_stage == "initial_review"
    assert partner.company_legal_name == "Coffee Co LLC"


def test_partner_cannot_patch_foreign_row(portal_client, partner_user, other_location_partner):
    resp = portal_client.patch(f"/api/partners/location/{other_location_partner.id}",
                               json={"contact_phone": "555-0199"}, headers=auth_headers("partner_1"))
    assert resp.status_code == 403


def test_stage_change_is_logged(portal_client, db, employee, location_partner):
    resp = portal_client.patch(f"/api/partners/location/{location_partner.id}/stage",
                               json={"pipeline_stage": "loi_sent", "notes": "sent today"},
                               headers=auth_headers("employee_1"))
    assert resp.status_code == 200
    assert resp.json()["pipeline_stage"] == "loi_sent"

    entry = db.query(ActivityLog).filter(ActivityLog.action == "stage_change").one()
    assert entry.details["old_stage"] == "initial_review"
    assert entry.details["new_stage"] == "loi_sent"


def test_unknown_stage_is_rejected(portal_client, employee, location_partner):
    resp = portal_client.patch(f"/api/partners/location/{location_partner.id}/stage",
                               json={"pipeline_stage": "teleported"}, headers=auth_headers("employee_1"))
    assert resp.status_code == 400


def test_delete_is_soft_and_admin_only(portal_client, db, admin, employee, location_partner):
    resp = portal_client.delete(f"/api/partners/location/{location_partner.id}",
                                headers=auth_headers("employee_1"))
    assert resp.status_code == 403

    resp = portal_client.delete(f"/api/partners/location/{location_partner.id}",
                                headers=auth_headers("admin_1"))
    assert resp.status_code == 200

    db.expire_all()
    assert db.get(LocationPartner, location_partner.id).is_deleted is True
    resp = portal_client.get(f"/api/partners/location/{location_partner.id}", headers=auth_headers("admin_1"))
    assert resp.status_code == 404


def test_referral_code_generated_when_absent(portal_client, employee):
    resp = portal_client.post("/api/partners/referral", json={"contact_name": "Ray"},
                              headers=auth_headers("employee_1"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["referral_code"].startswith("SKY")
    assert body["commission_type"] == "percentage"


def test_duplicate_referral_code_is_rejected(portal_client, employee, referral_partner):
    resp = portal_client.post("/api/partners/referral",
                              json={"contact_name": "Copycat", "referral_code": "skytest01"},
                              headers=auth_headers("employee_1"))
    assert resp.status_code == 400


def test_referral_partner_scoping(portal_client, make_user, referral_partner):
    make_user("rp_owner", user_type="referral_partner", referral_partner_ids=[referral_partner.id])
    make_user("rp_other", user_type="referral_partner")

    resp = portal_client.get(f"/api/partners/referral/{referral_partner.id}", headers=auth_headers("rp_owner"))
    assert resp.status_code == 200
    resp = portal_client.get(f"/api/partners/referral/{referral_partner.id}", headers=auth_headers("rp_other"))
    assert resp.status_code == 403
    resp = portal_client.get("/api/partners/referral", headers=auth_headers("rp_other"))
    assert resp.json()["total"] == 0
