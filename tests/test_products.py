import pytest

from portal_service.app.models.products import Product

from conftest import auth_headers


@pytest.fixture
def catalog(db):
    approved = Product(sku="AP-1", name="Access Point", category="hardware", our_cost=120, is_approved=True)
    hidden = Product(sku="AP-2", name="Prototype AP", category="hardware", our_cost=90, is_approved=False)
    cable = Product(sku="CB-1", name="Cable", category="accessories", our_cost=5, is_approved=True)
    db.add_all([approved, hidden, cable])
    db.commit()
    return {"approved": approved, "hidden": hidden, "cable": cable}


def test_partner_sees_only_approved(portal_client, partner_user, catalog):
    resp = portal_client.get("/api/products", headers=auth_headers("partner_1"))
    assert resp.status_code == 200
    assert {p["sku"] for p in resp.json()["data"]} == {"AP-1", "CB-1"}

    resp = portal_client.get(f"/api/products/{catalog['hidden'].id}", headers=auth_headers("partner_1"))
    assert resp.status_code == 404


def test_staff_filters(portal_client, employee, catalog):
    resp = portal_client.get("/api/products", params={"approved": "false"}, headers=auth_headers("employee_1"))
    assert [p["sku"] for p in resp.json()["data"]] == ["AP-2"]

    resp = portal_client.get("/api/products", params={"category": "accessories"}, headers=auth_headers("employee_1"))
    assert [p["sku"] for p in resp.json()["data"]] == ["CB-1"]

    resp = portal_client.get("/api/products", params={"search": "proto"}, headers=auth_headers("employee_1"))
    assert resp.json()["total"] == 1


def test_create_rejects_duplicate_sku(portal_client, employee, catalog):
    resp = portal_client.post("/api/products", json={"sku": "AP-1", "name": "Again"},
                              headers=auth_headers("employee_1"))
    assert resp.status_code == 400


def test_partner_cannot_create_products(portal_client, partner_user):
    resp = portal_client.post("/api/products", json={"name": "Mine"}, headers=auth_headers("partner_1"))
    assert resp.status_code == 403


def test_approval_toggle(portal_client, employee, partner_user, catalog):
    resp = portal_client.patch(f"/api/products/{catalog['hidden'].id}/approval", json={"is_approved": True},
                               headers=auth_headers("employee_1"))
    assert resp.status_code == 200
    assert resp.json()["is_approved"] is True

    resp = portal_client.get("/api/products", headers=auth_headers("partner_1"))
    assert resp.json()["total"] == 3


def test_delete_hides_product(portal_client, employee, catalog):
    resp = portal_client.delete(f"/api/products/{catalog['cable'].id}", headers=auth_headers("employee_1"))
    assert resp.status_code == 200
    resp = portal_client.get(f"/api/products/{catalog['cable'].id}", headers=auth_headers("employee_1"))
    assert resp.status_code == 404
