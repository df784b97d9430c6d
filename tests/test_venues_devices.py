import pytest

from portal_service.app.models.devices import Device
from portal_service.app.models.venues import Venue

from conftest import auth_headers


@pytest.fixture
def venue(db, location_partner):
    venue = Venue(location_partner_id=location_partner.id, venue_name="Coffee Co Downtown",
                  city="Austin", status="active")
    db.add(venue)
    db.commit()
    db.refresh(venue)
    return venue


@pytest.fixture
def foreign_venue(db, other_location_partner):
    venue = Venue(location_partner_id=other_location_partner.id, venue_name="Gym Floor", status="active")
    db.add(venue)
    db.commit()
    db.refresh(venue)
    return venue


def test_partner_creates_venue_for_own_partner(portal_client, partner_user, location_partner):
    resp = portal_client.post("/api/venues", json={
        "location_partner_id": str(location_partner.id),
        "venue_name": "Coffee Co Uptown",
    }, headers=auth_headers("partner_1"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "pending"
    assert body["device_count"] == 0


def test_partner_cannot_create_venue_for_other_partner(portal_client, partner_user, other_location_partner):
    resp = portal_client.post("/api/venues", json={
        "location_partner_id": str(other_location_partner.id),
        "venue_name": "Not mine",
    }, headers=auth_headers("partner_1"))
    assert resp.status_code == 403


def test_venue_list_is_scoped(portal_client, partner_user, venue, foreign_venue):
    resp = portal_client.get("/api/venues", headers=auth_headers("partner_1"))
    assert [v["venue_name"] for v in resp.json()["data"]] == ["Coffee Co Downtown"]


def test_device_ids_are_sequential(portal_client, employee, venue):
    first = portal_client.post("/api/devices", json={"venue_id": str(venue.id)},
                               headers=auth_headers("employee_1"))
    second = portal_client.post("/api/devices", json={"venue_id": str(venue.id), "serial_number": "SN-2"},
                                headers=auth_headers("employee_1"))
    assert first.status_code == 200
    assert first.json()["device_id"] == "DEV-00001"
    assert second.json()["device_id"] == "DEV-00002"
    assert first.json()["status"] == "pending_install"


def test_venue_reports_device_count(portal_client, db, employee, venue):
    db.add_all([Device(device_id="DEV-00001", venue_id=venue.id), Device(device_id="DEV-00002", venue_id=venue.id)])
    db.commit()
    resp = portal_client.get(f"/api/venues/{venue.id}", headers=auth_headers("employee_1"))
    assert resp.json()["device_count"] == 2


def test_device_filters_and_scope(portal_client, db, partner_user, employee, venue, foreign_venue):
    db.add_all([
        Device(device_id="DEV-00001", venue_id=venue.id, status="active"),
        Device(device_id="DEV-00002", venue_id=venue.id, status="offline"),
        Device(device_id="DEV-00003", venue_id=foreign_venue.id, status="active"),
    ])
    db.commit()

    resp = portal_client.get("/api/devices", params={"status": "active"}, headers=auth_headers("employee_1"))
    assert resp.json()["total"] == 2

    resp = portal_client.get("/api/devices", headers=auth_headers("partner_1"))
    assert [d["device_id"] for d in resp.json()["data"]] == ["DEV-00001", "DEV-00002"]


def test_partner_cannot_read_foreign_device(portal_client, db, partner_user, foreign_venue):
    device = Device(device_id="DEV-00009", venue_id=foreign_venue.id)
    db.add(device)
    db.commit()
    resp = portal_client.get(f"/api/devices/{device.id}", headers=auth_headers("partner_1"))
    assert resp.status_code == 403


def test_deleting_venue_keeps_devices(portal_client, db, employee, venue):
    device = Device(device_id="DEV-00001", venue_id=venue.id)
    db.add(device)
    db.commit()
    device_pk = device.id

    resp = portal_client.delete(f"/api/venues/{venue.id}", headers=auth_headers("employee_1"))
    assert resp.status_code == 200

    db.expire_all()
    assert db.get(Device, device_pk).venue_id is None
