from conftest import auth_headers, make_token


def test_missing_token_is_unauthorized(identity_client):
    resp = identity_client.get("/api/users/me")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthorized"


def test_garbage_token_is_unauthorized(identity_client):
    resp = identity_client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_expired_token_is_unauthorized(identity_client, make_user):
    make_user("user_exp", user_type="location_partner")
    token = make_token("user_exp", expires_in=-60)
    resp = identity_client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_session_cookie_is_accepted(identity_client, make_user):
    make_user("cookie_user", user_type="employee")
    identity_client.cookies.set("__session", make_token("cookie_user"))
    resp = identity_client.get("/api/users/me")
    assert resp.status_code == 200
    assert resp.json()["clerkId"] == "cookie_user"


def test_me_returns_profile_and_redirect(identity_client, make_user):
    make_user("partner_me", user_type="location_partner")
    resp = identity_client.get("/api/users/me", headers=auth_headers("partner_me"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["userType"] == "location_partner"
    assert body["redirect"] == "/portals/location"
    assert body["lastLoginAt"] is not None


def test_me_for_unknown_user_is_not_found(identity_client):
    resp = identity_client.get("/api/users/me", headers=auth_headers("ghost"))
    assert resp.status_code == 404
