def test_profile_create_get_and_update(client) -> None:
    headers = {"X-User-Id": "u-1"}
    create_resp = client.post(
        "/api/profiles",
        json={"email": "jane@example.com", "fullName": "Jane Doe", "userType": "job_seeker"},
        headers=headers,
    )
    assert create_resp.status_code == 201
    assert create_resp.json()["id"] == "u-1"

    update_resp = client.put(
        "/api/profile",
        json={"headline": "Backend Engineer", "email": "other@example.com"},
        headers=headers,
    )
    assert update_resp.status_code == 200
    assert update_resp.json()["headline"] == "Backend Engineer"
    assert update_resp.json()["email"] == "jane@example.com"

    get_resp = client.get("/api/profile", headers=headers)
    assert get_resp.json()["full_name"] == "Jane Doe"


def test_missing_identity_is_unauthorized(client) -> None:
    resp = client.get("/api/profile")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}


def test_unknown_identity_is_unauthorized(client) -> None:
    resp = client.get("/api/jobs", headers={"X-User-Id": "ghost"})
    assert resp.status_code == 401


def test_invalid_user_type_is_bad_request(client) -> None:
    resp = client.post(
        "/api/profiles",
        json={"email": "a@example.com", "user_type": "admin"},
        headers={"X-User-Id": "u-2"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request"


def test_duplicate_email_is_rejected(client, make_profile) -> None:
    make_profile("u-3")
    resp = client.post(
        "/api/profiles",
        json={"email": "u-3@example.com", "user_type": "job_seeker"},
        headers={"X-User-Id": "u-4"},
    )
    assert resp.status_code == 400


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}
