from datetime import timedelta

from src.shared.auth.auth import create_admin_session_token
from src.shared.auth.database import AdminUser
from src.shared.auth.identity import DatabaseIdentityProvider
from src.shared.security.rate_limit import FixedWindowRateLimiter

ORIGIN = "https://fynda.com"


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def test_login(client, admin_account):
    email, password = admin_account

    response = client.post("/api/admin/auth", json={"email": email, "password": password})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["token"]
    assert body["admin"]["email"] == email
    assert body["admin"]["isSuperAdmin"] is True


def test_login_with_bad_password(client, admin_account):
    email, _ = admin_account

    response = client.post("/api/admin/auth", json={"email": email, "password": "nope"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_login_for_non_admin_identity(client, db):
    DatabaseIdentityProvider(db).create_user("user@example.com", "pass-word-1")

    response = client.post("/api/admin/auth", json={"email": "user@example.com", "password": "pass-word-1"})

    assert response.status_code == 401


def test_login_missing_fields(client):
    response = client.post("/api/admin/auth", json={"email": "admin@fynda.com"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: password"}


def test_login_rate_limit(client, limiters, admin_account):
    limiters.admin_login = FixedWindowRateLimiter(5, 900)
    email, password = admin_account

    for _ in range(5):
        client.post("/api/admin/auth", json={"email": email, "password": "wrong"})
    response = client.post("/api/admin/auth", json={"email": email, "password": password})

    assert response.status_code == 429
    assert response.json()["retryAfter"] >= 1
    assert "Retry-After" in response.headers


def test_waitlist_data_requires_token(client):
    response = client.get("/api/admin/waitlist-data")

    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_waitlist_data_rejects_expired_token(client, admin_account, db):
    admin = db.query(AdminUser).one()
    token = create_admin_session_token(admin.id, admin.email, True, expires_delta=timedelta(seconds=-5))

    response = client.get("/api/admin/waitlist-data", headers=bearer(token))

    assert response.status_code == 401


def test_waitlist_data_rejects_removed_admin(client, admin_token, db):
    db.query(AdminUser).delete()
    db.commit()

    response = client.get("/api/admin/waitlist-data", headers=bearer(admin_token))

    assert response.status_code == 403


def test_waitlist_data(client, admin_token, employer_payload, candidate_payload):
    client.post("/api/waitlist/employers", json=employer_payload())
    client.post("/api/waitlist/employers", json=employer_payload(email="second@example.com"))
    client.post("/api/waitlist/candidates", json=candidate_payload())

    response = client.get("/api/admin/waitlist-data", headers=bearer(admin_token))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["analytics"] == {
        "total_candidates": 1,
        "total_employers": 2,
        "new_candidates_last_30d": 1,
        "new_employers_last_30d": 2,
    }
    assert data["siteSettings"] == {"coming_soon_mode": False}
    assert {e["email"] for e in data["recentEntries"]["employers"]} == {"second@example.com", "jane@example.com"}
    assert len(data["recentEntries"]["candidates"]) == 1


def test_waitlist_data_limit(client, admin_token, employer_payload):
    client.post("/api/waitlist/employers", json=employer_payload())
    client.post("/api/waitlist/employers", json=employer_payload(email="second@example.com"))

    response = client.get("/api/admin/waitlist-data?limit=1", headers=bearer(admin_token))
    assert len(response.json()["data"]["recentEntries"]["employers"]) == 1

    assert client.get("/api/admin/waitlist-data?limit=0", headers=bearer(admin_token)).status_code == 400
    assert client.get("/api/admin/waitlist-data?limit=201", headers=bearer(admin_token)).status_code == 400


def test_waitlist_data_rate_limit(client, limiters, admin_token):
    limiters.admin_data = FixedWindowRateLimiter(2, 60)

    statuses = [client.get("/api/admin/waitlist-data", headers=bearer(admin_token)).status_code for _ in range(3)]

    assert statuses == [200, 200, 429]


def test_delete_entry(client, admin_token, employer_payload):
    entry_id = client.post("/api/waitlist/employers", json=employer_payload()).json()["data"]["id"]

    response = client.delete(f"/api/admin/waitlist/employer/{entry_id}", headers=bearer(admin_token))
    assert response.status_code == 200
    assert response.json() == {"success": True, "id": entry_id}

    again = client.delete(f"/api/admin/waitlist/employer/{entry_id}", headers=bearer(admin_token))
    assert again.status_code == 404


def test_delete_entry_unknown_category(client, admin_token):
    response = client.delete("/api/admin/waitlist/investor/abc", headers=bearer(admin_token))
    assert response.status_code == 400


def test_delete_requires_admin(client, employer_payload):
    entry_id = client.post("/api/waitlist/employers", json=employer_payload()).json()["data"]["id"]
    assert client.delete(f"/api/admin/waitlist/employer/{entry_id}").status_code == 401


def test_toggle_coming_soon_mode(client, admin_token):
    response = client.put("/api/admin/site-settings", json={"coming_soon_mode": True}, headers=bearer(admin_token))
    assert response.status_code == 200
    assert response.json() == {"coming_soon_mode": True}

    public = client.get("/api/site-settings")
    assert public.status_code == 200
    assert public.json() == {"coming_soon_mode": True}


def test_site_settings_update_requires_admin(client):
    response = client.put("/api/admin/site-settings", json={"coming_soon_mode": True})
    assert response.status_code == 401


def test_admin_preflight(client):
    response = client.options("/api/admin/auth", headers={"Origin": ORIGIN})

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"

    response = client.options("/api/admin/waitlist/employer/abc", headers={"Origin": ORIGIN})
    assert response.headers["Access-Control-Allow-Methods"] == "DELETE, OPTIONS"
