from core.auth.dependencies import CLOCK_SKEW_SECONDS, verify_token
from core.config import settings
from database.mongo import USER_PROFILES
from models.user_model import MeResponse, ProfileSavedOut
from tests.helpers import auth


def test_missing_token(client):
    res = client.get("/api/auth/me")
    assert res.status_code == 401
    assert res.json() == {"error": "No token provided"}


def test_non_bearer_scheme_is_missing_token(client):
    res = client.get("/api/auth/me", headers={"Authorization": "Basic dXNlcjpwYXNz"})
    assert res.status_code == 401
    assert res.json() == {"error": "No token provided"}


def test_rejected_token(client):
    res = client.get("/api/auth/me", headers={"Authorization": "Bearer forged"})
    assert res.status_code == 401
    assert res.json() == {"error": "Invalid token"}


def test_expired_token(client):
    res = client.get("/api/auth/me", headers={"Authorization": "Bearer token-expired"})
    assert res.status_code == 401
    assert res.json() == {"error": "Token expired"}


def test_me_without_profile_falls_back_to_email(client):
    res = client.get("/api/auth/me", headers=auth("alice"))
    assert res.status_code == 200
    assert res.json() == {"user": {"id": "alice", "email": "alice@example.com", "username": "alice"}}


def test_save_profile_then_me(client, store):
    res = client.post("/api/auth/profile", json={"username": "  alicecooks "}, headers=auth("alice"))
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Profile saved"
    assert body["profile"]["username"] == "alicecooks"
    assert body["profile"]["user_id"] == "alice"

    client.post("/api/auth/profile", json={"username": "chef_alice"}, headers=auth("alice"))
    rows = store.rows(USER_PROFILES)
    assert len(rows) == 1
    assert rows[0]["username"] == "chef_alice"

    me = client.get("/api/auth/me", headers=auth("alice")).json()
    assert me["user"]["username"] == "chef_alice"


def test_save_profile_rejects_blank_username(client, store):
    res = client.post("/api/auth/profile", json={"username": "   "}, headers=auth("alice"))
    assert res.status_code == 400
    assert res.json()["error"].startswith("username")
    assert store.rows(USER_PROFILES) == []


def test_health_reports_store(client, store, failing_store_error):
    body = client.get("/health").json()
    assert body["services"]["mongodb"] == "connected"

    store.fail[("ping", "admin")] = failing_store_error
    body = client.get("/health").json()
    assert body["services"]["mongodb"] == "error: connection reset"


def test_root(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_api_prefix(client):
    assert settings.API_PREFIX == "/api"
    assert client.get("/auth/me", headers=auth("alice")).status_code == 404


def test_token_verified_without_revocation_lookup(monkeypatch):
    seen = {}

    def verify(id_token, **kwargs):
        seen.update(kwargs)
        return {"uid": "carol", "email": None}

    monkeypatch.setattr("core.auth.dependencies.fb_auth.verify_id_token", verify)
    user = verify_token("token-carol")
    assert user.id == "carol"
    assert seen == {"check_revoked": False, "clock_skew_seconds": CLOCK_SKEW_SECONDS}
    assert 0 <= CLOCK_SKEW_SECONDS <= 60


def test_profile_response_models():
    saved = ProfileSavedOut(message="Profile saved", profile={"user_id": "alice", "username": "alicecooks"})
    assert saved.profile.username == "alicecooks"
    assert MeResponse(user={"id": "alice", "username": "alice"}).user.email is None
