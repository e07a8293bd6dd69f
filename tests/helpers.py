from firebase_admin import auth as fb_auth

TOKENS = {
    "token-alice": {"uid": "alice", "email": "alice@example.com"},
    "token-bob": {"uid": "bob", "email": "bob@example.com"},
}


def fake_verify_id_token(id_token, check_revoked=False, clock_skew_seconds=0):
    """Stands in for firebase_admin.auth.verify_id_token: "token-<uid>" is valid."""
    if id_token == "token-expired":
        raise fb_auth.ExpiredIdTokenError("Token expired", None)
    if id_token not in TOKENS:
        raise fb_auth.InvalidIdTokenError("Could not verify token")
    return dict(TOKENS[id_token])


def auth(user="alice"):
    return {"Authorization": f"Bearer token-{user}"}
