"""
Firebase Authentication Dependencies
Identity is resolved once per request and passed to handlers as CurrentUser
"""
import logging
from typing import Optional

from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from firebase_admin import auth as fb_auth
from firebase_admin import exceptions as fb_exceptions

from core.config import settings
from core.errors import AuthError
from models.user_model import CurrentUser

logger = logging.getLogger(__name__)

# firebase-admin rejects a skew outside 0..60 seconds
CLOCK_SKEW_SECONDS = max(0, min(settings.TOKEN_CLOCK_SKEW_SECONDS, 60))


def extract_bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization") or ""
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def verify_token(id_token: str) -> CurrentUser:
    """
    Verify a Firebase ID token and map it to CurrentUser. Blocking (may fetch signing certs).
    """
    try:
        decoded = fb_auth.verify_id_token(
            id_token, check_revoked=False, clock_skew_seconds=CLOCK_SKEW_SECONDS
        )
    except fb_auth.ExpiredIdTokenError:
        raise AuthError("Token expired")
    except (ValueError, fb_exceptions.FirebaseError) as e:
        logger.info(f"Token verification failed: {e}")
        raise AuthError("Invalid token")

    return CurrentUser(id=decoded["uid"], email=decoded.get("email"))


async def get_current_user(request: Request) -> CurrentUser:
    """
    FastAPI dependency for authenticated routes: 401 when the token is missing or rejected
    """
    id_token = extract_bearer_token(request)
    if not id_token:
        raise AuthError("No token provided")
    return await run_in_threadpool(verify_token, id_token)
