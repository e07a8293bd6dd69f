"""
Firebase Admin initialisation - the identity provider behind bearer tokens
"""
import json
import logging

import firebase_admin
from firebase_admin import credentials

from core.config import settings

logger = logging.getLogger(__name__)


def _load_credential():
    # FIREBASE_CREDENTIALS (production) -> service account file (local) -> ApplicationDefault (GCP)
    if settings.FIREBASE_CREDENTIALS:
        logger.info("✅ Firebase credentials from FIREBASE_CREDENTIALS env var")
        return credentials.Certificate(json.loads(settings.FIREBASE_CREDENTIALS))
    try:
        cred = credentials.Certificate(settings.FIREBASE_SERVICE_ACCOUNT_FILE)
        logger.info(f"✅ Firebase credentials from {settings.FIREBASE_SERVICE_ACCOUNT_FILE}")
        return cred
    except (IOError, ValueError):
        logger.info("💡 No service account file, using ApplicationDefault credentials")
        return credentials.ApplicationDefault()


def init_firebase_app():
    """
    Initialise the default Firebase app once; later calls return the existing app.
    """
    if firebase_admin._apps:
        return firebase_admin.get_app()
    options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
    return firebase_admin.initialize_app(_load_credential(), options)
