"""
Shared client instances — Redis (alias cache), Firestore (document store).

Lazily initialized on first access so importing this module is always safe
(even when env vars are missing during tests).
"""
import logging

import firebase_admin
import redis
from firebase_admin import credentials, firestore

from workin_analytics.config import FIREBASE_CREDENTIALS, FIREBASE_PROJECT_ID, REDIS_URL

logger = logging.getLogger('workin_analytics.extensions')

_redis_client = None
_firestore_client = None


# ── Redis ─────────────────────────────────────────────────────────────────────
def get_redis_client():
    """Redis client for the alias cache, or None when REDIS_URL is unset."""
    global _redis_client
    if _redis_client is None and REDIS_URL:
        try:
            _redis_client = redis.from_url(REDIS_URL, decode_responses=True)
        except Exception as e:
            logger.error("Error initializing Redis client: %s", e)
    return _redis_client


# ── Firestore ─────────────────────────────────────────────────────────────────
def get_firestore_client():
    """Firestore client from the default Firebase app (initialized once).

    Uses the service account in FIREBASE_CREDENTIALS when set, otherwise
    application default credentials.
    """
    global _firestore_client
    if _firestore_client is not None:
        return _firestore_client

    try:
        firebase_admin.get_app()
    except ValueError:
        options = {'projectId': FIREBASE_PROJECT_ID} if FIREBASE_PROJECT_ID else None
        if FIREBASE_CREDENTIALS:
            firebase_admin.initialize_app(credentials.Certificate(FIREBASE_CREDENTIALS), options)
        else:
            logger.warning("FIREBASE_CREDENTIALS not set — using application default credentials")
            firebase_admin.initialize_app(options=options)
        logger.info("Firebase app initialized")

    _firestore_client = firestore.client()
    return _firestore_client
