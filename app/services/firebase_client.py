"""
Firebase initialization for the Firestore-backed seat ledger
"""

from __future__ import annotations

import base64
import json
import logging
import os
from functools import lru_cache
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore

from app.core.config import settings

logger = logging.getLogger(__name__)


def _load_credentials_info() -> dict[str, Any] | None:
    if settings.FIREBASE_CREDENTIALS_JSON:
        return json.loads(settings.FIREBASE_CREDENTIALS_JSON)
    if settings.FIREBASE_CREDENTIALS_B64:
        return json.loads(base64.b64decode(settings.FIREBASE_CREDENTIALS_B64).decode("utf-8"))
    if settings.FIREBASE_CREDENTIALS_FILE and os.path.exists(settings.FIREBASE_CREDENTIALS_FILE):
        with open(settings.FIREBASE_CREDENTIALS_FILE, "r", encoding="utf-8") as f:
            return json.load(f)
    return None


@lru_cache(maxsize=1)
def get_firestore_client():
    """Return a cached Firestore client, or None when the SQL ledger is in use.

    Credentials come from one of FIREBASE_CREDENTIALS_JSON,
    FIREBASE_CREDENTIALS_B64 or FIREBASE_CREDENTIALS_FILE, checked in that order.
    """
    if not settings.USE_FIREBASE:
        return None

    if not firebase_admin._apps:
        info = _load_credentials_info()
        if not info:
            raise RuntimeError("Firebase credentials not provided. Set FIREBASE_CREDENTIALS_FILE, FIREBASE_CREDENTIALS_JSON, or FIREBASE_CREDENTIALS_B64")

        firebase_admin.initialize_app(credentials.Certificate(info))
        logger.info(f"Firebase initialized for project {info.get('project_id')}")

    return firestore.client()
