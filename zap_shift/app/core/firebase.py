"""
Firebase identity verification.

Wraps ``firebase_admin.auth.verify_id_token`` so the rest of the app only
sees a verified email or an ``AuthenticationError``.
"""

import base64
import binascii
import json
import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from fastapi.concurrency import run_in_threadpool

from zap_shift.app.core.config import settings
from zap_shift.app.core.exceptions import AuthenticationError, UpstreamServiceError
from zap_shift.app.core.reliability import CircuitBreaker, CircuitOpenError

logger = logging.getLogger(__name__)


def _load_credentials(raw: Optional[str]):
    """
    Build a service-account credential from a file path, inline JSON or
    base64-encoded JSON. Falls back to application default credentials.
    """
    if not raw:
        return credentials.ApplicationDefault()

    if os.path.isfile(raw):
        return credentials.Certificate(raw)

    text = raw.strip()
    if not text.startswith("{"):
        try:
            text = base64.b64decode(text).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ValueError("FIREBASE_CREDENTIALS is not a path, JSON or base64 JSON") from exc

    return credentials.Certificate(json.loads(text))


def get_firebase_app() -> firebase_admin.App:
    """Initialize the default Firebase app on first use."""
    if not firebase_admin._apps:
        firebase_admin.initialize_app(_load_credentials(settings.firebase_credentials))
        logger.info("Firebase app initialized")
    return firebase_admin.get_app()


class FirebaseIdentityVerifier:
    """
    Verifies Firebase ID tokens.

    Every call performs a fresh verification; nothing is cached here
    beyond what the Firebase SDK does for its public keys.
    """

    def __init__(self):
        self.breaker = CircuitBreaker(
            "firebase",
            failure_threshold=5,
            reset_timeout=30,
            ignored_exceptions=(firebase_auth.InvalidIdTokenError,),
        )

    async def verify(self, token: str) -> str:
        """
        Verify an ID token and return the email it was issued for.

        Raises:
            AuthenticationError: Token invalid, expired, revoked, malformed or without email
            UpstreamServiceError: Identity provider unreachable or misconfigured
        """
        app = get_firebase_app()

        try:
            decoded = await self.breaker.call(
                run_in_threadpool, firebase_auth.verify_id_token, token, app=app
            )
        except firebase_auth.InvalidIdTokenError as exc:
            logger.info("Rejected ID token: %s", exc)
            raise AuthenticationError("Unauthorized access")
        except ValueError as exc:
            # Raised for a missing project id or credentials, not for bad tokens
            logger.error("Firebase is misconfigured: %s", exc)
            raise UpstreamServiceError("firebase", message="Identity provider is misconfigured", status_code=503)
        except firebase_auth.CertificateFetchError as exc:
            logger.error("Could not fetch Firebase certificates: %s", exc)
            raise UpstreamServiceError("firebase", status_code=503)
        except CircuitOpenError:
            raise UpstreamServiceError("firebase", status_code=503)

        email = decoded.get("email")
        if not email:
            raise AuthenticationError("Token carries no email claim")
        return email


identity_verifier = FirebaseIdentityVerifier()


def get_identity_verifier() -> FirebaseIdentityVerifier:
    """FastAPI dependency returning the process-wide verifier."""
    return identity_verifier
