"""
Anti-forgery tokens for admin settings forms

A nonce is a short-lived HS256 JWT bound to one action name and one admin
identifier. A token issued for another action or another admin never verifies.
"""
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from config.api import NONCE_TTL_SECONDS
from services.observability import logger

NONCE_ALGORITHM = "HS256"


class NonceService:
    """Issue and verify action-scoped anti-forgery tokens"""

    def __init__(self, secret: Optional[str] = None, ttl_seconds: int = NONCE_TTL_SECONDS):
        secret = secret or os.getenv("NONCE_SECRET")
        if not secret:
            # Tokens then only survive for the lifetime of this process
            logger.warning("NONCE_SECRET not set - using an ephemeral secret")
            secret = secrets.token_urlsafe(32)
        self._secret = secret
        self.ttl_seconds = ttl_seconds

    def create(self, action: str, user: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "act": action,
            "sub": user,
            "iat": now,
            "exp": now + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=NONCE_ALGORITHM)

    def verify(self, token: Optional[str], action: str, user: str) -> bool:
        """True if token was issued by this service for action and user and hasn't expired"""
        if not token:
            return False

        try:
            payload = jwt.decode(token, self._secret, algorithms=[NONCE_ALGORITHM])
        except jwt.ExpiredSignatureError:
            logger.info("Expired nonce rejected", action=action)
            return False
        except jwt.InvalidTokenError:
            logger.warning("Invalid nonce rejected", action=action)
            return False

        return payload.get("act") == action and payload.get("sub") == user
