"""
Shared dependencies and service instances.
All route modules import from here to avoid circular imports.
"""
from fastapi import HTTPException, status
from dotenv import load_dotenv

# Load env vars first
load_dotenv()

from config.api import NONCE_ACTION
from middleware.auth import AuthContext
from services.cache import CacheService, PrefixCache
from services.nonce import NonceService
from services.prefix_store import PrefixStore
from services.settings_store import get_settings_store

# Service instances (singleton pattern)
cache = CacheService()
nonces = NonceService()
prefix_store = PrefixStore(
    settings=get_settings_store(),
    cache=PrefixCache(cache),
)


def get_prefix_store() -> PrefixStore:
    """FastAPI dependency / routing hook for the shared PrefixStore."""
    return prefix_store


def get_nonce_service() -> NonceService:
    return nonces


def verify_nonce(token: str, auth: AuthContext) -> None:
    """
    Verify the settings form anti-forgery token.
    Raises 403 if it is missing, expired, or issued to someone else.
    """
    if not nonces.verify(token, NONCE_ACTION, auth.identifier):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired form token. Reload the settings page and try again."
        )
