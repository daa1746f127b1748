"""
Authentication Middleware for the admin settings endpoints

Supports two auth modes:
  1. JWT tokens (Supabase) - admin users of the web UI
  2. Development key (DEV_API_KEY, DEBUG only) - local automation

Only callers with the admin role may change the API prefix.

Usage:
    from middleware.auth import require_admin, AuthContext

    @router.post("/settings/prefix")
    async def save_prefix(auth: AuthContext = Depends(require_admin)):
        ...
"""
from dataclasses import dataclass
from typing import Optional
import os

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer
from fastapi.security.http import HTTPAuthorizationCredentials

ADMIN_ROLE = "admin"


# ---------------------------------------------------------------------------
# Auth Context - unified return type for all auth methods
# ---------------------------------------------------------------------------

@dataclass
class AuthContext:
    """Authentication context passed to route handlers"""
    user_id: Optional[str] = None      # Supabase user ID (JWT auth)
    email: Optional[str] = None        # User email (JWT auth)
    api_key_name: Optional[str] = None # Key name (development key auth)
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    @property
    def identifier(self) -> str:
        """Stable ID the anti-forgery token is bound to"""
        return self.user_id or self.api_key_name or "anonymous"


_bearer_required = HTTPBearer(auto_error=True)


# ---------------------------------------------------------------------------
# Core validation functions
# ---------------------------------------------------------------------------

def _validate_jwt(token: str) -> Optional[AuthContext]:
    """Validate Supabase JWT token"""
    try:
        from services.auth import get_auth_service
        user = get_auth_service().verify_jwt(token)

        return AuthContext(
            user_id=user["user_id"],
            email=user.get("email"),
            role=user.get("role", "user")
        )
    except Exception:
        return None


def _validate_dev_key(token: str) -> Optional[AuthContext]:
    """Validate the local development key"""
    # Dev key ONLY works in explicit DEBUG mode AND must be explicitly set
    debug_mode = os.getenv("DEBUG", "false").lower() == "true"
    dev_key = os.getenv("DEV_API_KEY")

    if debug_mode and dev_key and token == dev_key:
        return AuthContext(api_key_name="development", role=ADMIN_ROLE)

    return None


def _authenticate(token: str) -> AuthContext:
    """Try JWT first, then the development key"""
    ctx = _validate_jwt(token)
    if ctx:
        return ctx

    ctx = _validate_dev_key(token)
    if ctx:
        return ctx

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid token or API key",
        headers={"WWW-Authenticate": "Bearer"}
    )


# ---------------------------------------------------------------------------
# FastAPI Dependencies - use these in your routes
# ---------------------------------------------------------------------------

async def require_auth(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_required)
) -> AuthContext:
    """
    Require authentication (JWT or development key)

    Raises 401 if no valid credentials provided.
    """
    return _authenticate(credentials.credentials)


async def require_admin(auth: AuthContext = Depends(require_auth)) -> AuthContext:
    """
    Require an authenticated admin

    Raises 403 for authenticated callers without the admin role.
    """
    if not auth.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required"
        )
    return auth
