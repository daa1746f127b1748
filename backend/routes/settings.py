"""Admin settings routes for the API URL prefix."""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Optional

from config.api import (
    DEFAULT_API_PREFIX,
    NONCE_ACTION,
    OPERATOR_GUIDANCE,
    PREFIX_PATTERN,
    build_api_root,
)
from dependencies import get_nonce_service, get_prefix_store, verify_nonce
from middleware.auth import require_admin, AuthContext
from services.input_validator import InputValidator
from services.nonce import NonceService
from services.observability import logger
from services.prefix_store import PrefixCacheError, PrefixStore, PrefixValidationError

router = APIRouter(prefix="/settings/prefix", tags=["Settings"])


class SavePrefixRequest(BaseModel):
    prefix: str = ""
    nonce: str = ""


class PreviewPrefixRequest(BaseModel):
    prefix: str = ""


class LifecycleRequest(BaseModel):
    nonce: str = ""
    host_prefix: Optional[str] = None


@router.get("")
def get_prefix_settings(
    auth: AuthContext = Depends(require_admin),
    store: PrefixStore = Depends(get_prefix_store),
    nonces: NonceService = Depends(get_nonce_service),
):
    """
    Everything the settings form needs to render.

    The field starts locked; the admin has to unlock it explicitly because
    the prefix is normally set once and left alone.
    """
    current = store.resolve()
    stored = store.stored()

    return {
        "prefix": current,
        "stored_prefix": stored or "",
        "default_prefix": DEFAULT_API_PREFIX,
        "pattern": PREFIX_PATTERN,
        "api_root": build_api_root(current, store.home_url),
        "nonce": nonces.create(NONCE_ACTION, auth.identifier),
        "editing_locked": True,
    }


@router.post("/preview")
def preview_prefix(
    request: PreviewPrefixRequest,
    auth: AuthContext = Depends(require_admin),
    store: PrefixStore = Depends(get_prefix_store),
):
    """Normalize a value as typed and show the API root it would produce. Nothing is saved."""
    return InputValidator.preview_prefix(request.prefix, store.home_url)


@router.post("")
def save_prefix(
    request: SavePrefixRequest,
    auth: AuthContext = Depends(require_admin),
    store: PrefixStore = Depends(get_prefix_store),
):
    """Save a new API prefix."""
    verify_nonce(request.nonce, auth)

    cache_refreshed = True
    try:
        prefix = store.save(request.prefix)
    except PrefixValidationError as e:
        logger.info("Prefix rejected", user=auth.identifier, error=str(e))
        raise HTTPException(status_code=400, detail=f"Invalid prefix: {e}")
    except PrefixCacheError as e:
        # Stored; workers keep the old prefix until the cache entry is cleared
        prefix = e.prefix
        cache_refreshed = False

    logger.info("Prefix changed by admin", user=auth.identifier, prefix=prefix)

    return {
        "saved": True,
        "prefix": prefix,
        "api_root": build_api_root(prefix, store.home_url),
        "cache_refreshed": cache_refreshed,
        "message": f"New API URL prefix '{prefix}' has been saved. {OPERATOR_GUIDANCE}",
    }


@router.post("/activate")
def activate_prefix(
    request: LifecycleRequest,
    auth: AuthContext = Depends(require_admin),
    store: PrefixStore = Depends(get_prefix_store),
):
    """Lifecycle hook: seed the override with the prefix the host currently serves."""
    verify_nonce(request.nonce, auth)

    prefix = store.activate(host_prefix=request.host_prefix)
    return {"activated": True, "prefix": prefix}


@router.delete("")
def uninstall_prefix(
    nonce: str = "",
    auth: AuthContext = Depends(require_admin),
    store: PrefixStore = Depends(get_prefix_store),
):
    """Lifecycle hook: remove the override; the default prefix applies again."""
    verify_nonce(nonce, auth)

    store.uninstall()
    logger.info("Prefix override removed by admin", user=auth.identifier)
    return {"removed": True, "prefix": DEFAULT_API_PREFIX}
