"""API index served under the resolved prefix (e.g. GET /wp-json/)."""
from fastapi import APIRouter, Depends, Request

from config.api import HOME_URL, build_api_root
from dependencies import get_prefix_store
from services.prefix_store import PrefixStore

router = APIRouter(prefix="", tags=["API Root"])


@router.get("/")
def api_index(request: Request, store: PrefixStore = Depends(get_prefix_store)):
    """Describe the API: where it lives and which routes it serves."""
    # Set by PrefixRoutingMiddleware when the request came in through the prefix
    prefix = getattr(request.state, "api_prefix", None) or store.resolve()

    # Paths of this router are relative to the API root mount
    routes = sorted(f"/{prefix}{route.path}" for route in router.routes)

    return {
        "name": "Custom API URL Prefix",
        "home": HOME_URL,
        "prefix": prefix,
        "url": build_api_root(prefix, store.home_url),
        "routes": routes,
    }
