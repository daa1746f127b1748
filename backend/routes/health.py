"""Health check route."""
from fastapi import APIRouter, Depends

from dependencies import cache, get_prefix_store
from services.prefix_store import PrefixStore

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(store: PrefixStore = Depends(get_prefix_store)):
    """Liveness check. Also reports the prefix the API is currently served under."""
    return {
        "status": "healthy",
        "api_prefix": store.resolve(),
        "cache": "redis" if cache.redis else "local",
    }
