"""Operational metrics route."""
from fastapi import APIRouter, Depends

from middleware.auth import require_admin, AuthContext
from services.observability import metrics

router = APIRouter(prefix="", tags=["Metrics"])


@router.get("/metrics")
def get_metrics(auth: AuthContext = Depends(require_admin)):
    """Cache hit/miss and store error counters for prefix resolution."""
    return metrics.get_stats()
