"""
Custom API URL Prefix Service
FastAPI host that serves its API under an admin-configurable URL prefix
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
import os

# Initialize Sentry FIRST (before other imports to catch all errors)
from services.sentry import init_sentry
init_sentry()

from config.api import ADMIN_PREFIX, API_ROOT_MOUNT
from dependencies import get_prefix_store
from middleware.prefix_routing import PrefixRoutingMiddleware

# Import routers
from routes.api_root import router as api_root_router
from routes.health import router as health_router
from routes.metrics import router as metrics_router
from routes.settings import router as settings_router


app = FastAPI(
    title="Custom API URL Prefix",
    description="Serve the API under an admin-configurable URL prefix",
    version="1.0.0",
)


# ===== MIDDLEWARE =====

class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Limit request body size; settings payloads are tiny."""
    MAX_REQUEST_SIZE = 64 * 1024  # 64KB

    async def dispatch(self, request: Request, call_next):
        if request.method in ["POST", "PUT", "PATCH", "DELETE"]:
            content_length = request.headers.get("content-length")
            if content_length and int(content_length) > self.MAX_REQUEST_SIZE:
                return JSONResponse(
                    status_code=413,
                    content={"detail": f"Request too large (max {self.MAX_REQUEST_SIZE // 1024}KB)"}
                )
        return await call_next(request)


# Last added runs first: CORS -> size limit -> prefix rewrite -> routers
app.add_middleware(PrefixRoutingMiddleware, get_store=get_prefix_store)
app.add_middleware(RequestSizeLimitMiddleware)

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


# ===== ROUTERS =====
# API routers live under API_ROOT_MOUNT and are reached through /{prefix}/...
# Admin routers: /admin/settings/prefix, /admin/metrics

app.include_router(health_router)  # /health stays at root
app.include_router(api_root_router, prefix=API_ROOT_MOUNT)
app.include_router(settings_router, prefix=ADMIN_PREFIX)
app.include_router(metrics_router, prefix=ADMIN_PREFIX)


# ===== ERROR HANDLERS =====

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with clear messages."""
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "errors": exc.errors()
        }
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions (e.g. settings store down on save).
    Captures to Sentry and returns 500.
    """
    from services.sentry import capture_http_exception
    capture_http_exception(request, exc, 500)

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )
