"""
Prefix Routing Middleware

API routers are mounted under the internal API_ROOT_MOUNT path. Each request
asks the PrefixStore which prefix is live and rewrites /{prefix}/... onto the
mount, so changing the prefix needs no router re-registration.

    GET /wp-json/           -> /__api-root/
    GET /my-api/status      -> /__api-root/status
    GET /__api-root/        -> 404 (only reachable through the prefix)
"""
from typing import Callable

from fastapi import Request
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from config.api import API_ROOT_MOUNT, is_internal_mount
from services.prefix_store import PrefixStore


class PrefixRoutingMiddleware(BaseHTTPMiddleware):
    """Map requests under the resolved API prefix onto the API root mount."""

    def __init__(self, app, get_store: Callable[[], PrefixStore]):
        super().__init__(app)
        self.get_store = get_store

    async def dispatch(self, request: Request, call_next):
        path = request.scope["path"]

        if is_internal_mount(path):
            return JSONResponse(status_code=404, content={"detail": "Not Found"})

        # resolve() does blocking cache and settings I/O
        prefix = await run_in_threadpool(self.get_store().resolve)
        base = f"/{prefix}"

        if path == base or path.startswith(base + "/"):
            rewritten = API_ROOT_MOUNT + (path[len(base):] or "/")
            request.scope["path"] = rewritten
            request.scope["raw_path"] = rewritten.encode()
            request.state.api_prefix = prefix

        return await call_next(request)
