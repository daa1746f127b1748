"""
Test Configuration
External services (Supabase, Redis) are patched before any app import
"""
import pytest
import sys
from pathlib import Path
from typing import Dict, Optional
from unittest.mock import MagicMock, patch
import os

import redis

# Set test environment BEFORE imports
os.environ["DEBUG"] = "true"
os.environ["DEV_API_KEY"] = "test-secret-key"
os.environ["SUPABASE_URL"] = "https://test.supabase.co"
os.environ["SUPABASE_KEY"] = "test-key"
os.environ["SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["NONCE_SECRET"] = "test-nonce-secret-0123456789abcdef01234"
os.environ["HOME_URL"] = "https://example.com"
os.environ["HOST_API_PREFIX"] = "wp-json"
os.environ.pop("REDIS_URL", None)
os.environ.pop("SENTRY_DSN", None)

# =============================================================================
# EARLY PATCHING - runs during collection, before any imports
# =============================================================================

_supabase_patcher = patch('supabase.create_client')
_mock_supabase = _supabase_patcher.start()
_supabase_client = MagicMock()
_supabase_client.table.return_value.select.return_value.eq.return_value.limit.return_value.execute.return_value.data = []
_supabase_client.table.return_value.select.return_value.eq.return_value.eq.return_value.execute.return_value.data = []
# Auth should reject by default
_auth_response = MagicMock()
_auth_response.user = None
_supabase_client.auth.get_user.return_value = _auth_response
_mock_supabase.return_value = _supabase_client

# No Redis in tests: the shared CacheService falls back to its local cache
_redis_patcher = patch('redis.Redis')
_mock_redis_cls = _redis_patcher.start()
_mock_redis_cls.return_value.ping.side_effect = redis.ConnectionError("no redis in tests")

# =============================================================================

# Add backend to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

ADMIN_USER_ID = "admin-123"


class InMemorySettingsStore:
    """SettingsStore stand-in that counts reads and can simulate an outage"""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(values or {})
        self.reads = 0
        self.writes = 0
        self.fail_reads = False

    def get(self, name: str) -> Optional[str]:
        self.reads += 1
        if self.fail_reads:
            raise ConnectionError("settings store unreachable")
        return self.values.get(name)

    def set(self, name: str, value: str) -> None:
        self.writes += 1
        self.values[name] = value

    def delete(self, name: str) -> None:
        self.values.pop(name, None)


@pytest.fixture
def settings_store():
    return InMemorySettingsStore()


@pytest.fixture
def local_cache():
    """CacheService running on its process-local store"""
    from services.cache import CacheService
    service = CacheService(redis_client=MagicMock())
    service.redis = None
    return service


@pytest.fixture
def prefix_store(settings_store, local_cache):
    from services.cache import PrefixCache
    from services.prefix_store import PrefixStore
    return PrefixStore(
        settings=settings_store,
        cache=PrefixCache(local_cache, ttl=None),
        home_url="https://example.com",
        host_prefix="wp-json",
    )


@pytest.fixture
def app(prefix_store, monkeypatch):
    """App wired to the in-memory prefix store (routes and routing middleware)"""
    import dependencies
    from main import app as fastapi_app

    monkeypatch.setattr(dependencies, "prefix_store", prefix_store)
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    """TestClient with the admin check bypassed"""
    from fastapi.testclient import TestClient
    from middleware.auth import AuthContext, require_admin

    async def mock_require_admin():
        return AuthContext(
            user_id=ADMIN_USER_ID,
            email="admin@example.com",
            role="admin"
        )

    app.dependency_overrides[require_admin] = mock_require_admin
    return TestClient(app)


@pytest.fixture
def client_no_auth(app):
    """TestClient WITHOUT auth bypass - for testing auth behavior"""
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def nonce():
    """Valid form token for the admin used by `client`"""
    from config.api import NONCE_ACTION
    from dependencies import nonces
    return nonces.create(NONCE_ACTION, ADMIN_USER_ID)


@pytest.fixture
def valid_headers():
    """Dev key headers (DEBUG=true) - authenticates as admin"""
    return {"Authorization": "Bearer test-secret-key"}


@pytest.fixture(autouse=True)
def reset_metrics():
    from services.observability import metrics
    metrics.reset()
    yield
