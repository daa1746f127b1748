"""
API Configuration - Single Source of Truth for the API URL Prefix

DEFAULT_API_PREFIX is the only place the default prefix is spelled out.
Everything that needs a fallback (resolution, activation seed, form preview)
imports it from here.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PREFIX DEFAULTS
# =============================================================================

DEFAULT_API_PREFIX = "wp-json"

# Allowed characters for a stored prefix (lowercase, no slashes)
PREFIX_PATTERN = r"[a-z0-9_-]*"

# =============================================================================
# PERSISTED STATE LAYOUT
# =============================================================================

# Settings Store row holding the override
PREFIX_OPTION_NAME = "api_url_prefix_override"

# Cache entry holding the last resolved value: options:api_url_prefix_cached
CACHE_GROUP = "options"
PREFIX_CACHE_KEY = "api_url_prefix_cached"

# =============================================================================
# HOST CONFIGURATION (env)
# =============================================================================

# Public base URL, used to build the API root shown to admins
HOME_URL = os.getenv("HOME_URL", "http://localhost:8000").rstrip("/")

# The prefix the host currently uses; seeded into storage on activation
HOST_API_PREFIX = os.getenv("HOST_API_PREFIX", DEFAULT_API_PREFIX)

# Seconds; empty means the entry lives until invalidated
_cache_ttl = os.getenv("PREFIX_CACHE_TTL", "")
PREFIX_CACHE_TTL = int(_cache_ttl) if _cache_ttl else None

# Upper bound for entries in the process-local fallback cache, which other
# workers can't invalidate
LOCAL_CACHE_TTL = int(os.getenv("LOCAL_CACHE_TTL", "300"))

# =============================================================================
# ROUTING
# =============================================================================

# Internal mount the API routers live under; requests arrive as /{prefix}/...
# and are rewritten onto this path by PrefixRoutingMiddleware
API_ROOT_MOUNT = "/__api-root"

# Admin settings endpoints
ADMIN_PREFIX = "/admin"

# Top-level segments owned by the app itself; a prefix may not shadow them
RESERVED_PREFIXES = frozenset({
    ADMIN_PREFIX.strip("/"),
    API_ROOT_MOUNT.strip("/"),
    "health",
    "docs",
    "redoc",
})

# =============================================================================
# ANTI-FORGERY
# =============================================================================

NONCE_ACTION = "custom-api-url-prefix-save"
NONCE_TTL_SECONDS = int(os.getenv("NONCE_TTL_SECONDS", "86400"))

OPERATOR_GUIDANCE = (
    "Refresh your routing rules and clear your object cache "
    "so every worker picks up the new prefix."
)

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def build_api_root(prefix: str, home_url: str = HOME_URL) -> str:
    """Build the public API root URL for a prefix, e.g. https://site/wp-json/"""
    return f"{home_url.rstrip('/')}/{prefix}/"


def is_internal_mount(path: str) -> bool:
    """Check if a path targets the internal API mount directly."""
    return path == API_ROOT_MOUNT or path.startswith(API_ROOT_MOUNT + "/")
