"""
Prefix Store
Validation, persistence, caching and resolution of the API URL prefix
"""
from typing import Optional

from config.api import (
    DEFAULT_API_PREFIX,
    HOME_URL,
    HOST_API_PREFIX,
    PREFIX_OPTION_NAME,
    build_api_root,
)
from services.cache import PrefixCache
from services.input_validator import InputValidator
from services.observability import logger, metrics, trace_operation
from services.settings_store import SettingsStore


class PrefixValidationError(ValueError):
    """Submitted prefix text can't be saved"""


class EmptyPrefixError(PrefixValidationError):
    """Submitted prefix is empty, or nothing is left after normalization"""


class PrefixCacheError(RuntimeError):
    """New prefix was stored but the cached copy could be neither replaced nor removed"""

    def __init__(self, prefix: str):
        super().__init__(f"Prefix '{prefix}' stored but the cached prefix could not be refreshed")
        self.prefix = prefix


class PrefixStore:
    """
    Owns the API URL prefix override.

    The override lives in the Settings Store under PREFIX_OPTION_NAME; the
    resolved value is kept in a PrefixCache so request routing reads storage
    at most once per cache population.

    Lifecycle:
        Unconfigured -> activate() -> seeded with the host prefix
        -> save() -> custom value -> uninstall() -> Unconfigured
    """

    def __init__(
        self,
        settings: SettingsStore,
        cache: PrefixCache,
        home_url: str = HOME_URL,
        host_prefix: str = HOST_API_PREFIX,
    ):
        self.settings = settings
        self.cache = cache
        self.home_url = home_url
        self.host_prefix = host_prefix

    @staticmethod
    def normalize(raw: Optional[str]) -> str:
        return InputValidator.normalize_prefix(raw)

    @trace_operation("prefix_save")
    def save(self, raw: Optional[str]) -> str:
        """
        Validate, normalize and persist a new prefix.

        Caller is responsible for admin authorization and the anti-forgery check.

        Raises:
            EmptyPrefixError: raw is empty or normalizes to nothing; nothing is written
            PrefixValidationError: normalized value is too long or reserved by the host
            PrefixCacheError: value was stored, but the old cache entry may still be served
        """
        if raw is None or not raw.strip():
            raise EmptyPrefixError("Prefix cannot be empty")

        valid, error = InputValidator.validate_prefix(raw)
        if not valid:
            prefix = self.normalize(raw)
            if not prefix:
                raise EmptyPrefixError(error)
            raise PrefixValidationError(error)

        prefix = self.normalize(raw)
        self.settings.set(PREFIX_OPTION_NAME, prefix)
        metrics.increment("prefix_saves")
        logger.info("API prefix saved", prefix=prefix)

        if not self.cache.set(prefix) and not self.cache.invalidate():
            logger.error("Cached prefix could not be refreshed after save", prefix=prefix)
            metrics.increment("prefix_cache_refresh_errors")
            raise PrefixCacheError(prefix)

        return prefix

    @staticmethod
    def _routable(prefix: str) -> bool:
        """Non-empty, within length, and not shadowing one of the host's own segments"""
        return InputValidator.validate_prefix(prefix)[0]

    def resolve(self) -> str:
        """
        Prefix to route API requests under.

        Always a non-empty [a-z0-9_-] token: the stored override, or
        DEFAULT_API_PREFIX when unset, unroutable (reserved, too long) or unreadable.
        Never raises.
        """
        cached = self.cache.get()
        if cached is not None:
            metrics.increment("prefix_cache_hits")
            return cached

        metrics.increment("prefix_cache_misses")

        try:
            stored = self.settings.get(PREFIX_OPTION_NAME)
        except Exception as e:
            # Not cached, so the real value is picked up once storage recovers
            logger.error("Settings store read failed - using default prefix", error=str(e))
            metrics.increment("prefix_store_read_errors")
            return DEFAULT_API_PREFIX

        prefix = self.normalize(stored)
        if not self._routable(prefix):
            if prefix:
                logger.warning("Stored prefix is not routable - using default", prefix=prefix)
            prefix = DEFAULT_API_PREFIX

        self.cache.set(prefix)
        logger.debug("API prefix resolved from settings", prefix=prefix)
        return prefix

    def stored(self) -> Optional[str]:
        """Raw stored override, None when unset or storage is unreachable"""
        try:
            return self.settings.get(PREFIX_OPTION_NAME)
        except Exception as e:
            logger.warning("Settings store read failed", error=str(e))
            return None

    @trace_operation("prefix_activate")
    def activate(self, host_prefix: Optional[str] = None) -> str:
        """
        Seed storage with the prefix the host is currently using.

        Resolution keeps returning what the host already served until an
        admin saves a new value. A seed that is empty, too long or reserved
        becomes DEFAULT_API_PREFIX.
        """
        source = self.host_prefix if host_prefix is None else host_prefix
        prefix = self.normalize(source)
        if not self._routable(prefix):
            logger.warning("Host prefix is not routable - seeding default", host_prefix=source)
            prefix = DEFAULT_API_PREFIX

        self.settings.set(PREFIX_OPTION_NAME, prefix)
        self._drop_cached(prefix)

        logger.info("API prefix feature activated", prefix=prefix)
        return prefix

    @trace_operation("prefix_uninstall")
    def uninstall(self) -> None:
        """Delete the override and its cache entry; resolve() falls back to default"""
        self.settings.delete(PREFIX_OPTION_NAME)
        self._drop_cached(DEFAULT_API_PREFIX)
        logger.info("API prefix override removed")

    def _drop_cached(self, prefix: str) -> None:
        if not self.cache.invalidate():
            logger.error("Cached prefix could not be removed", prefix=prefix)
            metrics.increment("prefix_cache_refresh_errors")
            raise PrefixCacheError(prefix)

    # Lifecycle hook name used by the host
    deactivate_or_uninstall = uninstall

    def rest_url(self, path: str = "") -> str:
        """Public URL of an API path under the resolved prefix"""
        return build_api_root(self.resolve(), self.home_url) + path.lstrip("/")
