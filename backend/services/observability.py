"""
Observability Module
Centralized logging, tracing, and metrics for the prefix service

Usage:
    from services.observability import logger, metrics, trace_operation

    logger.info("Prefix saved", prefix="my-api", user="admin")

    @trace_operation("prefix_save")
    def save(raw: str):
        ...

    metrics.increment("prefix_cache_hits")
"""
import os
import sys
import time
import logging
import json
from typing import Any, Dict
from functools import wraps
from datetime import datetime, timezone

# Environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_PRODUCTION = ENVIRONMENT == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if IS_PRODUCTION else "DEBUG")

# kwargs lifted into Sentry context by trace_operation
_TRACE_CONTEXT_KEYS = ("prefix", "host_prefix", "user")


# =============================================================================
# STRUCTURED LOGGER
# =============================================================================

class StructuredLogger:
    """
    Structured logger that outputs JSON in production, pretty logs in development.

    Usage:
        logger.info("Prefix resolved", prefix="wp-json", source="cache")
        logger.error("Settings read failed", error=str(e))
    """

    def __init__(self, name: str = "api-prefix"):
        self.name = name
        self.level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)
        self._context: Dict[str, Any] = {}

    def _format_message(self, level: str, message: str, **kwargs) -> str:
        """Format log message based on environment"""
        data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "service": self.name,
            "message": message,
            **self._context,
            **kwargs
        }

        if IS_PRODUCTION:
            return json.dumps(data, default=str)

        extras = " | ".join(f"{k}={v}" for k, v in kwargs.items())
        ctx = " | ".join(f"{k}={v}" for k, v in self._context.items())
        parts = [f"[{level}] {message}"]
        if ctx:
            parts.append(f"[ctx: {ctx}]")
        if extras:
            parts.append(extras)
        return " ".join(parts)

    def _log(self, level: str, level_num: int, message: str, **kwargs):
        if level_num < self.level:
            return

        formatted = self._format_message(level, message, **kwargs)

        # stderr for errors, stdout for the rest
        output = sys.stderr if level_num >= logging.ERROR else sys.stdout
        print(formatted, file=output)

    def set_context(self, **kwargs):
        """Set persistent context for all subsequent logs"""
        self._context.update(kwargs)

    def clear_context(self):
        self._context = {}

    def debug(self, message: str, **kwargs):
        self._log("DEBUG", logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log("INFO", logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log("WARNING", logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log("ERROR", logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs):
        self._log("CRITICAL", logging.CRITICAL, message, **kwargs)


# Global logger instance
logger = StructuredLogger()


# =============================================================================
# SENTRY INTEGRATION HELPERS
# =============================================================================

def set_operation_context(operation: str, **kwargs):
    """Tag the current Sentry scope with the running operation."""
    try:
        import sentry_sdk
        sentry_sdk.set_tag("operation", operation)
        for key, value in kwargs.items():
            sentry_sdk.set_tag(key, str(value))
    except ImportError:
        pass


def add_breadcrumb(message: str, category: str = "custom", level: str = "info", **data):
    """
    Add breadcrumb for Sentry error context.

    Breadcrumbs show the trail of events leading to an error.
    """
    try:
        import sentry_sdk
        sentry_sdk.add_breadcrumb(
            message=message,
            category=category,
            level=level,
            data=data
        )
    except ImportError:
        pass


def capture_exception(error: Exception, **context):
    """
    Capture exception with additional context and log it.

    Args:
        error: The exception to capture
        **context: Additional context to attach
    """
    try:
        import sentry_sdk
        with sentry_sdk.push_scope() as scope:
            for key, value in context.items():
                scope.set_extra(key, value)
            sentry_sdk.capture_exception(error)
    except ImportError:
        pass

    logger.error(
        f"Exception captured: {type(error).__name__}: {str(error)}",
        **context
    )


# =============================================================================
# TRACING
# =============================================================================

def trace_operation(operation: str):
    """
    Decorator to trace a synchronous store operation.

    Usage:
        @trace_operation("prefix_save")
        def save(self, raw: str):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            context = {k: v for k, v in kwargs.items() if k in _TRACE_CONTEXT_KEYS}

            set_operation_context(operation, **context)
            add_breadcrumb(f"Starting {operation}", category="function", **context)

            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                # ValueError = rejected input, not reported
                if not isinstance(e, ValueError):
                    capture_exception(e, operation=operation, duration_ms=duration_ms, **context)
                raise

            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.debug(f"{operation} completed", duration_ms=duration_ms, **context)
            metrics.timing(f"{operation}_ms", duration_ms)
            return result

        return wrapper

    return decorator


# =============================================================================
# SIMPLE METRICS (in-memory counters)
# =============================================================================

class Metrics:
    """
    Simple in-memory metrics counters.

    Usage:
        metrics.increment("prefix_cache_hits")
        metrics.timing("prefix_save_ms", 1.2)
        metrics.get_stats()
    """

    def __init__(self):
        self._counters: Dict[str, int] = {}
        self._timings: Dict[str, list] = {}

    def increment(self, name: str, value: int = 1):
        self._counters[name] = self._counters.get(name, 0) + value

    def timing(self, name: str, value_ms: float):
        """Record a timing measurement"""
        if name not in self._timings:
            self._timings[name] = []
        self._timings[name].append(value_ms)
        # Keep only last 1000 timings
        if len(self._timings[name]) > 1000:
            self._timings[name] = self._timings[name][-1000:]

    def get(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_stats(self) -> Dict:
        """Get all metrics with basic stats"""
        stats = {
            "counters": self._counters.copy(),
            "timings": {}
        }

        for name, values in self._timings.items():
            if values:
                stats["timings"][name] = {
                    "count": len(values),
                    "avg_ms": round(sum(values) / len(values), 2),
                    "min_ms": round(min(values), 2),
                    "max_ms": round(max(values), 2)
                }

        return stats

    def reset(self):
        self._counters = {}
        self._timings = {}


# Global metrics instance
metrics = Metrics()
