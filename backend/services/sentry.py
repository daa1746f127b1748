"""
Sentry Error Tracking Integration

NOTE: This module only initializes Sentry. For logging and tracing,
use the observability module: from services.observability import logger, trace_operation
"""
import os

from services.observability import logger


def init_sentry() -> bool:
    """
    Initialize Sentry SDK if SENTRY_DSN is configured.

    Returns:
        bool: True if Sentry was initialized, False otherwise
    """
    sentry_dsn = os.getenv("SENTRY_DSN")

    if not sentry_dsn:
        logger.info("Sentry DSN not configured - error tracking disabled")
        return False

    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.starlette import StarletteIntegration

        environment = os.getenv("ENVIRONMENT", "development")

        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=environment,

            # Prefix resolution runs on every request; keep tracing light in production
            traces_sample_rate=0.05 if environment == "production" else 1.0,

            send_default_pii=False,

            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                StarletteIntegration(transaction_style="endpoint"),
            ],

            before_send=_filter_events,
            debug=environment == "development",
            attach_stacktrace=True,
        )

        logger.info("Sentry initialized", environment=environment)
        return True

    except ImportError:
        logger.warning("sentry-sdk not installed - error tracking disabled")
        return False
    except Exception as e:
        logger.warning("Failed to initialize Sentry", error=str(e))
        return False


def _filter_events(event, hint):
    """Filter out noisy events before sending to Sentry."""

    request_url = event.get("request", {}).get("url", "")
    if "/health" in request_url:
        return None

    # Prefix validation errors are expected user input problems
    exception_values = event.get("exception", {}).get("values", [])
    if exception_values:
        exception_type = exception_values[0].get("type", "")
        if exception_type in (
            "RequestValidationError",
            "PrefixValidationError",
            "EmptyPrefixError",
        ):
            return None

    return event


def capture_http_exception(request, exc: Exception, status_code: int):
    """
    Capture HTTP exception with request context for error tracking.
    """
    try:
        import sentry_sdk
        with sentry_sdk.push_scope() as scope:
            scope.set_extra("status_code", status_code)
            scope.set_extra("path", str(request.url.path))
            scope.set_extra("method", request.method)
            sentry_sdk.capture_exception(exc)
    except ImportError:
        pass
