"""OpenTelemetry tracing configuration for bucketstore.

Environment Variables:
    BUCKETSTORE_OTEL_ENABLED: Set to "1" to enable tracing (default: disabled)
    BUCKETSTORE_REQUIRE_OTEL: Set to "1" to fail if tracing cannot initialize
    BUCKETSTORE_OTEL_SERVICE_NAME: Service name for spans (default: "bucketstore")
    BUCKETSTORE_OTEL_EXPORTER: Exporter type - "otlp" or "console" (default: "otlp")
    BUCKETSTORE_OTEL_EXPORTER_OTLP_ENDPOINT: OTLP endpoint URL (optional)
    BUCKETSTORE_OTEL_TEST_CAPTURE: Set to "1" to use in-memory exporter for tests
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan, TracerProvider
    from opentelemetry.trace import Tracer

logger = logging.getLogger(__name__)

_tracer_provider: TracerProvider | None = None
_is_configured: bool = False
_test_exporter: Any = None  # InMemorySpanExporter kept across reset_tracing()


class TracingConfigError(Exception):
    """Raised when tracing configuration fails and BUCKETSTORE_REQUIRE_OTEL=1."""

    pass


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    val = os.environ.get(key, "").strip().lower()
    if val in ("1", "true", "yes"):
        return True
    if val in ("0", "false", "no", ""):
        return default
    return default


def _get_env_str(key: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default).strip()


def is_tracing_enabled() -> bool:
    return _get_env_bool("BUCKETSTORE_OTEL_ENABLED", False)


def _create_exporter(exporter_type: str, endpoint: str | None) -> Any:
    if exporter_type == "console":
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter

        return ConsoleSpanExporter()

    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

    return OTLPSpanExporter(endpoint=endpoint) if endpoint else OTLPSpanExporter()


def configure_tracing() -> bool:
    """Configure OpenTelemetry tracing for bucketstore.

    Idempotent - safe to call multiple times.

    Returns:
        True if tracing is enabled and configured, False otherwise.

    Raises:
        TracingConfigError: If BUCKETSTORE_REQUIRE_OTEL=1 and configuration fails.
    """
    global _tracer_provider, _is_configured, _test_exporter

    enabled = is_tracing_enabled()
    require_otel = _get_env_bool("BUCKETSTORE_REQUIRE_OTEL", False)
    test_capture = _get_env_bool("BUCKETSTORE_OTEL_TEST_CAPTURE", False)

    if not enabled:
        _is_configured = True
        logger.debug("OpenTelemetry tracing disabled (BUCKETSTORE_OTEL_ENABLED not set)")
        return False

    if _test_exporter is not None and test_capture:
        return True

    if _is_configured and _tracer_provider is not None:
        return True

    _is_configured = True

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor

        service_name = _get_env_str("BUCKETSTORE_OTEL_SERVICE_NAME", "bucketstore")
        exporter_type = _get_env_str("BUCKETSTORE_OTEL_EXPORTER", "otlp")
        endpoint = _get_env_str("BUCKETSTORE_OTEL_EXPORTER_OTLP_ENDPOINT", "")

        provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

        if test_capture:
            from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
                InMemorySpanExporter,
            )

            _test_exporter = InMemorySpanExporter()
            provider.add_span_processor(SimpleSpanProcessor(_test_exporter))
        elif exporter_type == "console":
            provider.add_span_processor(SimpleSpanProcessor(_create_exporter("console", None)))
        else:
            provider.add_span_processor(
                BatchSpanProcessor(_create_exporter("otlp", endpoint or None))
            )

        trace.set_tracer_provider(provider)
        _tracer_provider = provider

        logger.info(
            "OpenTelemetry tracing configured: service=%s, exporter=%s",
            service_name,
            exporter_type if not test_capture else "in-memory",
        )
        return True

    except Exception as e:
        logger.error("Failed to configure OpenTelemetry tracing: %s", e)
        if require_otel:
            raise TracingConfigError(
                f"OpenTelemetry tracing required but configuration failed: {e}"
            ) from e
        return False


def get_tracer(name: str) -> Tracer | None:
    """Return a tracer from the configured provider, or the global one.

    Returns None when OpenTelemetry is not installed.
    """
    if _tracer_provider is not None:
        return _tracer_provider.get_tracer(name)
    try:
        from opentelemetry import trace
    except ImportError:
        return None
    return trace.get_tracer(name)


def get_test_spans() -> list[ReadableSpan]:
    """Get captured spans from the in-memory exporter (for testing)."""
    if _test_exporter is not None and hasattr(_test_exporter, "get_finished_spans"):
        return list(_test_exporter.get_finished_spans())
    return []


def clear_test_spans() -> None:
    """Clear captured spans from the in-memory exporter (for testing)."""
    if _test_exporter is not None and hasattr(_test_exporter, "clear"):
        _test_exporter.clear()


def reset_tracing() -> None:
    """Reset tracing configuration (for testing).

    The OpenTelemetry global TracerProvider cannot be replaced once set, so
    the test exporter and provider are kept; only captured spans and the
    configured flag are cleared.
    """
    global _is_configured

    clear_test_spans()
    _is_configured = False
