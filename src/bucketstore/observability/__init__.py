"""bucketstore observability module.

Provides opt-in OpenTelemetry tracing configuration.
"""

from bucketstore.observability.tracing import configure_tracing, is_tracing_enabled

__all__ = ["configure_tracing", "is_tracing_enabled"]
