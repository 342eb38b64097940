"""OpenTelemetry tracing for bucket store operations.

Security:
    - Never export resource names or filesystem paths in span attributes
    - Names are correlated through their SHA256 only
"""

from __future__ import annotations

import functools
import hashlib
import logging
from collections.abc import Callable
from typing import Any, TypeVar, cast

from bucketstore.observability.tracing import get_tracer, is_tracing_enabled

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def traced_store_operation(operation: str) -> Callable[[F], F]:
    """Decorator to trace BucketStore facade operations with OpenTelemetry.

    Args:
        operation: Operation name (e.g., "create_bucket", "get_object").

    Returns:
        Decorated method that emits a span when tracing is enabled.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            if not is_tracing_enabled():
                return func(self, *args, **kwargs)

            tracer = get_tracer("bucketstore.store")
            if tracer is None:
                return func(self, *args, **kwargs)

            with tracer.start_as_current_span(f"bucketstore.{operation}") as span:
                name = args[0] if args else kwargs.get("name", "")
                if isinstance(name, str):
                    name_sha256 = hashlib.sha256(name.encode("utf-8")).hexdigest()
                    span.set_attribute("bucketstore.resource_name_sha256", name_sha256)
                backend = getattr(self, "backend", None)
                span.set_attribute("storage.backend", getattr(backend, "backend_name", "unknown"))

                try:
                    result = func(self, *args, **kwargs)
                except Exception as e:
                    span.set_attribute("error", True)
                    span.set_attribute("error.type", type(e).__name__)
                    raise

                _add_result_attributes(span, result, operation)
                return result

        return cast(F, wrapper)

    return decorator


def _add_result_attributes(span: Any, result: Any, operation: str) -> None:
    """Record the outcome without exporting values or messages."""
    if operation in ("create_bucket", "delete_bucket", "set_object", "delete_object"):
        span.set_attribute("bucketstore.ok", result is None)
    elif operation in ("list_contents", "get_object"):
        span.set_attribute("bucketstore.found", result is not None)
    elif isinstance(result, bool):
        span.set_attribute("bucketstore.result", result)
