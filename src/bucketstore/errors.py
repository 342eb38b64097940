"""Bucket store error types.

The facade raises these internally and converts them at its public boundary:
mutations return the message, reads log it and return None. Only
StoreConstructionError reaches callers as an exception.
"""

from __future__ import annotations


class BucketStoreError(Exception):
    """Base exception for bucket store operations.

    Attributes:
        message: Human-readable error message.
        resource_id: Resource identifier associated with the operation (if any).
    """

    def __init__(self, message: str, *, resource_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.resource_id = resource_id

    def __str__(self) -> str:
        if self.resource_id:
            return f"{self.message} resource_id={self.resource_id}"
        return self.message


class ConfinementViolationError(BucketStoreError):
    """Raised when a name normalizes to a resource outside the store root."""


class StructuralConflictError(BucketStoreError):
    """Raised when a target collides with a resource of the wrong kind,
    or its parent bucket does not exist.
    """


class PermissionDeniedError(BucketStoreError):
    """Raised when the client holds no grant for the requested action."""

    def __init__(self, message: str, *, resource_id: str | None = None, action: str) -> None:
        super().__init__(message, resource_id=resource_id)
        self.action = action


class StoreConstructionError(BucketStoreError):
    """Raised when a store cannot be built over the requested root."""


class BackendFailureError(BucketStoreError):
    """Raised when a backend reports a failed operation."""


class UnknownResourceKindError(BucketStoreError):
    """Raised when permission dispatch receives neither bucket nor object."""

    def __init__(
        self,
        message: str = "Resource type unknown. Permission not set.",
        *,
        kind: object = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
