"""Bucket store data models.

Provides the resource-kind handles passed to backends and the result type
backends return from every create/read/delete call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

ResourceId = str


class ResourceKind(StrEnum):
    """Symbolic resource kinds accepted by permission dispatch."""

    BUCKET = "bucket"
    OBJECT = "object"


@dataclass(frozen=True, slots=True)
class Resource:
    """A handle on a bucket or object.

    Attributes:
        resource_id: Normalized path identifying the resource.
    """

    resource_id: ResourceId


@dataclass(frozen=True, slots=True)
class Bucket(Resource):
    """Container resource, analogous to a directory."""


@dataclass(frozen=True, slots=True)
class Object(Resource):
    """Leaf resource holding a value."""


@dataclass(frozen=True, slots=True)
class BackendResult:
    """Outcome of a backend create/read/delete call.

    Attributes:
        ok: True if the backend completed the operation.
        value: Value produced by a successful read (None for mutations).
        error: Backend error message when ok is False.
    """

    ok: bool
    value: Any = None
    error: str | None = None

    @classmethod
    def success(cls, value: Any = None) -> BackendResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> BackendResult:
        return cls(ok=False, error=error)
