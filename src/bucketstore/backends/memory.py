"""In-memory bucket store backend.

Holds buckets and objects in process memory. Intended for tests, scratch
work, and as the simplest example of the backend contract.
"""

from __future__ import annotations

import logging
import posixpath
import threading
from collections.abc import Iterator
from typing import Any

from bucketstore.backend import StorageBackend
from bucketstore.models import BackendResult, Bucket, Object, ResourceId

logger = logging.getLogger(__name__)

_MISSING = object()


class MemoryBucket(Bucket):
    """Bucket handle for InMemoryBackend."""


class MemoryObject(Object):
    """Object handle for InMemoryBackend."""


def _ancestors(resource_id: ResourceId) -> Iterator[ResourceId]:
    """Yield the enclosing identifiers of resource_id, nearest first."""
    current = resource_id
    while True:
        parent = posixpath.dirname(current)
        if not parent or parent == current:
            return
        yield parent
        current = parent


class InMemoryBackend(StorageBackend):
    """Dict-backed storage.

    Creating a bucket also creates its missing ancestors. A bucket can only
    be deleted once it is empty.
    """

    bucket_type = MemoryBucket
    object_type = MemoryObject

    def __init__(self) -> None:
        self._buckets: set[ResourceId] = set()
        self._objects: dict[ResourceId, Any] = {}
        self._lock = threading.Lock()

    @property
    def backend_name(self) -> str:
        return "memory"

    def _children(self, resource_id: ResourceId) -> list[str]:
        names = [
            posixpath.basename(rid)
            for rid in (*self._buckets, *self._objects)
            if rid != resource_id and (posixpath.dirname(rid) or ".") == resource_id
        ]
        return sorted(names)

    def create_bucket(self, bucket: Bucket) -> BackendResult:
        rid = bucket.resource_id
        with self._lock:
            if rid in self._buckets:
                return BackendResult.failure(f"Bucket {rid} already exists.")
            if rid in self._objects:
                return BackendResult.failure(f"{rid} already exists as an object.")
            missing = [rid]
            for parent in _ancestors(rid):
                if parent in self._objects:
                    return BackendResult.failure(
                        f"Cannot create bucket {rid} inside object {parent}."
                    )
                if parent in self._buckets:
                    break
                missing.append(parent)
            self._buckets.update(missing)
        logger.debug("Created bucket %s", rid)
        return BackendResult.success()

    def read_bucket(self, bucket: Bucket) -> BackendResult:
        rid = bucket.resource_id
        with self._lock:
            if rid not in self._buckets:
                return BackendResult.failure(f"Bucket {rid} does not exist.")
            return BackendResult.success(self._children(rid))

    def delete_bucket(self, bucket: Bucket) -> BackendResult:
        rid = bucket.resource_id
        with self._lock:
            if rid not in self._buckets:
                return BackendResult.failure(f"Bucket {rid} does not exist.")
            if self._children(rid):
                return BackendResult.failure(f"Bucket {rid} is not empty.")
            self._buckets.discard(rid)
        logger.debug("Deleted bucket %s", rid)
        return BackendResult.success()

    def create_object(self, obj: Object, value: Any) -> BackendResult:
        rid = obj.resource_id
        with self._lock:
            if rid in self._buckets:
                return BackendResult.failure(f"{rid} already exists as a bucket.")
            self._objects[rid] = value
        logger.debug("Stored object %s", rid)
        return BackendResult.success()

    def read_object(self, obj: Object) -> BackendResult:
        rid = obj.resource_id
        with self._lock:
            if rid not in self._objects:
                return BackendResult.failure(f"Object {rid} does not exist.")
            return BackendResult.success(self._objects[rid])

    def delete_object(self, obj: Object) -> BackendResult:
        rid = obj.resource_id
        with self._lock:
            if self._objects.pop(rid, _MISSING) is _MISSING:
                return BackendResult.failure(f"Object {rid} does not exist.")
        logger.debug("Deleted object %s", rid)
        return BackendResult.success()

    def is_bucket(self, resource_id: ResourceId) -> bool:
        with self._lock:
            return resource_id in self._buckets

    def is_object(self, resource_id: ResourceId) -> bool:
        with self._lock:
            return resource_id in self._objects

    def is_local(self) -> bool:
        return True

