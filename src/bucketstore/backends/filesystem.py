"""Local disk bucket store backend.

Buckets are directories and objects are files under a base directory:
    {base_dir}/{resource_id without leading "/"}

Object values are stored as raw bytes; str values are encoded as UTF-8 and
read back as bytes. Object writes are atomic (temp file + rename).

Environment Variables:
    BUCKETSTORE_BASE_DIR: Base directory for storage
        (default: tempfile.gettempdir() / bucketstore_objects)
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
import uuid
from pathlib import Path
from typing import Any

from bucketstore.backend import StorageBackend
from bucketstore.models import BackendResult, Bucket, Object, ResourceId

logger = logging.getLogger(__name__)

BUCKETSTORE_BASE_DIR_ENV = "BUCKETSTORE_BASE_DIR"

_TMP_SUFFIX = ".tmp"


class DiskBucket(Bucket):
    """Bucket handle for LocalDiskBackend."""


class DiskObject(Object):
    """Object handle for LocalDiskBackend."""


def _to_bytes(value: Any) -> bytes | None:
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    return None


class LocalDiskBackend(StorageBackend):
    """Filesystem-based storage rooted at a base directory.

    Every resource path is resolved and checked to lie inside the base
    directory before it is touched.
    """

    bucket_type = DiskBucket
    object_type = DiskObject

    def __init__(self, base_dir: str | Path | None = None) -> None:
        """Initialize filesystem storage.

        Args:
            base_dir: Base directory for storage. If None, uses
                BUCKETSTORE_BASE_DIR env var or OS temp directory.
        """
        if base_dir is None:
            base_dir = os.environ.get(BUCKETSTORE_BASE_DIR_ENV)

        if base_dir is None:
            base_dir = Path(tempfile.gettempdir()) / "bucketstore_objects"
        else:
            base_dir = Path(base_dir)

        self._base_dir = base_dir.resolve()
        self._base_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("LocalDiskBackend initialized with base_dir=%s", self._base_dir)

    @property
    def backend_name(self) -> str:
        return "filesystem"

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _path_for(self, resource_id: ResourceId) -> Path | None:
        """Map resource_id to a path inside the base directory.

        Returns None if the path would resolve outside the base directory or
        the host filesystem cannot represent it.
        """
        relative = resource_id.lstrip("/")
        path = (self._base_dir / relative) if relative not in ("", ".") else self._base_dir
        try:
            resolved = path.resolve()
        except (OSError, ValueError) as e:
            logger.debug("Resource %r cannot be mapped to a path: %s", resource_id, e)
            return None
        try:
            resolved.relative_to(self._base_dir)
        except ValueError:
            logger.warning("Resource %s resolves outside the storage base directory", resource_id)
            return None
        return resolved

    @staticmethod
    def _is_dir(path: Path) -> bool:
        try:
            return path.is_dir()
        except OSError:
            return False

    @staticmethod
    def _is_file(path: Path) -> bool:
        try:
            return path.is_file()
        except OSError:
            return False

    def create_bucket(self, bucket: Bucket) -> BackendResult:
        rid = bucket.resource_id
        path = self._path_for(rid)
        if path is None:
            return BackendResult.failure(f"Invalid resource id {rid}.")
        if self._is_dir(path):
            return BackendResult.failure(f"Bucket {rid} already exists.")
        if self._is_file(path):
            return BackendResult.failure(f"{rid} already exists as an object.")
        try:
            path.mkdir(parents=True)
        except OSError as e:
            return BackendResult.failure(f"Failed to create bucket {rid}: {e}")
        logger.debug("Created bucket %s", rid)
        return BackendResult.success()

    def read_bucket(self, bucket: Bucket) -> BackendResult:
        rid = bucket.resource_id
        path = self._path_for(rid)
        if path is None or not self._is_dir(path):
            return BackendResult.failure(f"Bucket {rid} does not exist.")
        try:
            names = sorted(p.name for p in self._visible_children(path))
        except OSError as e:
            return BackendResult.failure(f"Failed to list bucket {rid}: {e}")
        return BackendResult.success(names)

    def delete_bucket(self, bucket: Bucket) -> BackendResult:
        rid = bucket.resource_id
        path = self._path_for(rid)
        if path is None or not self._is_dir(path):
            return BackendResult.failure(f"Bucket {rid} does not exist.")
        try:
            if any(self._visible_children(path)):
                return BackendResult.failure(f"Bucket {rid} is not empty.")
            for leftover in path.iterdir():
                if self._is_temp_file(leftover):
                    leftover.unlink()
            path.rmdir()
        except OSError as e:
            return BackendResult.failure(f"Failed to delete bucket {rid}: {e}")
        logger.debug("Deleted bucket %s", rid)
        return BackendResult.success()

    @staticmethod
    def _is_temp_file(path: Path) -> bool:
        return path.name.startswith(".") and path.name.endswith(_TMP_SUFFIX) and path.is_file()

    def _visible_children(self, path: Path) -> list[Path]:
        """Return entries of a bucket directory, skipping temp files of unfinished writes."""
        return [p for p in path.iterdir() if not self._is_temp_file(p)]

    def create_object(self, obj: Object, value: Any) -> BackendResult:
        rid = obj.resource_id
        path = self._path_for(rid)
        if path is None:
            return BackendResult.failure(f"Invalid resource id {rid}.")
        if self._is_dir(path):
            return BackendResult.failure(f"{rid} already exists as a bucket.")
        data = _to_bytes(value)
        if data is None:
            return BackendResult.failure(
                f"LocalDiskBackend stores bytes or str values, got {type(value).__name__}."
            )

        tmp_file = path.parent / f".{path.name}.{uuid.uuid4().hex}{_TMP_SUFFIX}"
        try:
            tmp_file.write_bytes(data)
            tmp_file.replace(path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp_file.unlink(missing_ok=True)
            return BackendResult.failure(f"Failed to write object {rid}: {e}")
        logger.debug("Stored object %s (%d bytes)", rid, len(data))
        return BackendResult.success()

    def read_object(self, obj: Object) -> BackendResult:
        rid = obj.resource_id
        path = self._path_for(rid)
        if path is None or not self._is_file(path):
            return BackendResult.failure(f"Object {rid} does not exist.")
        try:
            return BackendResult.success(path.read_bytes())
        except OSError as e:
            return BackendResult.failure(f"Failed to read object {rid}: {e}")

    def delete_object(self, obj: Object) -> BackendResult:
        rid = obj.resource_id
        path = self._path_for(rid)
        if path is None or not self._is_file(path):
            return BackendResult.failure(f"Object {rid} does not exist.")
        try:
            path.unlink()
        except OSError as e:
            return BackendResult.failure(f"Failed to delete object {rid}: {e}")
        logger.debug("Deleted object %s", rid)
        return BackendResult.success()

    def is_bucket(self, resource_id: ResourceId) -> bool:
        path = self._path_for(resource_id)
        return path is not None and self._is_dir(path)

    def is_object(self, resource_id: ResourceId) -> bool:
        path = self._path_for(resource_id)
        return path is not None and self._is_file(path)

    def is_local(self) -> bool:
        return True

