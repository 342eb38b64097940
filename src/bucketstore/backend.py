"""Bucket store backend contract.

Provides the StorageBackend base class every storage medium must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from bucketstore.models import BackendResult, Bucket, Object, ResourceId


class StorageBackend(ABC):
    """Abstract base class for bucket/object storage media.

    A backend declares one concrete handle type per resource kind through
    the ``bucket_type`` and ``object_type`` class attributes. The store builds
    handles of these types and uses them as keys for type-level permissions.

    Create/read/delete methods never raise for expected failures; they report
    them through ``BackendResult.failure``. Probes answer for any identifier,
    whatever its kind.

    Implementations:
    - InMemoryBackend: process-local dict storage (tests, scratch work)
    - LocalDiskBackend: directories and files under a base directory
    """

    bucket_type: ClassVar[type[Bucket]] = Bucket
    object_type: ClassVar[type[Object]] = Object

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not (isinstance(cls.bucket_type, type) and issubclass(cls.bucket_type, Bucket)):
            raise TypeError(f"{cls.__name__}.bucket_type must be a subclass of Bucket")
        if not (isinstance(cls.object_type, type) and issubclass(cls.object_type, Object)):
            raise TypeError(f"{cls.__name__}.object_type must be a subclass of Object")

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier for observability (e.g. "memory")."""
        ...

    @abstractmethod
    def create_bucket(self, bucket: Bucket) -> BackendResult:
        """Create a bucket.

        Returns:
            Success, or failure carrying the reason the bucket was not created.
        """
        ...

    @abstractmethod
    def read_bucket(self, bucket: Bucket) -> BackendResult:
        """List a bucket.

        Returns:
            Success whose value describes the bucket contents, or failure.
        """
        ...

    @abstractmethod
    def delete_bucket(self, bucket: Bucket) -> BackendResult:
        """Delete a bucket."""
        ...

    @abstractmethod
    def create_object(self, obj: Object, value: Any) -> BackendResult:
        """Create or overwrite an object with value."""
        ...

    @abstractmethod
    def read_object(self, obj: Object) -> BackendResult:
        """Read an object.

        Returns:
            Success whose value is the stored value, or failure.
        """
        ...

    @abstractmethod
    def delete_object(self, obj: Object) -> BackendResult:
        """Delete an object."""
        ...

    @abstractmethod
    def is_bucket(self, resource_id: ResourceId) -> bool:
        """Return True if resource_id denotes an existing bucket."""
        ...

    @abstractmethod
    def is_object(self, resource_id: ResourceId) -> bool:
        """Return True if resource_id denotes an existing object."""
        ...

    @abstractmethod
    def is_local(self) -> bool:
        """Return True if the storage medium is on the same machine as the caller."""
        ...
