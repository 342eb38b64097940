"""bucketstore: root-confined bucket and object storage.

A BucketStore binds a client identity to a root bucket on a pluggable
storage backend. Names are resolved against the root and rejected if they
normalize outside it, before the backend is reached.

Backends:
- InMemoryBackend: process-local storage (tests, scratch work)
- LocalDiskBackend: directories and files under a base directory

Environment Variables:
    BUCKETSTORE_BACKEND: "memory" or "filesystem" (default: "filesystem")
    BUCKETSTORE_BASE_DIR: Base directory for the filesystem backend
    BUCKETSTORE_ROOT: Root bucket (default: "/")
    BUCKETSTORE_CLIENT_ID: Client identity (default: "anonymous")
"""

from bucketstore.authorization import Action, ClientIdentity, Permission, permissions_conflict
from bucketstore.backend import StorageBackend
from bucketstore.backends import InMemoryBackend, LocalDiskBackend
from bucketstore.errors import (
    BackendFailureError,
    BucketStoreError,
    ConfinementViolationError,
    PermissionDeniedError,
    StoreConstructionError,
    StructuralConflictError,
    UnknownResourceKindError,
)
from bucketstore.models import BackendResult, Bucket, Object, ResourceKind
from bucketstore.store import BucketStore

__all__ = [
    "Action",
    "BackendFailureError",
    "BackendResult",
    "Bucket",
    "BucketStore",
    "BucketStoreError",
    "ClientIdentity",
    "ConfinementViolationError",
    "InMemoryBackend",
    "LocalDiskBackend",
    "Object",
    "Permission",
    "PermissionDeniedError",
    "ResourceKind",
    "StorageBackend",
    "StoreConstructionError",
    "StructuralConflictError",
    "UnknownResourceKindError",
    "permissions_conflict",
]
