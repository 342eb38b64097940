"""BucketStore: root-confined access to a pluggable bucket/object backend.

Every facade call resolves its name against the store root, rejects names
that normalize outside the root before touching the backend, and maps the
backend result onto one of two calling conventions:

- Mutations (create_bucket, delete_bucket, set_object, delete_object) return
  None on success and an error message otherwise.
- Reads (list_contents, get_object) return the value on success; on any
  failure they log a warning and return None, indistinguishable from
  "not found".

Permission calls bypass addressing and go to the client identity. A store
built with enforce_permissions=True also checks the client's grant before
each backend call; a denial is reported like any other failure.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from bucketstore.addressing import is_confined, normalize_root, parent_of, resolve
from bucketstore.authorization import Action, ClientIdentity, Permission
from bucketstore.errors import (
    BackendFailureError,
    BucketStoreError,
    ConfinementViolationError,
    PermissionDeniedError,
    StoreConstructionError,
    StructuralConflictError,
    UnknownResourceKindError,
)
from bucketstore.models import BackendResult, Resource, ResourceId, ResourceKind
from bucketstore.tracing import traced_store_operation

if TYPE_CHECKING:
    from bucketstore.backend import StorageBackend

logger = logging.getLogger(__name__)


def _unwrap(result: BackendResult, resource_id: ResourceId) -> Any:
    if not result.ok:
        raise BackendFailureError(
            result.error or f"Backend operation failed on {resource_id}",
            resource_id=resource_id,
        )
    return result.value


class BucketStore:
    """A client's view of a backend, confined to one root bucket.

    Attributes:
        root: Normalized identifier of the root bucket.
        backend: The storage medium operations are dispatched to.
        client: Identity and permission state of the client owning the store.
        enforce_permissions: Whether facade calls require a matching grant.
    """

    def __init__(
        self,
        client_id: str,
        root: str,
        backend: StorageBackend,
        id_permissions: dict[str, Permission] | None = None,
        pattern_permissions: dict[re.Pattern[str], Permission] | None = None,
        type_permissions: dict[type, Permission] | None = None,
        *,
        enforce_permissions: bool = False,
    ) -> None:
        """Bind a client to a root bucket on backend.

        Creates the root bucket if it does not exist yet. A failure to create
        it is logged and the store is still returned. Provisioning the root
        is not subject to permission checks.

        Raises:
            StoreConstructionError: If root is empty or already denotes an object.
        """
        if not root:
            raise StoreConstructionError("Root must be a non-empty resource identifier.")
        root = normalize_root(root)
        if backend.is_object(root):
            raise StoreConstructionError(
                "Root already exists as an object. Cannot use it as a bucket.",
                resource_id=root,
            )

        self.root: ResourceId = root
        self.backend = backend
        self.client = ClientIdentity(
            client_id, id_permissions, pattern_permissions, type_permissions
        )

        self.enforce_permissions = enforce_permissions

        if not backend.is_bucket(root):
            result = backend.create_bucket(backend.bucket_type(root))
            if not result.ok:
                logger.warning(result.error or f"Failed to create root bucket {root}")

    def __repr__(self) -> str:
        return (
            f"BucketStore(client_id={self.client_id!r}, root={self.root!r}, "
            f"backend={self.backend.backend_name!r})"
        )

    @property
    def client_id(self) -> str:
        return self.client.client_id

    def _locate(self, name: str, violation: str) -> ResourceId:
        """Resolve name against the root, raising if it escapes the root."""
        resource_id = resolve(self.root, name)
        if not is_confined(self.root, resource_id):
            raise ConfinementViolationError(violation, resource_id=resource_id)
        return resource_id

    def _authorize(self, resource: Resource, action: Action) -> None:
        if not self.enforce_permissions:
            return
        if not self.client.has_permission(resource, action):
            raise PermissionDeniedError(
                f"Client {self.client_id} is not permitted to {action} {resource.resource_id}",
                resource_id=resource.resource_id,
                action=action,
            )

    # Buckets

    @traced_store_operation("create_bucket")
    def create_bucket(self, name: str = "") -> str | None:
        """Create a bucket. An empty name denotes the root bucket.

        Returns:
            None on success, else an error message.
        """
        try:
            resource_id = self._locate(name, "Cannot create a bucket outside the root bucket")
            bucket = self.backend.bucket_type(resource_id)
            self._authorize(bucket, Action.CREATE)
            _unwrap(self.backend.create_bucket(bucket), resource_id)
        except BucketStoreError as e:
            return e.message
        logger.debug("Bucket created: client=%s id=%s", self.client_id, resource_id)
        return None

    @traced_store_operation("list_contents")
    def list_contents(self, name: str = "") -> Any | None:
        """List the contents of a bucket. An empty name denotes the root bucket.

        Returns:
            The backend's listing, or None (with a warning) on any failure.
        """
        try:
            resource_id = self._locate(name, "Cannot read a bucket outside the root bucket")
            bucket = self.backend.bucket_type(resource_id)
            self._authorize(bucket, Action.READ)
            return _unwrap(self.backend.read_bucket(bucket), resource_id)
        except BucketStoreError as e:
            logger.warning(e.message)
            return None

    @traced_store_operation("delete_bucket")
    def delete_bucket(self, name: str) -> str | None:
        """Delete a bucket.

        Returns:
            None on success, else an error message.
        """
        try:
            resource_id = self._locate(name, "Cannot delete a bucket outside the root bucket")
            bucket = self.backend.bucket_type(resource_id)
            self._authorize(bucket, Action.DELETE)
            _unwrap(self.backend.delete_bucket(bucket), resource_id)
        except BucketStoreError as e:
            return e.message
        logger.debug("Bucket deleted: client=%s id=%s", self.client_id, resource_id)
        return None

    # Objects

    def _check_object_target(self, name: str, resource_id: ResourceId) -> None:
        if self.backend.is_bucket(resource_id):
            raise StructuralConflictError(
                f"{name} is a bucket, not an object", resource_id=resource_id
            )
        if not self.backend.is_bucket(parent_of(resource_id)):
            raise StructuralConflictError(
                f"Cannot create object {name} inside a non-existent bucket.",
                resource_id=resource_id,
            )

    @traced_store_operation("set_object")
    def set_object(self, name: str, value: Any) -> str | None:
        """Create or update an object.

        The parent bucket must already exist, and name must not denote a bucket.

        Returns:
            None on success, else an error message.
        """
        try:
            resource_id = self._locate(
                name, "Cannot create/update an object outside the root bucket"
            )
            self._check_object_target(name, resource_id)
            obj = self.backend.object_type(resource_id)
            if self.enforce_permissions:
                exists = self.backend.is_object(resource_id)
                self._authorize(obj, Action.UPDATE if exists else Action.CREATE)
            _unwrap(self.backend.create_object(obj, value), resource_id)
        except BucketStoreError as e:
            return e.message
        logger.debug("Object stored: client=%s id=%s", self.client_id, resource_id)
        return None

    @traced_store_operation("get_object")
    def get_object(self, name: str) -> Any | None:
        """Read an object.

        Returns:
            The stored value, or None (with a warning) on any failure.
        """
        try:
            resource_id = self._locate(name, "Cannot read an object outside the root bucket")
            obj = self.backend.object_type(resource_id)
            self._authorize(obj, Action.READ)
            return _unwrap(self.backend.read_object(obj), resource_id)
        except BucketStoreError as e:
            logger.warning(e.message)
            return None

    @traced_store_operation("delete_object")
    def delete_object(self, name: str) -> str | None:
        """Delete an object.

        Returns:
            None on success, else an error message.
        """
        try:
            resource_id = self._locate(name, "Cannot delete an object outside the root bucket")
            obj = self.backend.object_type(resource_id)
            self._authorize(obj, Action.DELETE)
            _unwrap(self.backend.delete_object(obj), resource_id)
        except BucketStoreError as e:
            return e.message
        logger.debug("Object deleted: client=%s id=%s", self.client_id, resource_id)
        return None

    # Conveniences

    def is_local(self) -> bool:
        """Return True if the backend is on the same machine as this store."""
        return self.backend.is_local()

    @traced_store_operation("is_bucket")
    def is_bucket(self, name: str = "") -> bool:
        """Return True if name refers to a bucket."""
        try:
            resource_id = self._locate(
                name, "Cannot access buckets or objects outside the root bucket"
            )
        except ConfinementViolationError as e:
            logger.warning(e.message)
            return False
        return self.backend.is_bucket(resource_id)

    @traced_store_operation("is_object")
    def is_object(self, name: str) -> bool:
        """Return True if name refers to an object."""
        try:
            resource_id = self._locate(
                name, "Cannot access buckets or objects outside the root bucket"
            )
        except ConfinementViolationError as e:
            logger.warning(e.message)
            return False
        return self.backend.is_object(resource_id)

    # Permissions

    def _resource_type(self, kind: ResourceKind | str) -> type:
        try:
            resource_kind = ResourceKind(kind)
        except ValueError as e:
            raise UnknownResourceKindError(kind=kind) from e
        if resource_kind is ResourceKind.BUCKET:
            return self.backend.bucket_type
        return self.backend.object_type

    def set_permission(self, kind: ResourceKind | str, permission: Permission) -> None:
        """Grant permission on every bucket or every object of this store's backend.

        Args:
            kind: "bucket" or "object". Any other value is logged and ignored.
            permission: The grant to store against the backend's resource type.
        """
        try:
            resource_type = self._resource_type(kind)
        except UnknownResourceKindError as e:
            logger.warning(e.message)
            return
        self.client.set_permission(resource_type, permission)
