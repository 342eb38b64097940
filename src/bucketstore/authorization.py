"""Client identity and permission grants for bucket stores.

A ClientIdentity carries the identity token of a store's client plus three
permission maps keyed by:
- resource id (exact string match)
- identifier pattern (compiled regex, searched against the resource id)
- resource type (a Bucket/Object handle class declared by a backend)

Lookup for a concrete resource is deny-by-default and goes id, then pattern,
then type. Expired grants deny.

All access to the maps goes through the identity's lock, so one identity may
be shared by stores used from several threads.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bucketstore.models import Resource

logger = logging.getLogger(__name__)

PermissionKey = str | re.Pattern[str] | type


class Action(StrEnum):
    """Actions a permission can grant."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class Permission:
    """A grant of actions on a resource.

    Attributes:
        create: Resource may be created.
        read: Resource may be read.
        update: Resource may be overwritten.
        delete: Resource may be deleted.
        expiry: Instant after which the grant no longer applies (None = never).
    """

    create: bool = False
    read: bool = False
    update: bool = False
    delete: bool = False
    expiry: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expiry is None:
            return False
        return (now or datetime.now(UTC)) >= self.expiry

    def allows(self, action: Action | str, now: datetime | None = None) -> bool:
        """Return True if this grant covers action and has not expired."""
        if self.is_expired(now):
            return False
        return bool(getattr(self, Action(action).value))


def permissions_conflict(first: Permission, second: Permission) -> bool:
    """Return True if the two grants disagree on any action."""
    return any(getattr(first, a.value) != getattr(second, a.value) for a in Action)


class ClientIdentity:
    """Identity token and permission state of a store client."""

    def __init__(
        self,
        client_id: str,
        id_permissions: dict[str, Permission] | None = None,
        pattern_permissions: dict[re.Pattern[str], Permission] | None = None,
        type_permissions: dict[type, Permission] | None = None,
    ) -> None:
        self.client_id = client_id
        self.id_permissions: dict[str, Permission] = (
            id_permissions if id_permissions is not None else {}
        )
        self.pattern_permissions: dict[re.Pattern[str], Permission] = (
            pattern_permissions if pattern_permissions is not None else {}
        )
        self.type_permissions: dict[type, Permission] = (
            type_permissions if type_permissions is not None else {}
        )
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"ClientIdentity(client_id={self.client_id!r})"

    def _map_for(self, key: PermissionKey) -> dict:
        if isinstance(key, str):
            return self.id_permissions
        if isinstance(key, re.Pattern):
            return self.pattern_permissions
        if isinstance(key, type):
            return self.type_permissions
        raise TypeError(f"Unsupported permission key: {key!r}")

    def set_permission(self, key: PermissionKey, permission: Permission) -> None:
        """Grant permission for a resource id, identifier pattern or resource type."""
        with self._lock:
            self._map_for(key)[key] = permission
        logger.debug("Permission set: client=%s key=%r", self.client_id, key)

    def get_permission(self, key: PermissionKey) -> Permission | None:
        """Return the grant stored at exactly this key, if any."""
        with self._lock:
            return self._map_for(key).get(key)

    def set_expiry(self, key: PermissionKey, expiry: datetime | None) -> bool:
        """Change the expiry of the grant stored at key.

        Returns:
            False if no grant is stored at key.
        """
        with self._lock:
            permissions = self._map_for(key)
            current = permissions.get(key)
            if current is None:
                return False
            permissions[key] = replace(current, expiry=expiry)
        return True

    def effective_permission(self, resource: Resource) -> Permission | None:
        """Return the grant that applies to resource, or None."""
        resource_id = resource.resource_id
        with self._lock:
            permission = self.id_permissions.get(resource_id)
            if permission is not None:
                return permission
            for pattern, candidate in self.pattern_permissions.items():
                if pattern.search(resource_id):
                    return candidate
            for cls in type(resource).__mro__:
                candidate = self.type_permissions.get(cls)
                if candidate is not None:
                    return candidate
        return None

    def has_permission(
        self,
        resource: Resource,
        action: Action | str,
        now: datetime | None = None,
    ) -> bool:
        """Return True if the client may perform action on resource."""
        permission = self.effective_permission(resource)
        if permission is None:
            return False
        return permission.allows(action, now)
