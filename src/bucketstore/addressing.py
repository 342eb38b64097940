"""Resource addressing: resolve names against a root and check confinement.

Resource identifiers are POSIX-style paths regardless of host platform.
Names are always normalized before the confinement check so that traversal
sequences cannot slip past a prefix comparison.
"""

from __future__ import annotations

import posixpath

from bucketstore.models import ResourceId


def normalize_root(root: str) -> ResourceId:
    """Return the canonical form of a store root."""
    return posixpath.normpath(root)


def resolve(root: ResourceId, name: str) -> ResourceId:
    """Resolve a name relative to root.

    An empty name denotes the root itself. An absolute name replaces the root
    and is left for is_confined to reject.
    """
    if not name:
        return root
    return posixpath.normpath(posixpath.join(root, name))


def is_confined(root: ResourceId, candidate: ResourceId) -> bool:
    """Return True if candidate lies at or below root.

    Both arguments must already be normalized. The prefix must end on a path
    segment boundary, so "/database" is not inside "/data".
    """
    if root == ".":
        return not (
            candidate == ".." or candidate.startswith("../") or candidate.startswith("/")
        )
    n = len(root)
    if len(candidate) < n or candidate[:n] != root:
        return False
    if len(candidate) == n or root.endswith("/"):
        return True
    return candidate[n] == "/"


def parent_of(resource_id: ResourceId) -> ResourceId:
    """Return the identifier of the bucket containing resource_id."""
    parent = posixpath.dirname(resource_id)
    return parent or "."