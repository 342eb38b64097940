"""Tests for root confinement of every BucketStore facade operation.

A name that normalizes outside the root must be rejected before the backend
is reached: the recording backend must see zero calls.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from bucketstore.store import BucketStore
from bucketstore.testing import RecordingBackend

ESCAPING_NAMES = [
    "..",
    "../x",
    "../../etc/passwd",
    "reports/../../x",
    "/etc/passwd",
    "../database",
]

MUTATIONS: list[tuple[str, Callable[[BucketStore, str], Any], str]] = [
    (
        "create_bucket",
        lambda s, n: s.create_bucket(n),
        "Cannot create a bucket outside the root bucket",
    ),
    (
        "delete_bucket",
        lambda s, n: s.delete_bucket(n),
        "Cannot delete a bucket outside the root bucket",
    ),
    (
        "set_object",
        lambda s, n: s.set_object(n, b"payload"),
        "Cannot create/update an object outside the root bucket",
    ),
    (
        "delete_object",
        lambda s, n: s.delete_object(n),
        "Cannot delete an object outside the root bucket",
    ),
]

READS: list[tuple[str, Callable[[BucketStore, str], Any], str]] = [
    (
        "list_contents",
        lambda s, n: s.list_contents(n),
        "Cannot read a bucket outside the root bucket",
    ),
    (
        "get_object",
        lambda s, n: s.get_object(n),
        "Cannot read an object outside the root bucket",
    ),
]

PREDICATES: list[tuple[str, Callable[[BucketStore, str], Any]]] = [
    ("is_bucket", lambda s, n: s.is_bucket(n)),
    ("is_object", lambda s, n: s.is_object(n)),
]


@pytest.fixture
def populated_store(store: BucketStore, backend: RecordingBackend) -> BucketStore:
    """Store at /data whose backend also holds resources outside the root."""
    BucketStore("other", "/etc", backend)
    store.backend.create_object(backend.object_type("/etc/passwd"), b"root:x:0:0")
    BucketStore("other", "/database", backend)
    store.backend.create_object(backend.object_type("/database/x"), b"neighbour")
    backend.reset_calls()
    return store


class TestMutationsOutsideRoot:
    """Mutations return a confinement message and never call the backend."""

    @pytest.mark.parametrize("name", ESCAPING_NAMES)
    @pytest.mark.parametrize(("op_name", "op", "message"), MUTATIONS, ids=[m[0] for m in MUTATIONS])
    def test_rejected_without_backend_calls(
        self,
        populated_store: BucketStore,
        backend: RecordingBackend,
        op_name: str,
        op: Callable[[BucketStore, str], Any],
        message: str,
        name: str,
    ) -> None:
        assert op(populated_store, name) == message
        assert backend.calls == []


class TestReadsOutsideRoot:
    """Reads log exactly one warning, return None and never call the backend."""

    @pytest.mark.parametrize("name", ESCAPING_NAMES)
    @pytest.mark.parametrize(("op_name", "op", "message"), READS, ids=[r[0] for r in READS])
    def test_rejected_without_backend_calls(
        self,
        populated_store: BucketStore,
        backend: RecordingBackend,
        bucketstore_warnings: Callable[[], list[str]],
        op_name: str,
        op: Callable[[BucketStore, str], Any],
        message: str,
        name: str,
    ) -> None:
        assert op(populated_store, name) is None
        assert bucketstore_warnings() == [message]
        assert backend.calls == []

    def test_passwd_is_not_readable(
        self, populated_store: BucketStore, backend: RecordingBackend
    ) -> None:
        assert populated_store.get_object("../../etc/passwd") is None
        assert backend.calls_to("read_object") == []


class TestPredicatesOutsideRoot:
    """Predicates log a warning and answer False without calling the backend."""

    @pytest.mark.parametrize("name", ESCAPING_NAMES)
    @pytest.mark.parametrize(("op_name", "op"), PREDICATES, ids=[p[0] for p in PREDICATES])
    def test_rejected_without_backend_calls(
        self,
        populated_store: BucketStore,
        backend: RecordingBackend,
        bucketstore_warnings: Callable[[], list[str]],
        op_name: str,
        op: Callable[[BucketStore, str], Any],
        name: str,
    ) -> None:
        assert op(populated_store, name) is False
        assert bucketstore_warnings() == [
            "Cannot access buckets or objects outside the root bucket"
        ]
        assert backend.calls == []


class TestNamesInsideRoot:
    """Traversal that stays inside the root is allowed."""

    def test_inner_traversal_reaches_backend(
        self, store: BucketStore, backend: RecordingBackend
    ) -> None:
        store.create_bucket("a")
        backend.reset_calls()

        assert store.set_object("a/../b.txt", b"data") is None
        assert backend.calls_to("create_object")[0].resource_id == "/data/b.txt"

    def test_parent_of_root_bucket_name_round_trips(self, store: BucketStore) -> None:
        assert store.is_bucket("reports/..")
