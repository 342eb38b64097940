"""Pytest configuration and fixtures for bucketstore tests.

This module provides common fixtures and configuration for all tests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from bucketstore.store import BucketStore
from bucketstore.testing import RecordingBackend

BUCKETSTORE_ENV_VARS = (
    "BUCKETSTORE_BACKEND",
    "BUCKETSTORE_BASE_DIR",
    "BUCKETSTORE_ROOT",
    "BUCKETSTORE_CLIENT_ID",
    "BUCKETSTORE_LOG_LEVEL",
    "BUCKETSTORE_OTEL_ENABLED",
    "BUCKETSTORE_OTEL_TEST_CAPTURE",
    "BUCKETSTORE_OTEL_EXPORTER",
    "BUCKETSTORE_OTEL_EXPORTER_OTLP_ENDPOINT",
    "BUCKETSTORE_OTEL_SERVICE_NAME",
    "BUCKETSTORE_REQUIRE_OTEL",
)


@pytest.fixture(autouse=True)
def clean_bucketstore_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure no BUCKETSTORE_* setting leaks in from the host environment."""
    for var in BUCKETSTORE_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def backend() -> RecordingBackend:
    """Return a fresh call-recording in-memory backend."""
    return RecordingBackend()


@pytest.fixture
def store(backend: RecordingBackend) -> BucketStore:
    """Return a store rooted at /data with recorded calls reset after construction."""
    store = BucketStore("client-1", "/data", backend)
    backend.reset_calls()
    return store


@pytest.fixture
def temp_storage_dir(tmp_path: Path) -> Path:
    """Return a per-test directory for the filesystem backend."""
    storage_dir = tmp_path / "bucketstore_test_storage"
    storage_dir.mkdir()
    return storage_dir


@pytest.fixture
def bucketstore_warnings(caplog: pytest.LogCaptureFixture) -> Callable[[], list[str]]:
    """Capture WARNING records from bucketstore loggers.

    Returns a callable giving the messages captured so far.
    """
    caplog.set_level(logging.WARNING, logger="bucketstore")

    def messages() -> list[str]:
        return [
            r.getMessage()
            for r in caplog.records
            if r.levelno == logging.WARNING and r.name.startswith("bucketstore")
        ]

    return messages
