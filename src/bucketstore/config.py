"""bucketstore configuration.

Settings come from environment variables and are validated by a frozen
Pydantic model. Invalid configuration fails closed with ConfigError.

Environment Variables:
    BUCKETSTORE_BACKEND: "memory" or "filesystem" (default: "filesystem")
    BUCKETSTORE_BASE_DIR: Base directory for the filesystem backend
        (default: OS temp dir / bucketstore_objects)
    BUCKETSTORE_ROOT: Root bucket of the store (default: "/")
    BUCKETSTORE_CLIENT_ID: Identity of the store client (default: "anonymous")
    BUCKETSTORE_LOG_LEVEL: Logging level name for the CLI (default: "WARNING")
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from bucketstore.backends.filesystem import BUCKETSTORE_BASE_DIR_ENV, LocalDiskBackend
from bucketstore.backends.memory import InMemoryBackend
from bucketstore.store import BucketStore

if TYPE_CHECKING:
    from bucketstore.backend import StorageBackend

logger = logging.getLogger(__name__)

BUCKETSTORE_BACKEND_ENV = "BUCKETSTORE_BACKEND"
BUCKETSTORE_ROOT_ENV = "BUCKETSTORE_ROOT"
BUCKETSTORE_CLIENT_ID_ENV = "BUCKETSTORE_CLIENT_ID"
BUCKETSTORE_LOG_LEVEL_ENV = "BUCKETSTORE_LOG_LEVEL"

BackendName = Literal["memory", "filesystem"]

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when bucketstore configuration is invalid (fail-closed behavior)."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class StoreSettings(BaseModel):
    """Validated settings for opening a BucketStore."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    backend: BackendName = Field(default="filesystem")
    base_dir: str | None = Field(default=None, description="Filesystem backend base directory")
    root: str = Field(default="/", min_length=1)
    client_id: str = Field(default="anonymous", min_length=1, max_length=200)
    log_level: str = Field(default="WARNING")

    @field_validator("root", "client_id")
    @classmethod
    def no_blank_strings(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Field cannot be empty or whitespace-only")
        return v

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v!r}")
        return level

    @classmethod
    def from_env(cls, **overrides: str | None) -> StoreSettings:
        """Build settings from BUCKETSTORE_* variables.

        Keyword overrides that are not None take precedence over the environment.

        Raises:
            ConfigError: If any value fails validation.
        """
        raw: dict[str, str] = {}
        env_map = {
            "backend": BUCKETSTORE_BACKEND_ENV,
            "base_dir": BUCKETSTORE_BASE_DIR_ENV,
            "root": BUCKETSTORE_ROOT_ENV,
            "client_id": BUCKETSTORE_CLIENT_ID_ENV,
            "log_level": BUCKETSTORE_LOG_LEVEL_ENV,
        }
        for field, env_var in env_map.items():
            value = os.environ.get(env_var, "").strip()
            if value:
                raw[field] = value
        raw.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
            raise ConfigError("Invalid bucketstore configuration", errors=errors) from e


def create_backend(settings: StoreSettings) -> StorageBackend:
    """Instantiate the backend named by settings."""
    if settings.backend == "memory":
        return InMemoryBackend()
    if settings.backend == "filesystem":
        return LocalDiskBackend(base_dir=settings.base_dir)
    raise ConfigError(f"Unknown backend: {settings.backend!r}")


def open_store(settings: StoreSettings | None = None) -> BucketStore:
    """Open a BucketStore from settings (default: from the environment).

    Raises:
        ConfigError: If settings cannot be loaded.
        StoreConstructionError: If the root already exists as an object.
    """
    if settings is None:
        settings = StoreSettings.from_env()
    backend = create_backend(settings)
    logger.debug(
        "Opening store: backend=%s root=%s client=%s",
        backend.backend_name,
        settings.root,
        settings.client_id,
    )
    return BucketStore(settings.client_id, settings.root, backend)
