"""Reference storage backends.

Backends:
- InMemoryBackend: process-local storage (tests, scratch work)
- LocalDiskBackend: directories and files under a base directory
"""

from bucketstore.backends.filesystem import LocalDiskBackend
from bucketstore.backends.memory import InMemoryBackend

__all__ = ["InMemoryBackend", "LocalDiskBackend"]
