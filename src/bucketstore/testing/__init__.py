"""bucketstore testing utilities."""

from bucketstore.testing.recording import BackendCall, RecordingBackend

__all__ = ["BackendCall", "RecordingBackend"]
