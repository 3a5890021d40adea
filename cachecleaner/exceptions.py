"""
Exception classes for the cache cleaner.
"""

from pathlib import Path
from typing import Optional


class CacheCleanerError(Exception):
    """Base exception for all cache cleaner errors."""

    pass


class ConfigurationError(CacheCleanerError):
    """Raised when the cache home, staging directory or configuration is unusable.

    Fatal for the current phase.
    """

    pass


class ReadError(CacheCleanerError):
    """Raised when a usage marker is missing or cannot be parsed."""

    def __init__(self, marker: Path, message: str = ""):
        self.marker = marker
        if message:
            super().__init__(f"Cannot read usage marker {marker}: {message}")
        else:
            super().__init__(f"Cannot read usage marker {marker}")


class DeleteError(CacheCleanerError):
    """Raised when a single cache entry cannot be deleted."""

    def __init__(self, path: Path, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        if cause is not None:
            super().__init__(f"Failed to delete {path}: {cause}")
        else:
            super().__init__(f"Failed to delete {path}")
