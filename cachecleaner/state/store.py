"""
File-backed key/value state shared between CI steps.

Each CI step runs in its own process, so values needed by a later step (for
example the build executable chosen in the main step and reused in the post
step) are written to ``state.json`` in the staging directory. Every mutation
re-reads the file under a lock and replaces it atomically; nothing is cached in
memory between calls.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from cachecleaner.constants import STATE_FILE_NAME
from cachecleaner.exceptions import ConfigurationError
from cachecleaner.io import atomic_write_json, file_lock, read_json

logger = logging.getLogger(__name__)


class StateStore:
    """
    A persisted mapping of string keys to JSON values.

    Args:
        staging_dir: Directory holding the state file

    Example:
        >>> StateStore(staging).set("executable", {"kind": "wrapper", "path": "/w/gradlew"})
        >>> StateStore(staging).get("executable")["kind"]
        'wrapper'
    """

    def __init__(self, staging_dir: Path):
        self.staging_dir = Path(staging_dir)
        self.path = self.staging_dir / STATE_FILE_NAME

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = read_json(self.path)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring state file {self.path}: not a mapping")
            return {}
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        atomic_write_json(self.path, data)

    def _update(self, mutate) -> None:
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            with file_lock(self.path):
                data = self._read()
                mutate(data)
                self._write(data)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot write state to staging directory {self.staging_dir}: {e}"
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value saved under ``key``, or ``default``."""
        if not self.path.exists():
            return default
        with file_lock(self.path):
            return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Save ``value`` under ``key``.

        Raises:
            ConfigurationError: If the staging directory cannot be written
        """

        def _set(data):
            data[key] = value

        self._update(_set)
        logger.debug(f"Saved state {key}")

    def delete(self, key: str) -> None:
        """Forget ``key``; a missing key is not an error."""
        if not self.path.exists():
            return

        def _delete(data):
            data.pop(key, None)

        self._update(_delete)

    def clear(self) -> None:
        """Forget every saved value."""
        if not self.staging_dir.is_dir():
            return
        with file_lock(self.path):
            self.path.unlink(missing_ok=True)
