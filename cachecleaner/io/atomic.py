"""Atomic JSON persistence for files shared between process invocations."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from filelock import FileLock


def file_lock(path: Path) -> FileLock:
    """
    Return the inter-process lock guarding ``path``.

    The lock file sits next to the guarded file as ``<name>.lock``.
    """
    return FileLock(str(path.with_name(path.name + ".lock")))


def atomic_write_json(path: Path, payload: Any) -> None:
    """
    Write ``payload`` as JSON to ``path`` atomically.

    The data is written to a temporary file in the same directory, flushed and
    synced, then moved over ``path`` with :func:`os.replace`. Readers see
    either the previous content or the complete new content, never a partial
    write.

    Args:
        path: Destination file
        payload: JSON-serialisable object

    Raises:
        OSError: If the directory cannot be written
    """
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, sort_keys=True)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def read_json(path: Path) -> Any:
    """Load JSON from ``path``; raises OSError or ValueError on failure."""
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)
