"""
Usage signals for cache roots.

A usage signal is an integer timestamp in nanoseconds. It only ever moves
forward when the build tool touches a root, so comparing a current signal with
one recorded earlier tells whether the root was used in between.
"""

import logging
import os
from pathlib import Path

from cachecleaner.cache.discovery import CacheRoot
from cachecleaner.constants import MARKER_KEYS, NEVER_USED, CacheKind
from cachecleaner.exceptions import ReadError

logger = logging.getLogger(__name__)


def to_nanoseconds(value: float) -> int:
    """
    Normalise an epoch timestamp to nanoseconds, guessing its unit by magnitude.

    Seconds, milliseconds, microseconds and nanoseconds are accepted.
    """
    magnitude = abs(value)
    if magnitude < 1e11:
        return int(value * 1_000_000_000)
    if magnitude < 1e14:
        return int(value * 1_000_000)
    if magnitude < 1e17:
        return int(value * 1_000)
    return int(value)


def parse_marker(marker: Path, text: str) -> int:
    """
    Parse the content of a usage marker.

    Either a properties file carrying one of ``MARKER_KEYS``, or a single
    number as the whole content.

    Raises:
        ReadError: If no timestamp can be found
    """
    stripped = text.strip()
    if not stripped:
        raise ReadError(marker, "marker is empty")

    raw = None
    for line in stripped.splitlines():
        line = line.strip()
        if not line or line.startswith(("#", "!")):
            continue
        for separator in ("=", ":"):
            if separator in line:
                key, value = line.split(separator, 1)
                if key.strip() in MARKER_KEYS:
                    raw = value.strip()
                break

    if raw is None:
        raw = stripped

    try:
        value = float(raw)
    except ValueError:
        raise ReadError(marker, f"no timestamp in {raw[:40]!r}")

    if value < 0:
        raise ReadError(marker, f"negative timestamp {raw}")
    return to_nanoseconds(value)


def read_marker(root: CacheRoot) -> int:
    """
    Read the timestamp recorded in the usage marker of ``root``.

    Never raises: a missing or corrupt marker means "never used" and is
    returned as ``NEVER_USED``.

    Args:
        root: Cache root; roots without a marker always return NEVER_USED

    Returns:
        Marker timestamp in nanoseconds
    """
    if root.marker is None:
        return NEVER_USED

    try:
        try:
            text = root.marker.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(root.marker, str(e))
        return parse_marker(root.marker, text)
    except ReadError as e:
        logger.warning(f"{e}; treating {root.identity} as never used")
        return NEVER_USED


def mtime_ns(path: Path) -> int:
    """Own modification time of ``path`` (not following symlinks), or NEVER_USED."""
    try:
        return os.lstat(path).st_mtime_ns
    except OSError:
        return NEVER_USED


def newest_mtime_ns(path: Path) -> int:
    """
    Newest modification time of ``path`` and everything below it.

    Unreadable subdirectories are logged and contribute nothing.
    """
    newest = mtime_ns(path)
    if not path.is_dir() or path.is_symlink():
        return newest

    def _on_error(error: OSError):
        logger.warning(f"Cannot scan {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(path, onerror=_on_error):
        for name in dirnames + filenames:
            newest = max(newest, mtime_ns(Path(dirpath) / name))
    return newest


def usage_signal(root: CacheRoot) -> int:
    """
    Current usage signal of ``root``.

    - module roots: newest mtime in the version directory tree
    - build-cache roots: the blob's own mtime
    - version roots: newest of marker timestamp, marker mtime and directory mtime
    - wrapper roots: the distribution directory's own mtime
    """
    if root.kind == CacheKind.MODULE:
        return newest_mtime_ns(root.path)
    if root.kind == CacheKind.VERSION:
        signal = max(read_marker(root), mtime_ns(root.path))
        if root.marker is not None:
            signal = max(signal, mtime_ns(root.marker))
        return signal
    return mtime_ns(root.path)
