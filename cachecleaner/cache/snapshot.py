"""
Snapshot of cache usage signals, persisted between process invocations.

The snapshot is taken before the build runs and read back by a later, unrelated
process after the build. It is stored as JSON in the staging directory:

    {
      "format": 1,
      "cache_home": "/home/runner/.gradle",
      "created_at": "2024-05-01T10:00:00+00:00",
      "entries": {
        "caches/7.5.1": {"kind": "version", "signal": 1714557600000000000},
        ...
      }
    }
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from cachecleaner.cache.discovery import CacheRoot, discover_roots
from cachecleaner.cache.markers import usage_signal
from cachecleaner.constants import (
    DEFAULT_MARKER_FILE_NAME,
    SNAPSHOT_FILE_NAME,
    SNAPSHOT_FORMAT_VERSION,
    CacheKind,
)
from cachecleaner.exceptions import ConfigurationError
from cachecleaner.io import atomic_write_json, file_lock, read_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotEntry:
    kind: CacheKind
    signal: int


@dataclass(frozen=True)
class Snapshot:
    """Immutable mapping from root identity to the usage signal seen at capture time."""

    cache_home: str
    created_at: str
    entries: Mapping[str, SnapshotEntry] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __contains__(self, identity: str) -> bool:
        return identity in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, identity: str) -> Optional[SnapshotEntry]:
        return self.entries.get(identity)

    @classmethod
    def from_roots(cls, cache_home: Path, roots: Iterable[CacheRoot]) -> "Snapshot":
        """
        Record the current usage signal of every root.

        A root that cannot be inspected is logged and left out of the snapshot,
        which makes it "new" (and therefore retained) for the next sweep.
        """
        entries = {}
        for root in roots:
            try:
                entries[root.identity] = SnapshotEntry(root.kind, usage_signal(root))
            except OSError as e:
                logger.warning(f"Cannot read usage of {root.identity}, skipping: {e}")
        return cls(
            cache_home=str(cache_home),
            created_at=datetime.now(timezone.utc).isoformat(),
            entries=entries,
        )

    @classmethod
    def capture(
        cls, cache_home: Path, marker_file_name: str = DEFAULT_MARKER_FILE_NAME
    ) -> "Snapshot":
        return cls.from_roots(cache_home, discover_roots(cache_home, marker_file_name))

    def to_dict(self) -> dict:
        return {
            "format": SNAPSHOT_FORMAT_VERSION,
            "cache_home": self.cache_home,
            "created_at": self.created_at,
            "entries": {
                identity: {"kind": entry.kind.value, "signal": entry.signal}
                for identity, entry in self.entries.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        """
        Rebuild a snapshot from its serialised form.

        Raises:
            ValueError: If the payload is not a snapshot of a known format
        """
        if not isinstance(data, dict) or data.get("format") != SNAPSHOT_FORMAT_VERSION:
            raise ValueError("unsupported snapshot format")
        try:
            entries = {
                identity: SnapshotEntry(CacheKind(item["kind"]), int(item["signal"]))
                for identity, item in data["entries"].items()
            }
            return cls(
                cache_home=str(data["cache_home"]),
                created_at=str(data["created_at"]),
                entries=entries,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"malformed snapshot: {e}") from e


class SnapshotStore:
    """
    Persists a single Snapshot inside the staging directory.

    Writes go to a temporary file that is atomically renamed into place, so a
    reader sees either a complete snapshot or none at all.
    """

    def __init__(self, staging_dir: Path):
        self.staging_dir = Path(staging_dir)
        self.path = self.staging_dir / SNAPSHOT_FILE_NAME

    def save(self, snapshot: Snapshot) -> None:
        """
        Persist ``snapshot``, replacing any previous one.

        Raises:
            ConfigurationError: If the staging directory cannot be created or written
        """
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            with file_lock(self.path):
                atomic_write_json(self.path, snapshot.to_dict())
        except OSError as e:
            raise ConfigurationError(
                f"Cannot write snapshot to staging directory {self.staging_dir}: {e}"
            ) from e
        logger.debug(f"Saved snapshot of {len(snapshot)} cache roots to {self.path}")

    def load(self) -> Optional[Snapshot]:
        """
        Load the persisted snapshot.

        Returns:
            The snapshot, or None when there is none or it cannot be read
        """
        if not self.path.exists():
            return None
        try:
            with file_lock(self.path):
                return Snapshot.from_dict(read_json(self.path))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable snapshot {self.path}: {e}")
            return None

    def discard(self) -> None:
        """Remove the persisted snapshot, if any."""
        if not self.staging_dir.is_dir():
            return
        with file_lock(self.path):
            self.path.unlink(missing_ok=True)
        logger.debug(f"Discarded snapshot {self.path}")
