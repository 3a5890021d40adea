"""Deletion pass comparing current usage signals against a snapshot."""

import logging
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Set, Tuple

from cachecleaner.cache.discovery import CacheRoot, discover_roots
from cachecleaner.cache.markers import usage_signal
from cachecleaner.cache.snapshot import Snapshot
from cachecleaner.constants import DEFAULT_MARKER_FILE_NAME, CacheKind
from cachecleaner.exceptions import DeleteError

logger = logging.getLogger(__name__)


class Verdict(Enum):
    NEW = "new"
    USED = "used"
    STALE = "stale"


@dataclass
class SweepResult:
    """Outcome of a sweep: what was deleted, kept, and what could not be deleted."""

    deleted: List[CacheRoot] = field(default_factory=list)
    retained: List[CacheRoot] = field(default_factory=list)
    failed: List[Tuple[CacheRoot, DeleteError]] = field(default_factory=list)

    def summary(self) -> Dict[CacheKind, Dict[str, int]]:
        """Counts of deleted, retained and failed roots per cache kind."""
        counts = {kind: {"deleted": 0, "retained": 0, "failed": 0} for kind in CacheKind}
        for root in self.deleted:
            counts[root.kind]["deleted"] += 1
        for root in self.retained:
            counts[root.kind]["retained"] += 1
        for root, _ in self.failed:
            counts[root.kind]["failed"] += 1
        return counts


def delete_entry(path: Path) -> None:
    """
    Recursively delete a file or directory.

    Raises:
        DeleteError: If anything prevents the deletion
    """
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise DeleteError(path, e) from e


def prune_empty_parents(path: Path, stop: Path) -> None:
    """Remove now-empty parent directories of ``path`` up to (excluding) ``stop``."""
    parent = path.parent
    while parent != stop and stop in parent.parents:
        try:
            parent.rmdir()
        except OSError:
            return
        logger.debug(f"Removed empty directory {parent}")
        parent = parent.parent


class Sweeper:
    """
    Deletes cache roots that were not used since a snapshot was taken.

    Version caches are decided before wrapper distributions: a wrapper
    distribution is only removed together with the version cache it belongs to.
    """

    def __init__(
        self,
        cache_home: Path,
        snapshot: Snapshot,
        marker_file_name: str = DEFAULT_MARKER_FILE_NAME,
    ):
        self.cache_home = Path(cache_home)
        self.snapshot = snapshot
        self.marker_file_name = marker_file_name

    def classify(self, root: CacheRoot) -> Verdict:
        """Compare the current signal of ``root`` with the recorded one."""
        recorded = self.snapshot.get(root.identity)
        if recorded is None:
            return Verdict.NEW
        if usage_signal(root) > recorded.signal:
            return Verdict.USED
        return Verdict.STALE

    def _delete(self, root: CacheRoot, result: SweepResult) -> bool:
        try:
            delete_entry(root.path)
        except DeleteError as e:
            logger.warning(f"Could not delete {root.kind.value} {root.identity}: {e.cause}")
            result.failed.append((root, e))
            return False

        logger.info(f"Deleted unused {root.kind.value} {root.identity}")
        result.deleted.append(root)
        if root.kind == CacheKind.MODULE:
            # {files-*}/{group}/{artifact}/{version}
            prune_empty_parents(root.path, root.path.parents[2])
        return True

    def sweep(self) -> SweepResult:
        """
        Run the deletion pass over the current state of the cache home.

        Returns:
            SweepResult describing every root that was looked at
        """
        result = SweepResult()
        deleted_versions: Set[str] = set()
        wrappers: List[CacheRoot] = []

        for root in list(discover_roots(self.cache_home, self.marker_file_name)):
            if root.kind == CacheKind.WRAPPER_DIST:
                wrappers.append(root)
                continue

            try:
                verdict = self.classify(root)
            except OSError as e:
                logger.warning(f"Cannot read usage of {root.identity}, keeping it: {e}")
                result.retained.append(root)
                continue

            if verdict != Verdict.STALE:
                logger.debug(f"Keeping {verdict.value} {root.kind.value} {root.identity}")
                result.retained.append(root)
                continue

            if self._delete(root, result) and root.kind == CacheKind.VERSION:
                deleted_versions.add(root.version)

        for root in wrappers:
            if root.identity in self.snapshot and root.version in deleted_versions:
                self._delete(root, result)
            else:
                logger.debug(f"Keeping wrapper distribution {root.identity}")
                result.retained.append(root)

        return result
