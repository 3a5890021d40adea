"""
Two-phase garbage collection of a Gradle User Home.

Phase 1 (``prepare``) runs before the build and records a snapshot of usage
signals for every cache root. Phase 2 (``force_cleanup``) runs after the build,
in a different process, and deletes every root whose signal did not advance.

Usage:
    cleaner = CacheCleaner(Path("~/.gradle").expanduser(), Path("/tmp/staging"))
    cleaner.prepare()
    # ... run the build ...
    cleaner.force_cleanup()
"""

import logging
from pathlib import Path
from typing import Optional

from cachecleaner.cache.snapshot import Snapshot, SnapshotStore
from cachecleaner.cache.sweeper import Sweeper, SweepResult
from cachecleaner.config import CleanerConfig
from cachecleaner.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class CacheCleaner:
    """
    Removes cache entries that were not used by the build run between
    ``prepare()`` and ``force_cleanup()``.

    Args:
        cache_home: Gradle User Home
        staging_dir: Private directory where the snapshot is persisted
        config: Options; only ``marker_file_name`` is used here
    """

    def __init__(
        self,
        cache_home: Path,
        staging_dir: Path,
        config: Optional[CleanerConfig] = None,
    ):
        self.cache_home = Path(cache_home)
        self.staging_dir = Path(staging_dir)
        self.config = config or CleanerConfig(
            cache_home=self.cache_home, staging_dir=self.staging_dir
        )
        self.store = SnapshotStore(self.staging_dir)

    def _check_cache_home(self) -> None:
        if not self.cache_home.is_dir():
            raise ConfigurationError(f"Cache home {self.cache_home} does not exist")

    def prepare(self) -> Snapshot:
        """
        Record the usage signal of every cache root and persist it.

        Non-destructive; calling it again replaces the previous snapshot.

        Returns:
            The persisted snapshot

        Raises:
            ConfigurationError: If the cache home is missing or the staging
                directory cannot be written
        """
        self._check_cache_home()
        snapshot = Snapshot.capture(self.cache_home, self.config.marker_file_name)
        self.store.save(snapshot)
        logger.info(
            f"Recorded usage of {len(snapshot)} cache entries in {self.cache_home}"
        )
        return snapshot

    def force_cleanup(self) -> SweepResult:
        """
        Delete every cache root not used since ``prepare()``, then discard the snapshot.

        Without a snapshot this is a logged no-op. Failures to delete single
        entries are logged and reported in the result, never raised, and so is a
        snapshot that cannot be discarded afterwards.

        Returns:
            The outcome of the sweep

        Raises:
            ConfigurationError: If the cache home is missing
        """
        snapshot = self.store.load()
        if snapshot is None:
            logger.info(
                f"No cache snapshot found in {self.staging_dir}: nothing to clean up. "
                "Was prepare run before the build?"
            )
            return SweepResult()

        self._check_cache_home()
        if Path(snapshot.cache_home) != self.cache_home:
            logger.warning(
                f"Snapshot was taken for {snapshot.cache_home}, cleaning {self.cache_home}"
            )

        result = Sweeper(self.cache_home, snapshot, self.config.marker_file_name).sweep()
        try:
            self.store.discard()
        except OSError as e:
            logger.warning(f"Could not discard snapshot {self.store.path}: {e}")

        logger.info(
            f"Cache cleanup deleted {len(result.deleted)} entries, "
            f"kept {len(result.retained)}, failed on {len(result.failed)}"
        )
        return result
