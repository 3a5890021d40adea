"""
Garbage collection of the Gradle User Home between CI runs.

Components, leaves first:
    markers    - usage signals and marker parsing
    discovery  - enumeration of cache roots
    snapshot   - persisted usage snapshot
    sweeper    - deletion pass
    cleaner    - prepare / force_cleanup orchestration
"""

from .cleaner import CacheCleaner
from .discovery import CacheRoot, discover_roots
from .markers import read_marker, usage_signal
from .snapshot import Snapshot, SnapshotStore
from .sweeper import Sweeper, SweepResult

__all__ = [
    "CacheCleaner",
    "CacheRoot",
    "Snapshot",
    "SnapshotStore",
    "SweepResult",
    "Sweeper",
    "discover_roots",
    "read_marker",
    "usage_signal",
]
