"""
Discovery of cache roots inside a Gradle User Home.

Layout scanned (relative to the cache home):

    caches/
    ├── modules-2/
    │   └── files-2.1/{group}/{artifact}/{version}/   # MODULE root per version
    ├── build-cache-1/
    │   └── {hash}                                    # BUILD_CACHE root per blob
    └── {tool-version}/                               # VERSION root per install
        └── gc.properties                             # usage marker
    wrapper/
    └── dists/
        └── gradle-{tool-version}-bin/                # WRAPPER_DIST root

Discovery is lazy and never fails as a whole: an unreadable directory is logged
and skipped, a missing category simply yields nothing.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional

from packaging.version import InvalidVersion, Version

from cachecleaner.constants import (
    BUILD_CACHE_ENTRY_PATTERN,
    BUILD_CACHE_GLOB,
    CACHES_DIR,
    DEFAULT_MARKER_FILE_NAME,
    GRADLE_VERSION_PATTERN,
    MODULE_FILES_GLOB,
    MODULES_DIR,
    WRAPPER_DIST_PATTERN,
    WRAPPER_DISTS_DIR,
    CacheKind,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheRoot:
    """
    One deletable unit of the cache.

    Attributes:
        kind: Cache category
        path: Absolute path of the directory or file
        identity: POSIX path relative to the cache home, stable across processes
        marker: Usage marker file (version caches only)
        version: Tool version, linking wrapper distributions to version caches
    """

    kind: CacheKind
    path: Path
    identity: str
    marker: Optional[Path] = None
    version: Optional[str] = None


def version_sort_key(name: str):
    """Order tool versions numerically where possible, by name otherwise."""
    try:
        return (0, Version(name), name)
    except InvalidVersion:
        return (1, Version("0"), name)


def _list_children(directory: Path) -> List[Path]:
    try:
        return sorted(directory.iterdir())
    except FileNotFoundError:
        return []
    except OSError as e:
        logger.warning(f"Skipping unreadable cache directory {directory}: {e}")
        return []


def _list_dirs(directory: Path) -> List[Path]:
    return [child for child in _list_children(directory) if child.is_dir()]


def _identity(path: Path, cache_home: Path) -> str:
    return path.relative_to(cache_home).as_posix()


def discover_module_roots(cache_home: Path) -> Iterator[CacheRoot]:
    """Yield one root per {group}/{artifact}/{version} directory."""
    modules_dir = cache_home / CACHES_DIR / MODULES_DIR
    for files_dir in sorted(modules_dir.glob(MODULE_FILES_GLOB)):
        if not files_dir.is_dir():
            continue
        for group in _list_dirs(files_dir):
            for artifact in _list_dirs(group):
                for version in _list_dirs(artifact):
                    yield CacheRoot(
                        kind=CacheKind.MODULE,
                        path=version,
                        identity=_identity(version, cache_home),
                    )


def discover_build_cache_roots(cache_home: Path) -> Iterator[CacheRoot]:
    """Yield one root per stored build result; lock and gc files are not entries."""
    caches_dir = cache_home / CACHES_DIR
    for build_cache_dir in sorted(caches_dir.glob(BUILD_CACHE_GLOB)):
        if not build_cache_dir.is_dir():
            continue
        for entry in _list_children(build_cache_dir):
            if not BUILD_CACHE_ENTRY_PATTERN.match(entry.name):
                continue
            yield CacheRoot(
                kind=CacheKind.BUILD_CACHE,
                path=entry,
                identity=_identity(entry, cache_home),
            )


def discover_version_roots(
    cache_home: Path, marker_file_name: str = DEFAULT_MARKER_FILE_NAME
) -> Iterator[CacheRoot]:
    """Yield one root per installed tool-version directory under caches/."""
    caches_dir = cache_home / CACHES_DIR
    versions = [
        d for d in _list_dirs(caches_dir) if GRADLE_VERSION_PATTERN.match(d.name)
    ]
    for version_dir in sorted(versions, key=lambda d: version_sort_key(d.name)):
        yield CacheRoot(
            kind=CacheKind.VERSION,
            path=version_dir,
            identity=_identity(version_dir, cache_home),
            marker=version_dir / marker_file_name,
            version=version_dir.name,
        )


def discover_wrapper_roots(cache_home: Path) -> Iterator[CacheRoot]:
    """Yield one root per wrapper distribution, keyed by its tool version."""
    dists_dir = cache_home / WRAPPER_DISTS_DIR
    dists = []
    for dist_dir in _list_dirs(dists_dir):
        match = WRAPPER_DIST_PATTERN.match(dist_dir.name)
        if match:
            dists.append((match.group("version"), dist_dir))

    for version, dist_dir in sorted(dists, key=lambda d: version_sort_key(d[0])):
        yield CacheRoot(
            kind=CacheKind.WRAPPER_DIST,
            path=dist_dir,
            identity=_identity(dist_dir, cache_home),
            version=version,
        )


def discover_roots(
    cache_home: Path, marker_file_name: str = DEFAULT_MARKER_FILE_NAME
) -> Iterator[CacheRoot]:
    """
    Enumerate every cache root of the four categories under ``cache_home``.

    Args:
        cache_home: Gradle User Home
        marker_file_name: Usage marker file name inside version caches

    Returns:
        A lazy iterator of CacheRoot, module roots first, wrapper roots last
    """
    cache_home = Path(cache_home)
    yield from discover_module_roots(cache_home)
    yield from discover_build_cache_roots(cache_home)
    yield from discover_version_roots(cache_home, marker_file_name)
    yield from discover_wrapper_roots(cache_home)
