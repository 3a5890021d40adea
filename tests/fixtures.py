"""Builders for fake Gradle User Home layouts."""

import os
import stat
import time
from pathlib import Path
from typing import Optional

import pytest

# Well before any test run; cache content is aged to this before a snapshot
OLD = 1_600_000_000


def set_mtime(path: Path, seconds: float):
    os.utime(path, (seconds, seconds), follow_symlinks=False)


def age_tree(root: Path, seconds: float = OLD):
    """Set the mtime of everything under ``root`` (and root itself) to ``seconds``."""
    for dirpath, dirnames, filenames in os.walk(root, topdown=False):
        for name in filenames + dirnames:
            set_mtime(Path(dirpath) / name, seconds)
    set_mtime(root, seconds)


def touch(path: Path, seconds: Optional[float] = None):
    """Mark ``path`` as used now (or at ``seconds``)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch()
    stamp = time.time() if seconds is None else seconds
    set_mtime(path, stamp)


class GradleHomeBuilder:
    """Creates cache entries in the layout Gradle uses."""

    def __init__(self, home: Path):
        self.home = home
        self.home.mkdir(parents=True, exist_ok=True)

    def module(self, group: str, artifact: str, version: str) -> Path:
        version_dir = self.home / "caches/modules-2/files-2.1" / group / artifact / version
        jar = version_dir / "a1b2c3d4e5" / f"{artifact}-{version}.jar"
        jar.parent.mkdir(parents=True, exist_ok=True)
        jar.write_bytes(b"jar")
        return version_dir

    def build_cache_entry(self, key: str) -> Path:
        entry = self.home / "caches/build-cache-1" / key
        entry.parent.mkdir(parents=True, exist_ok=True)
        entry.write_bytes(b"result")
        return entry

    def version(self, version: str, last_used: Optional[int] = OLD) -> Path:
        version_dir = self.home / "caches" / version
        (version_dir / "file-changes").mkdir(parents=True, exist_ok=True)
        (version_dir / "file-changes" / "last-build.bin").write_bytes(b"\0")
        if last_used is not None:
            self.write_marker(version, last_used)
        return version_dir

    def write_marker(self, version: str, last_used: int) -> Path:
        marker = self.home / "caches" / version / "gc.properties"
        marker.write_text(f"lastUsed={last_used * 1000}\n")
        return marker

    def wrapper_dist(self, version: str) -> Path:
        dist = self.home / "wrapper/dists" / f"gradle-{version}-bin"
        unpacked = dist / "9xyz8wvu7" / f"gradle-{version}"
        (unpacked / "lib").mkdir(parents=True, exist_ok=True)
        (unpacked.parent / f"gradle-{version}-bin.zip").write_bytes(b"zip")
        return dist

    def age(self, seconds: float = OLD):
        age_tree(self.home, seconds)


def write_script(path: Path, content: str) -> Path:
    """Write an executable shell script."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


requires_posix_shell = pytest.mark.skipif(
    os.name == "nt", reason="build stand-ins are POSIX shell scripts"
)
