"""Tests for usage markers and usage signals."""

import logging
from pathlib import Path

import pytest

from cachecleaner.cache.discovery import CacheRoot
from cachecleaner.cache.markers import (
    newest_mtime_ns,
    parse_marker,
    read_marker,
    to_nanoseconds,
    usage_signal,
)
from cachecleaner.constants import NEVER_USED, CacheKind
from cachecleaner.exceptions import ReadError
from tests.fixtures import OLD, set_mtime, touch


def _version_root(version_dir: Path) -> CacheRoot:
    return CacheRoot(
        kind=CacheKind.VERSION,
        path=version_dir,
        identity=f"caches/{version_dir.name}",
        marker=version_dir / "gc.properties",
        version=version_dir.name,
    )


class TestToNanoseconds:
    @pytest.mark.short
    def test_seconds(self):
        assert to_nanoseconds(1_700_000_000) == 1_700_000_000_000_000_000

    @pytest.mark.short
    def test_milliseconds(self):
        assert to_nanoseconds(1_700_000_000_123) == 1_700_000_000_123_000_000

    @pytest.mark.short
    def test_microseconds(self):
        assert to_nanoseconds(1_700_000_000_123_456) == 1_700_000_000_123_456_000

    @pytest.mark.short
    def test_nanoseconds_unchanged(self):
        assert to_nanoseconds(1_700_000_000_123_456_789) == 1_700_000_000_123_456_789


class TestParseMarker:
    @pytest.mark.short
    def test_properties_with_last_used(self):
        text = "# written by gradle\nlastUsed=1700000000000\n"
        assert parse_marker(Path("m"), text) == 1_700_000_000_000_000_000

    @pytest.mark.short
    def test_properties_with_colon_separator(self):
        assert parse_marker(Path("m"), "timestamp: 1700000000") == 1_700_000_000 * 10**9

    @pytest.mark.short
    def test_other_keys_are_ignored(self):
        text = "version=3\nlastUsed=1700000000\n"
        assert parse_marker(Path("m"), text) == 1_700_000_000 * 10**9

    @pytest.mark.short
    def test_bare_number(self):
        assert parse_marker(Path("m"), "1700000000\n") == 1_700_000_000 * 10**9

    @pytest.mark.short
    def test_empty_marker_raises(self):
        with pytest.raises(ReadError, match="empty"):
            parse_marker(Path("m"), "  \n")

    @pytest.mark.short
    def test_garbage_raises(self):
        with pytest.raises(ReadError):
            parse_marker(Path("m"), "lastUsed=yesterday")

    @pytest.mark.short
    def test_negative_raises(self):
        with pytest.raises(ReadError, match="negative"):
            parse_marker(Path("m"), "-5")


class TestReadMarker:
    @pytest.mark.short
    def test_reads_marker(self, home_builder):
        version_dir = home_builder.version("7.5.1", last_used=1_700_000_000)
        assert read_marker(_version_root(version_dir)) == 1_700_000_000 * 10**9

    @pytest.mark.short
    def test_missing_marker_is_never_used(self, home_builder, caplog):
        version_dir = home_builder.version("7.5.1", last_used=None)

        with caplog.at_level(logging.WARNING, logger="cachecleaner"):
            assert read_marker(_version_root(version_dir)) == NEVER_USED

        assert "treating caches/7.5.1 as never used" in caplog.text

    @pytest.mark.short
    def test_corrupt_marker_is_never_used(self, home_builder):
        version_dir = home_builder.version("7.5.1", last_used=None)
        (version_dir / "gc.properties").write_bytes(b"\xff\xfe\x00garbage")

        assert read_marker(_version_root(version_dir)) == NEVER_USED

    @pytest.mark.short
    def test_root_without_marker(self, tmp_path):
        root = CacheRoot(CacheKind.BUILD_CACHE, tmp_path / "x", "caches/build-cache-1/x")
        assert read_marker(root) == NEVER_USED


class TestUsageSignal:
    @pytest.mark.short
    def test_module_signal_follows_nested_files(self, home_builder):
        version_dir = home_builder.module("org.example", "lib", "1.0")
        home_builder.age()
        root = CacheRoot(CacheKind.MODULE, version_dir, "m")
        before = usage_signal(root)

        jar = next(version_dir.rglob("*.jar"))
        touch(jar)

        assert usage_signal(root) > before
        assert usage_signal(root) == newest_mtime_ns(version_dir)

    @pytest.mark.short
    def test_build_cache_signal_is_own_mtime(self, home_builder):
        entry = home_builder.build_cache_entry("0" * 32)
        set_mtime(entry, OLD)
        root = CacheRoot(CacheKind.BUILD_CACHE, entry, "b")

        assert usage_signal(root) == OLD * 10**9

    @pytest.mark.short
    def test_version_signal_follows_marker_content(self, home_builder):
        version_dir = home_builder.version("7.5.1", last_used=OLD)
        home_builder.age()
        root = _version_root(version_dir)
        before = usage_signal(root)

        home_builder.write_marker("7.5.1", OLD + 3600)
        set_mtime(root.marker, OLD)

        assert usage_signal(root) > before

    @pytest.mark.short
    def test_version_signal_without_marker_uses_directory(self, home_builder):
        version_dir = home_builder.version("7.5.1", last_used=None)
        home_builder.age()

        assert usage_signal(_version_root(version_dir)) == OLD * 10**9

    @pytest.mark.short
    def test_missing_path_is_never_used(self, tmp_path):
        root = CacheRoot(CacheKind.BUILD_CACHE, tmp_path / "gone", "gone")
        assert usage_signal(root) == NEVER_USED
