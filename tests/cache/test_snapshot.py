"""Tests for capturing and persisting snapshots."""

import json
import logging

import pytest

from cachecleaner.cache.snapshot import Snapshot, SnapshotEntry, SnapshotStore
from cachecleaner.constants import SNAPSHOT_FILE_NAME, CacheKind
from cachecleaner.exceptions import ConfigurationError
from tests.fixtures import OLD


@pytest.fixture
def populated_home(home_builder, gradle_home):
    home_builder.module("org.apache.commons", "commons-math3", "3.1")
    home_builder.build_cache_entry("c" * 32)
    home_builder.version("7.5.1", last_used=OLD)
    home_builder.wrapper_dist("7.5.1")
    home_builder.age()
    return gradle_home


class TestSnapshot:
    @pytest.mark.short
    def test_capture_records_every_root(self, populated_home):
        snapshot = Snapshot.capture(populated_home)

        assert len(snapshot) == 4
        assert snapshot.cache_home == str(populated_home)
        assert snapshot.get("caches/7.5.1") == SnapshotEntry(
            CacheKind.VERSION, OLD * 10**9
        )
        assert snapshot.get("wrapper/dists/gradle-7.5.1-bin").kind == CacheKind.WRAPPER_DIST
        assert "caches/build-cache-1/" + "c" * 32 in snapshot
        assert snapshot.get("caches/unknown") is None

    @pytest.mark.short
    def test_entries_are_read_only(self, populated_home):
        snapshot = Snapshot.capture(populated_home)
        with pytest.raises(TypeError):
            snapshot.entries["caches/7.5.1"] = SnapshotEntry(CacheKind.VERSION, 0)

    @pytest.mark.short
    def test_unsupported_format_is_rejected(self):
        with pytest.raises(ValueError, match="unsupported"):
            Snapshot.from_dict({"format": 99, "entries": {}})

    @pytest.mark.short
    def test_malformed_entries_are_rejected(self):
        with pytest.raises(ValueError, match="malformed"):
            Snapshot.from_dict(
                {
                    "format": 1,
                    "cache_home": "/h",
                    "created_at": "now",
                    "entries": {"caches/7.5.1": {"signal": 1}},
                }
            )


class TestSnapshotStore:
    @pytest.mark.short
    def test_save_then_load_in_a_new_store(self, populated_home, staging_dir):
        snapshot = Snapshot.capture(populated_home)
        SnapshotStore(staging_dir).save(snapshot)

        loaded = SnapshotStore(staging_dir).load()

        assert loaded.cache_home == snapshot.cache_home
        assert loaded.created_at == snapshot.created_at
        assert dict(loaded.entries) == dict(snapshot.entries)

    @pytest.mark.short
    def test_saved_file_is_complete_json(self, populated_home, staging_dir):
        SnapshotStore(staging_dir).save(Snapshot.capture(populated_home))

        data = json.loads((staging_dir / SNAPSHOT_FILE_NAME).read_text())
        assert data["format"] == 1
        assert data["entries"]["caches/7.5.1"] == {
            "kind": "version",
            "signal": OLD * 10**9,
        }
        leftovers = [p.name for p in staging_dir.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []

    @pytest.mark.short
    def test_save_replaces_previous_snapshot(self, populated_home, home_builder, staging_dir):
        store = SnapshotStore(staging_dir)
        store.save(Snapshot.capture(populated_home))
        home_builder.build_cache_entry("d" * 32)

        store.save(Snapshot.capture(populated_home))

        assert len(store.load()) == 5

    @pytest.mark.short
    def test_load_without_snapshot(self, staging_dir):
        assert SnapshotStore(staging_dir).load() is None

    @pytest.mark.short
    def test_load_corrupt_snapshot(self, staging_dir, caplog):
        staging_dir.mkdir()
        (staging_dir / SNAPSHOT_FILE_NAME).write_text("{ not json")

        with caplog.at_level(logging.WARNING, logger="cachecleaner"):
            assert SnapshotStore(staging_dir).load() is None
        assert "Ignoring unreadable snapshot" in caplog.text

    @pytest.mark.short
    def test_discard(self, populated_home, staging_dir):
        store = SnapshotStore(staging_dir)
        store.save(Snapshot.capture(populated_home))

        store.discard()
        store.discard()

        assert store.load() is None
        assert not (staging_dir / SNAPSHOT_FILE_NAME).exists()

    @pytest.mark.short
    def test_discard_without_staging_dir(self, staging_dir):
        SnapshotStore(staging_dir).discard()
        assert not staging_dir.exists()

    @pytest.mark.short
    def test_unwritable_staging_dir(self, populated_home, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        with pytest.raises(ConfigurationError, match="Cannot write snapshot"):
            SnapshotStore(blocker / "staging").save(Snapshot.capture(populated_home))

    @pytest.mark.short
    def test_interrupted_save_keeps_previous_snapshot(
        self, populated_home, home_builder, staging_dir, monkeypatch
    ):
        store = SnapshotStore(staging_dir)
        store.save(Snapshot.capture(populated_home))
        home_builder.build_cache_entry("d" * 32)

        def fsync(fd):
            raise OSError(5, "Input/output error")

        monkeypatch.setattr("cachecleaner.io.atomic.os.fsync", fsync)

        with pytest.raises(ConfigurationError, match="Cannot write snapshot"):
            store.save(Snapshot.capture(populated_home))

        monkeypatch.undo()
        assert len(store.load()) == 4
        leftovers = [p.name for p in staging_dir.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []
