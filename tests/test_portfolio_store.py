"""
Tests for the storage helpers: daily event log, presence map and content files.
"""

import json
from concurrent.futures import ThreadPoolExecutor
from datetime import date

import pytest
from PIL import Image

from portfolio_store.event_log import EventLogStore
from portfolio_store.presence import PresenceTracker
from portfolio_store.json_files import read_json, read_json_object, write_json, natural_sort_key, list_subdirs
from portfolio_store.filenames import (
    normalize_upload_filename,
    unique_filename,
    slugify,
    clean_rel_path,
    is_valid_entry_name,
)
from portfolio_store.image_previews import create_preview, preview_path_for
from portfolio_store.errors import ContentError, InvalidInput, NotFound, Conflict


class TestEventLogStore:
    """Test the append-only daily log."""

    @pytest.fixture
    def store(self, tmp_path):
        return EventLogStore(tmp_path / "analytics")

    def test_append_creates_day_file(self, store):
        day = date(2025, 3, 14)
        path = store.append_event({"type": "pageview", "path": "/"}, day=day)

        assert path.name == "2025-03-14.jsonl"
        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0]) == {"type": "pageview", "path": "/"}

    def test_concurrent_appends_keep_whole_lines(self, store):
        day = date(2025, 3, 14)
        padding = "x" * 8192

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda n: store.append_event({"n": n, "pad": padding}, day=day), range(200)))

        lines = store.day_file(day).read_text(encoding="utf-8").splitlines()
        assert len(lines) == 200
        records = [json.loads(line) for line in lines]
        assert sorted(record["n"] for record in records) == list(range(200))
        assert all(record["pad"] == padding for record in records)

    def test_append_keeps_existing_lines(self, store):
        day = date(2025, 3, 14)
        store.append_event({"n": 1}, day=day)
        store.append_event({"n": 2}, day=day)

        assert [r["n"] for r in store.read_day(day)] == [1, 2]

    def test_non_ascii_is_written_verbatim(self, store):
        day = date(2025, 3, 14)
        path = store.append_event({"path": "/galerie/schöne-aussicht"}, day=day)
        assert "schöne" in path.read_text(encoding="utf-8")

    def test_bad_lines_are_skipped(self, store):
        day = date(2025, 3, 14)
        store.ensure_dir()
        store.day_file(day).write_text(
            '{"n":1}\nnot json at all\n[1,2,3]\n\n{"n":2}\n', encoding="utf-8"
        )

        assert [r["n"] for r in store.read_day(day)] == [1, 2]

    def test_missing_day_yields_nothing(self, store):
        assert list(store.read_day(date(2020, 1, 1))) == []

    def test_scan_range_is_inclusive(self, store):
        store.append_event({"n": 1}, day=date(2025, 1, 1))
        store.append_event({"n": 2}, day=date(2025, 1, 2))
        store.append_event({"n": 3}, day=date(2025, 1, 3))
        store.append_event({"n": 4}, day=date(2025, 1, 4))

        scanned = list(store.scan_range(date(2025, 1, 2), date(2025, 1, 3)))
        assert [(d.day, r["n"]) for d, r in scanned] == [(2, 2), (3, 3)]

    def test_tail(self, store):
        day = date(2025, 1, 1)
        for n in range(7):
            store.append_event({"n": n}, day=day)

        count, last_lines = store.tail(day, limit=5)
        assert count == 7
        assert len(last_lines) == 5
        assert json.loads(last_lines[-1]) == {"n": 6}

    def test_tail_missing_file(self, store):
        assert store.tail(date(2025, 1, 1)) == (0, [])


class TestPresenceTracker:
    """Test the heartbeat map and its TTL boundary."""

    @pytest.fixture
    def tracker(self, tmp_path):
        return PresenceTracker(tmp_path / "active.json", ttl_sec=300)

    def test_heartbeat_records_client(self, tracker):
        tracker.record_heartbeat("abc", now=1000)
        assert tracker.load() == {"abc": 1000}

    def test_concurrent_heartbeats_are_all_kept(self, tracker):
        client_ids = [f"client-{n}" for n in range(50)]

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda client_id: tracker.record_heartbeat(client_id, now=1000), client_ids))

        assert tracker.load() == {client_id: 1000 for client_id in client_ids}

    def test_entry_at_ttl_is_online(self, tracker):
        tracker.record_heartbeat("abc", now=1000)
        assert tracker.count_active_since(now=1300) == 1

    def test_heartbeat_299_seconds_old_is_online(self, tracker):
        tracker.record_heartbeat("abc", now=1000)
        assert tracker.active_ids(now=1299) == ["abc"]

    def test_heartbeat_301_seconds_old_is_offline(self, tracker):
        tracker.record_heartbeat("abc", now=1000)
        assert tracker.active_ids(now=1301) == []

    def test_heartbeat_prunes_stale_entries(self, tracker):
        tracker.record_heartbeat("old", now=1000)
        tracker.record_heartbeat("new", now=1400)

        assert tracker.load() == {"new": 1400}

    def test_corrupt_file_counts_as_empty(self, tracker):
        tracker.active_file.write_text("{broken")
        assert tracker.count_active_since(now=1000) == 0

        tracker.record_heartbeat("abc", now=1000)
        assert tracker.load() == {"abc": 1000}

    def test_non_numeric_entries_are_ignored(self, tracker):
        tracker.active_file.write_text(json.dumps({"a": "soon", "b": True, "c": 1000}))
        assert tracker.active_ids(now=1000) == ["c"]


class TestJsonFiles:
    """Test the JSON descriptor helpers."""

    def test_write_and_read(self, tmp_path):
        path = tmp_path / "meta.json"
        write_json(path, {"galerie": "Wälder"})

        assert read_json(path) == {"galerie": "Wälder"}
        assert "Wälder" in path.read_text(encoding="utf-8")
        assert not list(tmp_path.glob(".*.tmp"))

    def test_read_missing_or_broken(self, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{")

        assert read_json(tmp_path / "missing.json", default=[]) == []
        assert read_json(broken, default={}) == {}

    def test_read_json_object_rejects_lists(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        assert read_json_object(path) == {}

    def test_natural_sort(self):
        names = ["img10.jpg", "img2.jpg", "IMG1.jpg"]
        assert sorted(names, key=natural_sort_key) == ["IMG1.jpg", "img2.jpg", "img10.jpg"]

    def test_list_subdirs_numeric_only(self, tmp_path):
        (tmp_path / "2024").mkdir()
        (tmp_path / "2023").mkdir()
        (tmp_path / "drafts").mkdir()
        (tmp_path / "2025").write_text("not a dir")

        assert [p.name for p in list_subdirs(tmp_path, numeric_only=True)] == ["2023", "2024"]
        assert len(list_subdirs(tmp_path)) == 3


class TestFilenames:
    """Test filename normalization and path cleaning."""

    @pytest.mark.parametrize("original,expected", [
        ("Schöne Aussicht (2).JPG", "schoene-aussicht-2.jpg"),
        ("Straße_am_Fluß.png", "strasse_am_fluss.png"),
        ("café crème.webp", "cafe-creme.webp"),
        ("---.jpg", "image.jpg"),
        ("noextension", "noextension"),
    ])
    def test_normalize_upload_filename(self, original, expected):
        assert normalize_upload_filename(original) == expected

    def test_unique_filename(self, tmp_path):
        (tmp_path / "photo.jpg").write_bytes(b"x")
        (tmp_path / "photo_1.jpg").write_bytes(b"x")

        assert unique_filename(tmp_path, "other.jpg") == "other.jpg"
        assert unique_filename(tmp_path, "photo.jpg") == "photo_2.jpg"
        assert unique_filename(tmp_path, "photo.jpg", template="{stem} ({n}){suffix}") == "photo (1).jpg"

    def test_slugify(self):
        assert slugify("Hello, World! 2024") == "hello-world-2024"
        assert slugify("!!!") == "post"

    @pytest.mark.parametrize("raw,expected", [
        ("", ""),
        ("/2024/trip/", "2024/trip"),
        ("2024\\trip", "2024/trip"),
        ("a/./b", "a/b"),
        ("a/../b", "b"),
        ("../../etc/passwd", "etc/passwd"),
    ])
    def test_clean_rel_path(self, raw, expected):
        assert clean_rel_path(raw) == expected

    def test_is_valid_entry_name(self):
        assert is_valid_entry_name("Urlaub 2024")
        assert not is_valid_entry_name("")
        assert not is_valid_entry_name("..")
        assert not is_valid_entry_name("a/b")
        assert not is_valid_entry_name("what?")


class TestImagePreviews:
    """Test preview thumbnail generation."""

    def test_preview_limits_long_edge(self, tmp_path):
        source = tmp_path / "wide.jpg"
        Image.new("RGB", (1200, 800), "red").save(source)

        assert create_preview(source, max_edge=600)

        with Image.open(preview_path_for(source)) as preview:
            assert preview.size == (600, 400)

    def test_small_image_keeps_size(self, tmp_path):
        source = tmp_path / "small.png"
        Image.new("RGBA", (100, 50), (0, 0, 0, 0)).save(source)

        assert create_preview(source, max_edge=600)

        with Image.open(preview_path_for(source)) as preview:
            assert preview.size == (100, 50)
            assert preview.mode == "RGBA"

    def test_invalid_image_returns_false(self, tmp_path):
        source = tmp_path / "broken.jpg"
        source.write_bytes(b"definitely not a jpeg")

        assert create_preview(source) is False
        assert not preview_path_for(source).exists()

    def test_oversized_image_returns_false(self, tmp_path):
        source = tmp_path / "huge.png"
        Image.new("1", (20000, 20000)).save(source, "PNG")

        assert create_preview(source) is False
        assert not preview_path_for(source).exists()

    def test_unsupported_extension(self, tmp_path):
        source = tmp_path / "doc.pdf"
        source.write_bytes(b"%PDF")
        assert create_preview(source) is False


class TestErrors:
    """Test the error envelope."""

    def test_status_codes(self):
        assert InvalidInput("x").status_code == 400
        assert NotFound("x").status_code == 404
        assert Conflict("x").status_code == 409
        assert ContentError("x").status_code == 500

    def test_to_dict_includes_details(self):
        error = NotFound("Image not found", {"tried": ["a.jpg"]})
        assert error.to_dict() == {"success": False, "message": "Image not found", "tried": ["a.jpg"]}


class TestPackageExports:
    """Test the names re-exported by the package."""

    def test_all_names_resolve(self):
        import portfolio_store

        for name in portfolio_store.__all__:
            assert hasattr(portfolio_store, name), name
