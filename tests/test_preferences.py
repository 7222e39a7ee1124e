"""Tests for AppPreferences JSON persistence."""

import json
from datetime import datetime, timedelta, timezone

from beerfest.services.preferences import EPOCH, AppPreferences


class TestBookmarks:
    def test_defaults(self, preferences):
        assert preferences.get_bookmarked_ids() == set()
        assert not preferences.is_bookmarked("B1")

    def test_set_and_clear(self, preferences):
        preferences.set_bookmarked("B1", True)
        assert preferences.is_bookmarked("B1")

        preferences.set_bookmarked("B1", False)
        assert not preferences.is_bookmarked("B1")

    def test_clear_unknown_is_noop(self, preferences):
        preferences.set_bookmarked("B1", False)
        assert preferences.get_bookmarked_ids() == set()

    def test_toggle(self, preferences):
        assert preferences.toggle_bookmark("B1") is True
        assert preferences.toggle_bookmark("B1") is False
        assert not preferences.is_bookmarked("B1")

    def test_returned_set_is_a_copy(self, preferences):
        preferences.set_bookmarked("B1", True)
        preferences.get_bookmarked_ids().add("B2")
        assert preferences.get_bookmarked_ids() == {"B1"}

    def test_persisted_across_instances(self, tmp_path):
        path = str(tmp_path / "prefs.json")
        AppPreferences(path).set_bookmarked("B1", True)
        assert AppPreferences(path).get_bookmarked_ids() == {"B1"}


class TestSyncBookkeeping:
    def test_default_next_update_is_epoch(self, preferences):
        assert preferences.next_update_time == EPOCH
        assert preferences.last_digest == ""

    def test_round_trip(self, tmp_path):
        path = str(tmp_path / "prefs.json")
        when = datetime(2024, 5, 20, 12, 0, tzinfo=timezone.utc)
        prefs = AppPreferences(path)
        prefs.next_update_time = when
        prefs.last_digest = "abc123"

        reloaded = AppPreferences(path)
        assert reloaded.next_update_time == when
        assert reloaded.last_digest == "abc123"

    def test_naive_time_treated_as_utc(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text(json.dumps({"next_update_time": "2024-05-20T12:00:00"}))
        assert AppPreferences(str(path)).next_update_time.tzinfo is not None

    def test_keeps_offset(self, preferences):
        when = datetime(2024, 5, 20, 13, 0, tzinfo=timezone(timedelta(hours=1)))
        preferences.next_update_time = when
        assert preferences.next_update_time == when


class TestCorruptFile:
    def test_invalid_json_gives_defaults(self, tmp_path, caplog):
        path = tmp_path / "prefs.json"
        path.write_text("{not json")

        with caplog.at_level("ERROR"):
            prefs = AppPreferences(str(path))

        assert prefs.get_bookmarked_ids() == set()
        assert "Failed to read preferences" in caplog.text

    def test_wrong_shape_gives_defaults(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text("[1, 2, 3]")
        assert AppPreferences(str(path)).get_bookmarked_ids() == set()

    def test_bad_time_gives_epoch(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text(json.dumps({"next_update_time": "soon"}))
        assert AppPreferences(str(path)).next_update_time == EPOCH

    def test_write_replaces_corrupt_file(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text("garbage")
        AppPreferences(str(path)).set_bookmarked("B1", True)

        assert json.loads(path.read_text())["bookmarks"] == ["B1"]
        assert not list(tmp_path.glob("*.tmp"))
