import json
from pathlib import Path

from chatdeck.sessions.directory import SessionDirectory
from chatdeck.sessions.schema import DEFAULT_PREVIEW
from chatdeck.storage import SESSIONS_KEY, FileStore, MemoryStore


class TestSessionDirectoryList:
    def test_empty_when_nothing_persisted(self, directory):
        assert directory.list() == []

    def test_corrupt_json_is_empty(self):
        directory = SessionDirectory(MemoryStore({SESSIONS_KEY: "{not json"}))
        assert directory.list() == []

    def test_wrong_shape_is_empty(self):
        directory = SessionDirectory(MemoryStore({SESSIONS_KEY: '{"id": "a"}'}))
        assert directory.list() == []

    def test_invalid_entry_is_empty(self):
        raw = json.dumps([{"id": "", "preview": "x", "lastTouched": "2025-01-01T00:00:00Z"}])
        directory = SessionDirectory(MemoryStore({SESSIONS_KEY: raw}))
        assert directory.list() == []

    def test_corrupt_state_is_replaced_on_touch(self, clock):
        store = MemoryStore({SESSIONS_KEY: "garbage"})
        directory = SessionDirectory(store, clock=clock)
        directory.touch("a")
        assert [s.id for s in directory.list()] == ["a"]


class TestSessionDirectoryTouch:
    def test_unknown_id_inserted_at_front_with_placeholder(self, directory, clock):
        directory.touch("a")
        clock.advance()
        directory.touch("b")

        sessions = directory.list()
        assert [s.id for s in sessions] == ["b", "a"]
        assert sessions[0].preview == DEFAULT_PREVIEW
        assert sessions[0].last_touched == clock.now

    def test_unknown_id_with_preview(self, directory):
        directory.touch("a", "hello there")
        assert directory.get("a").preview == "hello there"

    def test_touch_without_preview_keeps_timestamp(self, directory, clock):
        directory.touch("a", "first")
        before = directory.get("a").last_touched
        clock.advance()

        directory.touch("a")

        entry = directory.get("a")
        assert entry.last_touched == before
        assert entry.preview == "first"

    def test_touch_with_same_preview_keeps_timestamp(self, directory, clock):
        directory.touch("a", "first")
        before = directory.get("a").last_touched
        clock.advance()

        directory.touch("a", "first")

        assert directory.get("a").last_touched == before

    def test_touch_with_new_preview_updates_and_bumps(self, directory, clock):
        directory.touch("a")
        clock.advance()

        directory.touch("a", "what is the weather")

        entry = directory.get("a")
        assert entry.preview == "what is the weather"
        assert entry.last_touched == clock.now

    def test_preview_is_clipped(self, directory):
        directory.touch("a", "x" * 120)
        assert directory.get("a").preview == "x" * 50

    def test_ids_stay_unique(self, directory):
        for _ in range(3):
            directory.touch("a", "p")
            directory.touch("a")
        assert [s.id for s in directory.list()] == ["a"]

    def test_noop_does_not_write(self, clock):
        store = MemoryStore()
        directory = SessionDirectory(store, clock=clock)
        directory.touch("a", "first")
        snapshot = store.get_item(SESSIONS_KEY)
        clock.advance()

        directory.touch("a")
        directory.touch("a", "first")

        assert store.get_item(SESSIONS_KEY) == snapshot


def test_recent_orders_by_last_touched(directory, clock):
    directory.touch("a")
    clock.advance()
    directory.touch("b")
    clock.advance()
    directory.touch("a", "updated")

    assert [s.id for s in directory.recent()] == ["a", "b"]
    assert [s.id for s in directory.list()] == ["b", "a"]


def test_snapshot_persists_to_disk(tmp_path: Path, clock):
    SessionDirectory(FileStore(tmp_path), clock=clock).touch("a", "hi")

    reloaded = SessionDirectory(FileStore(tmp_path))
    assert reloaded.get("a").preview == "hi"

    raw = json.loads((tmp_path / SESSIONS_KEY).read_text(encoding="utf-8"))
    assert raw[0]["id"] == "a"
    assert "lastTouched" in raw[0]
