from chatdeck.sessions.directory import SessionDirectory
from chatdeck.sessions.pointer import ActiveSessionPointer
from chatdeck.sessions.schema import DEFAULT_PREVIEW
from chatdeck.storage import CURRENT_SESSION_KEY, MemoryStore


def test_get_empty_when_unset(pointer):
    assert pointer.get() == ""


def test_set_and_get(pointer, store):
    pointer.set("abc")
    assert pointer.get() == "abc"
    assert store.get_item(CURRENT_SESSION_KEY) == "abc"


def test_survives_new_instances():
    store = MemoryStore()
    ActiveSessionPointer(store, SessionDirectory(store)).set("abc")
    assert ActiveSessionPointer(store, SessionDirectory(store)).get() == "abc"


def test_create_new_sets_current_and_registers(pointer, directory):
    session_id = pointer.create_new()

    assert session_id
    assert pointer.get() == session_id
    entry = directory.get(session_id)
    assert entry is not None
    assert entry.preview == DEFAULT_PREVIEW


def test_create_new_ids_are_unique(pointer, directory):
    ids = [pointer.create_new() for _ in range(25)]

    assert len(set(ids)) == len(ids)
    listed = [s.id for s in directory.list()]
    for session_id in ids:
        assert listed.count(session_id) == 1
