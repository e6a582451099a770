"""Tests for the sync state store."""

import json

from drive_backup.sync.state_store import StateStore, SyncState


def test_load_missing_file_returns_empty_state(tmp_path):
    store = StateStore(tmp_path / "state.json")

    state = store.load()

    assert state == SyncState(files={}, folders={})


def test_load_corrupt_file_returns_empty_state(tmp_path):
    state_file = tmp_path / "state.json"
    state_file.write_text("{not json", encoding='utf-8')

    state = StateStore(state_file).load()

    assert state.files == {}
    assert state.folders == {}


def test_load_wrong_shape_returns_empty_state(tmp_path):
    state_file = tmp_path / "state.json"
    state_file.write_text("[1, 2, 3]", encoding='utf-8')

    assert StateStore(state_file).load() == SyncState()


def test_save_and_reload(tmp_path):
    state_file = tmp_path / "nested" / "state.json"
    store = StateStore(state_file)
    store.load()
    store.record_file("MEMORY.md", "file-1")
    store.set_folder("backup", "folder-1")

    data = json.loads(state_file.read_text(encoding='utf-8'))
    assert data == {"files": {"MEMORY.md": "file-1"}, "folders": {"backup": "folder-1"}}

    reloaded = StateStore(state_file)
    reloaded.load()
    assert reloaded.get_file_id("MEMORY.md") == "file-1"
    assert reloaded.get_folder("backup") == "folder-1"
    assert not (tmp_path / "nested" / "state.json.tmp").exists()


def test_save_replaces_whole_record(tmp_path):
    store = StateStore(tmp_path / "state.json")
    store.record_file("a.md", "1")

    store.save(SyncState(files={"b.md": "2"}))

    assert StateStore(tmp_path / "state.json").load().files == {"b.md": "2"}
