"""Tests for initialization and bulk sync."""

import pytest

from drive_backup.errors import InitializationError, NotInitializedError
from drive_backup.sync.backup_manager import BackupManager


def test_initialize_resolves_both_folders(manager, fake_drive):
    assert manager.backup_folder_id
    assert manager.memory_folder_id
    assert fake_drive.objects[manager.memory_folder_id]['parents'] == [manager.backup_folder_id]


def test_initialize_failure_is_fatal(config, fake_drive):
    def boom(name, parent_id=None):
        raise RuntimeError("API disabled")

    fake_drive.create_folder = boom
    manager = BackupManager(config, destination=fake_drive)

    with pytest.raises(InitializationError, match="API disabled"):
        manager.initialize()


def test_initialize_without_credentials_is_fatal(config, workspace):
    manager = BackupManager(config)

    with pytest.raises(InitializationError, match="not found"):
        manager.initialize()


def test_sync_all_uploads_files_and_dated_memory(manager, fake_drive):
    results = manager.sync_all()

    uploaded = {u['file'] for u in results.uploaded}
    assert uploaded == {
        "MEMORY.md", "SOUL.md", "USER.md", "tasks/pending.md",
        "memory/2024-03-04.md", "memory/2024-03-05.md",
    }
    assert results.skipped == [{'file': "IDENTITY.md", 'reason': 'not found'}]
    assert results.errors == []
    assert fake_drive.files_in(manager.backup_folder_id) == {"MEMORY.md", "SOUL.md", "USER.md", "pending.md"}
    assert fake_drive.files_in(manager.memory_folder_id) == {"2024-03-04.md", "2024-03-05.md"}
    assert all(u['url'].startswith("https://drive.google.com/") for u in results.uploaded)


def test_sync_all_twice_updates_instead_of_creating(manager, fake_drive):
    first = manager.sync_all()
    second = manager.sync_all()

    assert {u['id'] for u in first.uploaded} == {u['id'] for u in second.uploaded}
    assert all(kind == 'update' for kind, _ in fake_drive.uploads()[len(first.uploaded):])


def test_sync_all_isolates_failures(workspace, config, fake_drive):
    for name in ("F1.md", "F2.md", "F3.md"):
        (workspace / name).write_text(name, encoding='utf-8')
    config.sync_files = ["F1.md", "F2.md", "F3.md"]
    fake_drive.fail_names["F2.md"] = "upload rejected"
    manager = BackupManager(config, destination=fake_drive)
    manager.initialize()

    results = manager.sync_all()

    assert [c for c in fake_drive.uploads() if c[1].startswith("F")] == [
        ('create', 'F1.md'), ('create', 'F2.md'), ('create', 'F3.md'),
    ]
    assert {"F1.md", "F3.md"} <= {u['file'] for u in results.uploaded}
    assert results.errors == [{'file': "F2.md", 'error': "upload rejected"}]
    assert manager.store.get_file_id("F2.md") is None


def test_sync_all_without_memory_directory(workspace, manager):
    for entry in (workspace / "memory").iterdir():
        entry.unlink()
    (workspace / "memory").rmdir()

    results = manager.sync_all()

    assert results.errors == []
    assert not any(u['file'].startswith("memory/") for u in results.uploaded)


def test_sync_all_skips_directories_named_like_dates(workspace, manager, fake_drive):
    (workspace / "memory" / "2024-03-06.md").mkdir()

    results = manager.sync_all()

    assert results.errors == []
    assert fake_drive.files_in(manager.memory_folder_id) == {"2024-03-04.md", "2024-03-05.md"}


def test_summary_counts(manager):
    results = manager.sync_all()

    assert results.summary() == {'uploaded': 6, 'skipped': 1, 'errors': 0}
    assert results.duration >= 0


def test_links(manager):
    manager.upload_file("MEMORY.md")
    file_id = manager.store.get_file_id("MEMORY.md")

    links = manager.get_shareable_links()

    assert links['folder'] == f"https://drive.google.com/drive/folders/{manager.backup_folder_id}"
    assert links['files'] == {"MEMORY.md": f"https://drive.google.com/file/d/{file_id}/edit"}


def test_parent_folder_for(manager):
    assert manager.parent_folder_for("memory/2024-03-05.md") == manager.memory_folder_id
    assert manager.parent_folder_for("MEMORY.md") == manager.backup_folder_id


def test_operations_require_initialization(config, fake_drive):
    manager = BackupManager(config, destination=fake_drive)

    with pytest.raises(NotInitializedError):
        manager.get_folder_url()
    with pytest.raises(NotInitializedError):
        manager.sync_all()
