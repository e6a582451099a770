"""Shared fixtures: an in-memory Drive and a throwaway workspace."""

import itertools
from pathlib import Path

import httplib2
import pytest
from googleapiclient.errors import HttpError

from drive_backup.config.settings import SyncConfig, WatchOptions
from drive_backup.sync.backup_manager import BackupManager


def not_found(file_id: str) -> HttpError:
    return HttpError(httplib2.Response({'status': 404}), f"File not found: {file_id}".encode())


class FakeDrive:
    """Stands in for GoogleDriveDestination, keeping everything in dicts."""

    def __init__(self):
        self.objects = {}
        self.permissions = []
        self.calls = []
        self.fail_names = {}
        self._ids = itertools.count(1)

    def _new_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def get_file(self, file_id, fields="id,name,mimeType,trashed"):
        self.calls.append(('get', file_id))
        if file_id not in self.objects:
            raise not_found(file_id)
        return {'id': file_id, 'name': self.objects[file_id]['name'], 'trashed': False}

    def create_folder(self, name, parent_id=None):
        self.calls.append(('create_folder', name))
        folder_id = self._new_id('folder')
        self.objects[folder_id] = {'name': name, 'parents': [parent_id] if parent_id else [],
                                   'folder': True}
        return {'id': folder_id}

    def create_permission(self, file_id, role, grantee_type):
        self.calls.append(('permission', file_id))
        self.permissions.append({'fileId': file_id, 'role': role, 'type': grantee_type})
        return {'id': 'anyoneWithLink'}

    def _check_failure(self, name):
        if name in self.fail_names:
            raise RuntimeError(self.fail_names[name])

    def create_file(self, name, content, parent_id=None, mimetype="text/markdown"):
        self.calls.append(('create', name))
        self._check_failure(name)
        file_id = self._new_id('file')
        self.objects[file_id] = {'name': name, 'parents': [parent_id] if parent_id else [],
                                 'content': content, 'mimeType': mimetype}
        return self._result(file_id)

    def update_file(self, file_id, name, content, mimetype="text/markdown"):
        self.calls.append(('update', name))
        self._check_failure(name)
        if file_id not in self.objects:
            raise not_found(file_id)
        self.objects[file_id].update({'name': name, 'content': content, 'mimeType': mimetype})
        return self._result(file_id)

    def get_user_email(self):
        return "owner@example.com"

    @staticmethod
    def _result(file_id):
        return {
            'id': file_id,
            'modifiedTime': '2024-03-05T10:00:00.000Z',
            'webViewLink': f"https://drive.google.com/file/d/{file_id}/view",
        }

    def uploads(self):
        return [c for c in self.calls if c[0] in ('create', 'update')]

    def files_in(self, folder_id):
        return {o['name'] for o in self.objects.values()
                if folder_id in o['parents'] and not o.get('folder')}


@pytest.fixture
def fake_drive():
    return FakeDrive()


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A working directory holding tracked notes and a memory directory."""
    monkeypatch.chdir(tmp_path)
    for name in ("MEMORY.md", "SOUL.md", "USER.md"):
        (tmp_path / name).write_text(f"# {name}\n", encoding='utf-8')
    (tmp_path / "tasks").mkdir()
    (tmp_path / "tasks" / "pending.md").write_text("- [ ] backup\n", encoding='utf-8')
    memory = tmp_path / "memory"
    memory.mkdir()
    (memory / "2024-03-04.md").write_text("yesterday\n", encoding='utf-8')
    (memory / "2024-03-05.md").write_text("today\n", encoding='utf-8')
    (memory / "scratch.txt").write_text("ignored\n", encoding='utf-8')
    return tmp_path


@pytest.fixture
def config(workspace):
    return SyncConfig(
        sync_files=["MEMORY.md", "SOUL.md", "USER.md", "IDENTITY.md", "tasks/pending.md"],
        state_path=Path(".credentials/drive-sync-state.json"),
        watch=WatchOptions(debounce_delay=0.3, settle_delay=0.1),
    )


@pytest.fixture
def manager(config, fake_drive):
    manager = BackupManager(config, destination=fake_drive)
    manager.initialize()
    return manager
