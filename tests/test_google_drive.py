"""Tests for the Drive API request shapes."""

from unittest.mock import MagicMock

from drive_backup.destinations.google_drive import (
    FOLDER_MIME_TYPE,
    GoogleDriveDestination,
    file_edit_url,
    folder_url,
)


def make_destination():
    service = MagicMock()
    service.files.return_value.create.return_value.execute.return_value = {'id': 'new-id'}
    service.files.return_value.update.return_value.execute.return_value = {'id': 'old-id'}
    return GoogleDriveDestination(service), service


def test_create_folder_request():
    destination, service = make_destination()

    result = destination.create_folder("memory", parent_id="root-id")

    assert result == {'id': 'new-id'}
    service.files.return_value.create.assert_called_once_with(
        body={'name': 'memory', 'mimeType': FOLDER_MIME_TYPE, 'parents': ['root-id']},
        fields="id",
    )


def test_top_level_folder_has_no_parents():
    destination, service = make_destination()

    destination.create_folder("sam-backup")

    body = service.files.return_value.create.call_args.kwargs['body']
    assert 'parents' not in body


def test_create_file_sends_markdown_utf8():
    destination, service = make_destination()

    destination.create_file("MEMORY.md", "héllo", parent_id="root-id")

    kwargs = service.files.return_value.create.call_args.kwargs
    assert kwargs['body'] == {'name': 'MEMORY.md', 'parents': ['root-id']}
    assert kwargs['fields'] == "id,modifiedTime,webViewLink"
    media = kwargs['media_body']
    assert media.mimetype() == "text/markdown"
    assert media.getbytes(0, media.size()) == "héllo".encode('utf-8')


def test_update_file_keeps_id():
    destination, service = make_destination()

    result = destination.update_file("old-id", "MEMORY.md", "new content")

    assert result == {'id': 'old-id'}
    kwargs = service.files.return_value.update.call_args.kwargs
    assert kwargs['fileId'] == "old-id"
    assert kwargs['body'] == {'name': 'MEMORY.md'}


def test_create_permission_request():
    destination, service = make_destination()

    destination.create_permission("root-id", "writer", "anyone")

    service.permissions.return_value.create.assert_called_once_with(
        fileId="root-id", body={'role': 'writer', 'type': 'anyone'},
    )


def test_urls():
    assert folder_url("abc") == "https://drive.google.com/drive/folders/abc"
    assert file_edit_url("xyz") == "https://drive.google.com/file/d/xyz/edit"
