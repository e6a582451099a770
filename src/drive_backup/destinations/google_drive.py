"""Google Drive destination handler."""

import logging
from typing import Any, Dict, Optional

from googleapiclient.http import MediaInMemoryUpload

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
MARKDOWN_MIME_TYPE = "text/markdown"
UPLOAD_FIELDS = "id,modifiedTime,webViewLink"


def folder_url(folder_id: str) -> str:
    """Web URL of a Drive folder."""
    return f"https://drive.google.com/drive/folders/{folder_id}"


def file_edit_url(file_id: str) -> str:
    """Edit URL of a Drive file."""
    return f"https://drive.google.com/file/d/{file_id}/edit"


class GoogleDriveDestination:
    """Thin wrapper over the Drive v3 files and permissions resources.

    Every call is blocking and raises ``googleapiclient.errors.HttpError``
    on API failures; callers decide what a failure means.
    """

    def __init__(self, service):
        """Initialize Google Drive destination.

        Args:
            service: Authenticated ``drive`` v3 service resource
        """
        self.service = service

    def get_file(self, file_id: str, fields: str = "id,name,mimeType,trashed") -> Dict[str, Any]:
        """Fetch metadata for a file or folder."""
        return self.service.files().get(fileId=file_id, fields=fields).execute()

    def create_folder(self, name: str, parent_id: Optional[str] = None) -> Dict[str, Any]:
        """Create a folder, optionally nested under ``parent_id``."""
        metadata: Dict[str, Any] = {'name': name, 'mimeType': FOLDER_MIME_TYPE}
        if parent_id:
            metadata['parents'] = [parent_id]

        return self.service.files().create(body=metadata, fields="id").execute()

    def create_permission(self, file_id: str, role: str, grantee_type: str) -> Dict[str, Any]:
        """Grant a permission on a file or folder."""
        return self.service.permissions().create(
            fileId=file_id,
            body={'role': role, 'type': grantee_type},
        ).execute()

    def create_file(self, name: str, content: str, parent_id: Optional[str] = None,
                    mimetype: str = MARKDOWN_MIME_TYPE) -> Dict[str, Any]:
        """Create a new file with text content.

        Returns:
            Dictionary with ``id``, ``modifiedTime`` and ``webViewLink``
        """
        metadata: Dict[str, Any] = {'name': name}
        if parent_id:
            metadata['parents'] = [parent_id]

        return self.service.files().create(
            body=metadata,
            media_body=self._media(content, mimetype),
            fields=UPLOAD_FIELDS,
        ).execute()

    def update_file(self, file_id: str, name: str, content: str,
                    mimetype: str = MARKDOWN_MIME_TYPE) -> Dict[str, Any]:
        """Overwrite the content and name of an existing file.

        No freshness check is made: the remote copy is replaced unconditionally.
        """
        return self.service.files().update(
            fileId=file_id,
            body={'name': name},
            media_body=self._media(content, mimetype),
            fields=UPLOAD_FIELDS,
        ).execute()

    def get_user_email(self) -> Optional[str]:
        """Return the e-mail address of the authenticated account."""
        about = self.service.about().get(fields="user").execute()
        return about.get('user', {}).get('emailAddress')

    @staticmethod
    def _media(content: str, mimetype: str) -> MediaInMemoryUpload:
        return MediaInMemoryUpload(content.encode('utf-8'), mimetype=mimetype, resumable=False)
