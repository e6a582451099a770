"""Create-or-update upload of local text files."""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..destinations.google_drive import MARKDOWN_MIME_TYPE, GoogleDriveDestination
from .state_store import StateStore

logger = logging.getLogger(__name__)


class FileUploader:
    """Upload a local file, reusing the remote object recorded for its path."""

    def __init__(self, destination: GoogleDriveDestination, store: StateStore,
                 default_parent_id: Optional[str] = None):
        """Initialize file uploader.

        Args:
            destination: Drive destination handler
            store: Sync state store holding known file ids
            default_parent_id: Folder used when no parent is given
        """
        self.destination = destination
        self.store = store
        self.default_parent_id = default_parent_id

    def upload(self, local_path: str, display_name: Optional[str] = None,
               parent_folder_id: Optional[str] = None) -> Dict[str, Any]:
        """Upload a file, updating the existing remote object when one is known.

        Args:
            local_path: Path of the file, also the key in the sync state
            display_name: Remote file name (defaults to the basename)
            parent_folder_id: Target folder for newly created files

        Returns:
            Dictionary with ``id``, ``modifiedTime`` and ``webViewLink``
        """
        name = display_name or Path(local_path).name
        parent = parent_folder_id or self.default_parent_id

        logger.info(f"📤 Uploading {name}...")

        content = Path(local_path).read_text(encoding='utf-8')

        existing_id = self.store.get_file_id(local_path)
        if existing_id:
            result = self.destination.update_file(existing_id, name, content, MARKDOWN_MIME_TYPE)
            logger.info(f"✅ Updated {name}")
            return result

        result = self.destination.create_file(name, content, parent, MARKDOWN_MIME_TYPE)
        self.store.record_file(local_path, result['id'])
        logger.info(f"✅ Created {name}")
        return result
