"""Resolve the remote backup folders, reusing cached ids while they are valid."""

import logging
from typing import Optional

from ..config.settings import ShareOptions, SyncConfig
from ..destinations.google_drive import GoogleDriveDestination
from .state_store import StateStore

logger = logging.getLogger(__name__)

BACKUP_FOLDER_KEY = "backup"
MEMORY_FOLDER_KEY = "memory"


class FolderResolver:
    """Ensure the root backup folder and its memory subfolder exist."""

    def __init__(self, destination: GoogleDriveDestination, store: StateStore, config: SyncConfig):
        self.destination = destination
        self.store = store
        self.config = config

    def _is_valid(self, folder_id: str) -> bool:
        """Check whether a cached folder id still resolves remotely."""
        try:
            metadata = self.destination.get_file(folder_id)
        except Exception as e:
            logger.debug(f"Cached folder {folder_id} did not resolve: {e}")
            return False
        return not metadata.get('trashed', False)

    def ensure_folder(self, key: str, name: str, parent_id: Optional[str] = None,
                      cached_id: Optional[str] = None,
                      share: Optional[ShareOptions] = None) -> str:
        """Return a usable folder id, creating the folder when needed.

        Args:
            key: Name under which the id is stored in the sync state
            name: Folder display name
            parent_id: Parent folder id (None for a top-level folder)
            cached_id: Previously stored id to try first
            share: Permission to grant when the folder is newly created

        Returns:
            Folder id

        Raises:
            googleapiclient.errors.HttpError: If creating or sharing the folder fails
        """
        if cached_id:
            if self._is_valid(cached_id):
                logger.info(f"📁 Using existing {name} folder")
                return cached_id
            logger.info(f"📁 Cached {name} folder not found, creating new one...")

        logger.info(f"📁 Creating \"{name}\" folder...")
        folder_id = self.destination.create_folder(name, parent_id)['id']

        if share is not None:
            self.destination.create_permission(folder_id, share.role.value, share.type.value)
            logger.info(f"✅ {name} folder created and shared ({share.type.value}: {share.role.value})")
        else:
            logger.info(f"✅ {name} folder created")

        self.store.set_folder(key, folder_id)
        return folder_id

    def ensure_backup_folder(self) -> str:
        """Resolve the root backup folder, sharing it when it is created."""
        cached_id = self.store.get_folder(BACKUP_FOLDER_KEY)
        folder_id = self.ensure_folder(
            BACKUP_FOLDER_KEY,
            self.config.backup_folder_name,
            cached_id=cached_id,
            share=self.config.share,
        )
        if folder_id != cached_id and self.store.state.folders.keys() - {BACKUP_FOLDER_KEY}:
            # Subfolders lived inside the old root and are recreated under the new one
            self.store.state.folders = {BACKUP_FOLDER_KEY: folder_id}
            self.store.save()
        return folder_id

    def ensure_memory_folder(self, backup_folder_id: str) -> str:
        """Resolve the memory subfolder under the root backup folder."""
        return self.ensure_folder(
            MEMORY_FOLDER_KEY,
            self.config.memory_folder_name,
            parent_id=backup_folder_id,
            cached_id=self.store.get_folder(MEMORY_FOLDER_KEY),
        )
