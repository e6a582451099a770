"""Main backup manager orchestrating the sync process."""

import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..auth.google_auth import GoogleDriveAuth
from ..config.settings import CredentialsConfig, SyncConfig
from ..destinations.google_drive import GoogleDriveDestination, file_edit_url, folder_url
from ..errors import InitializationError, NotInitializedError
from ..utils.file_utils import FileHelper
from ..utils.logging import TimedOperation
from .folders import FolderResolver
from .state_store import StateStore
from .uploader import FileUploader

# Module logger
logger = logging.getLogger(__name__)


@dataclass
class SyncResults:
    """Per-file outcomes of a full sync."""
    uploaded: List[Dict[str, Any]] = field(default_factory=list)
    skipped: List[Dict[str, Any]] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    duration: float = 0.0

    def summary(self) -> Dict[str, int]:
        return {
            'uploaded': len(self.uploaded),
            'skipped': len(self.skipped),
            'errors': len(self.errors),
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class BackupManager:
    """Main backup manager that owns the Drive connection, state and folder ids."""

    def __init__(self, config: SyncConfig, credentials: Optional[CredentialsConfig] = None,
                 destination: Optional[GoogleDriveDestination] = None):
        """Initialize backup manager.

        Args:
            config: Sync configuration
            credentials: Credential file locations (used when no destination is given)
            destination: Pre-built Drive destination, mainly for tests
        """
        self.config = config
        self.credentials = credentials or CredentialsConfig()
        self.destination = destination
        self.store = StateStore(config.state_path)
        self.uploader: Optional[FileUploader] = None
        self.backup_folder_id: Optional[str] = None
        self.memory_folder_id: Optional[str] = None

    def initialize(self):
        """Authenticate, load state and resolve the backup folders.

        Raises:
            InitializationError: On any failure; the caller is expected to exit
        """
        logger.info("🔄 Initializing Google Drive sync...")

        try:
            if self.destination is None:
                auth = GoogleDriveAuth(self.credentials)
                self.destination = GoogleDriveDestination(auth.get_drive_service())

            self.store.load()

            resolver = FolderResolver(self.destination, self.store, self.config)
            self.backup_folder_id = resolver.ensure_backup_folder()
            self.memory_folder_id = resolver.ensure_memory_folder(self.backup_folder_id)
        except Exception as e:
            logger.error(f"❌ Failed to initialize Google Drive sync: {e}")
            raise InitializationError(str(e)) from e

        self.uploader = FileUploader(self.destination, self.store, self.backup_folder_id)
        logger.info("✅ Google Drive sync initialized")

    def _require_initialized(self):
        if self.uploader is None or not self.backup_folder_id:
            raise NotInitializedError("Backup folder not initialized")

    def parent_folder_for(self, local_path: str) -> Optional[str]:
        """Pick the remote folder for a local path.

        Files under the memory directory go to the memory subfolder,
        everything else to the root backup folder.
        """
        if FileHelper.is_within(local_path, self.config.memory_dir):
            return self.memory_folder_id
        return self.backup_folder_id

    def upload_file(self, local_path: str, file_name: Optional[str] = None,
                    parent_folder_id: Optional[str] = None) -> Dict[str, Any]:
        """Upload one file to its folder (or ``parent_folder_id`` when given)."""
        self._require_initialized()
        parent = parent_folder_id or self.parent_folder_for(local_path)
        return self.uploader.upload(local_path, file_name or Path(local_path).name, parent)

    def _sync_one(self, local_path: str, parent_folder_id: Optional[str], results: SyncResults):
        try:
            result = self.upload_file(local_path, Path(local_path).name, parent_folder_id)
            results.uploaded.append({
                'file': local_path,
                'id': result.get('id'),
                'url': result.get('webViewLink'),
            })
        except Exception as e:
            logger.error(f"❌ Error syncing {local_path}: {e}")
            results.errors.append({'file': local_path, 'error': str(e)})

    def sync_all(self) -> SyncResults:
        """Upload every tracked file and every dated memory file.

        Per-file failures are recorded and never abort the remaining files.
        """
        self._require_initialized()
        results = SyncResults()

        with TimedOperation(logger, "full sync") as timer:
            for local_path in self.config.sync_files:
                if FileHelper.content_hash(local_path) is None:
                    logger.warning(f"⚠️ File not found: {local_path}")
                    results.skipped.append({'file': local_path, 'reason': 'not found'})
                    continue

                self._sync_one(local_path, self.backup_folder_id, results)

            memory_dir = Path(self.config.memory_dir)
            try:
                daily_files = FileHelper.list_matching(memory_dir, self.config.memory_file_pattern)
            except OSError as e:
                logger.error(f"❌ Error reading {memory_dir} directory: {e}")
                daily_files = []

            for file_name in daily_files:
                self._sync_one(str(memory_dir / file_name), self.memory_folder_id, results)

        results.duration = timer.duration
        return results

    def get_folder_url(self) -> str:
        """Web URL of the root backup folder."""
        if not self.backup_folder_id:
            raise NotInitializedError("Backup folder not initialized")
        return folder_url(self.backup_folder_id)

    def get_shareable_links(self) -> Dict[str, Any]:
        """Root folder URL plus an edit URL per tracked local file."""
        return {
            'folder': self.get_folder_url(),
            'files': {
                local_path: file_edit_url(file_id)
                for local_path, file_id in self.store.state.files.items()
            },
        }
