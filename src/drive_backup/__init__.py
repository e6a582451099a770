"""
Google Drive Backup Application

Backs up a fixed set of notes and dated memory files to a shared Google Drive
folder, either on demand or continuously as the files change.
"""

__version__ = "1.0.0"
__author__ = "Drive Backup Tool"
__description__ = "Back up notes and daily memory files to Google Drive"

from .config.settings import SyncConfig
from .sync.backup_manager import BackupManager

__all__ = ["SyncConfig", "BackupManager"]
