"""Sync engine for backup operations."""

from .backup_manager import BackupManager, SyncResults
from .state_store import StateStore, SyncState
from .watcher import ChangeWatcher, UploadQueue

__all__ = ["BackupManager", "SyncResults", "StateStore", "SyncState", "ChangeWatcher", "UploadQueue"]
