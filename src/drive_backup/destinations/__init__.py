"""Backup destinations."""

from .google_drive import GoogleDriveDestination, file_edit_url, folder_url

__all__ = ["GoogleDriveDestination", "folder_url", "file_edit_url"]
