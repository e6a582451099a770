"""Authentication module for the Google Drive API."""

from .google_auth import GoogleDriveAuth

__all__ = ["GoogleDriveAuth"]
