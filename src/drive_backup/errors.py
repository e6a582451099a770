"""Exception types raised by the backup application."""


class DriveBackupError(Exception):
    """Base exception for Drive backup errors."""

    pass


class AuthenticationError(DriveBackupError):
    """Raised when credentials or the stored token cannot be used."""

    pass


class InitializationError(DriveBackupError):
    """Raised when the sync engine cannot be brought up.

    Covers missing credentials and remote failures while resolving the
    backup folders. Never retried.
    """

    pass


class NotInitializedError(DriveBackupError):
    """Raised when an operation needs folder ids that were never resolved."""

    pass
