"""Exceptions for pydrivesync.

Only ``RemoteUnavailableError`` and ``LocalUnavailableError`` abort a sync
pass. ``TransferError`` is raised for a single file and absorbed by the
executor into the ``failed`` counter.
"""


class DriveSyncError(Exception):
    """Base exception for all pydrivesync errors."""


class DriveConfigError(DriveSyncError):
    """Raised when configuration is missing or invalid."""


class RemoteUnavailableError(DriveSyncError):
    """Raised when the remote store cannot be reached or refuses access."""


class DriveAuthenticationError(RemoteUnavailableError):
    """Raised when the access token is missing, invalid or expired."""


class DrivePermissionError(RemoteUnavailableError):
    """Raised when the token lacks permission for the requested resource."""


class DriveNotFoundError(RemoteUnavailableError):
    """Raised when a remote resource addressed by id does not exist."""


class DriveRateLimitError(RemoteUnavailableError):
    """Raised when the remote API rejects the request due to rate limiting."""


class DriveNetworkError(RemoteUnavailableError):
    """Raised on transport failures (DNS, connection reset, timeout)."""


class DriveInvalidResponseError(RemoteUnavailableError):
    """Raised when the remote API returns a response that cannot be parsed."""


class LocalUnavailableError(DriveSyncError):
    """Raised when the selected local directory can no longer be resolved."""


class TransferError(DriveSyncError):
    """Raised when a single file could not be written locally."""


class DriveDownloadError(TransferError):
    """Raised when streaming a remote file's content fails."""


class SyncCancelledError(TransferError):
    """Raised inside a transfer when the worker is shutting down."""
