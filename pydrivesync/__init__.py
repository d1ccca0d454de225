"""PyDriveSync - mirror a Google Drive folder into a local directory."""

from .api import DriveClient
from .exceptions import (
    DriveAuthenticationError,
    DriveConfigError,
    DriveDownloadError,
    DriveInvalidResponseError,
    DriveNetworkError,
    DriveNotFoundError,
    DrivePermissionError,
    DriveRateLimitError,
    DriveSyncError,
    LocalUnavailableError,
    RemoteUnavailableError,
    SyncCancelledError,
    TransferError,
)
from .local_storage import LocalDirectoryStore
from .models import ChangeEvent, ChangeKind, RemoteFileRecord, RemoteFolder
from .sync import SelectionStore, SyncEngine, SyncResult

__version__ = "0.1.0"

__all__ = [
    "DriveClient",
    "LocalDirectoryStore",
    "SelectionStore",
    "SyncEngine",
    "SyncResult",
    "ChangeEvent",
    "ChangeKind",
    "RemoteFolder",
    "RemoteFileRecord",
    "DriveSyncError",
    "DriveConfigError",
    "RemoteUnavailableError",
    "DriveAuthenticationError",
    "DrivePermissionError",
    "DriveNotFoundError",
    "DriveRateLimitError",
    "DriveNetworkError",
    "DriveInvalidResponseError",
    "LocalUnavailableError",
    "TransferError",
    "DriveDownloadError",
    "SyncCancelledError",
]
