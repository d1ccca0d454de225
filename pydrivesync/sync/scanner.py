"""Manifest fetchers for the remote folder and the local directory."""

import logging
import time
from pathlib import Path

from ..exceptions import LocalUnavailableError
from ..models import RemoteFileRecord
from ..protocols import LocalStoreProtocol, RemoteStoreProtocol

logger = logging.getLogger(__name__)


class ManifestScanner:
    """Produces fresh manifests of both sides of a sync.

    Examples:
        >>> scanner = ManifestScanner(DriveClient(), LocalDirectoryStore())
        >>> remote = scanner.fetch_remote_manifest("1AbC...")
        >>> local = scanner.fetch_local_manifest(Path("/sync/folder"))
    """

    def __init__(
        self,
        remote_store: RemoteStoreProtocol,
        local_store: LocalStoreProtocol,
    ):
        """Initialize manifest scanner.

        Args:
            remote_store: Remote store collaborator
            local_store: Local store collaborator
        """
        self.remote_store = remote_store
        self.local_store = local_store

    def fetch_remote_manifest(self, folder_id: str) -> list[RemoteFileRecord]:
        """List the files of the remote folder.

        Sub-folders and trashed items are excluded by the remote store.
        Only the single page returned by the store is used.

        Args:
            folder_id: Remote folder ID

        Returns:
            RemoteFileRecord list in remote listing order

        Raises:
            RemoteUnavailableError: On auth or transport failure
        """
        start = time.time()
        records = list(self.remote_store.list_files(folder_id))
        logger.debug(
            "Remote scan of %s took %.2fs for %d files",
            folder_id,
            time.time() - start,
            len(records),
        )
        return records

    def fetch_local_manifest(self, directory: Path) -> dict[str, int]:
        """List the files of the local directory.

        Args:
            directory: Local directory handle

        Returns:
            Dictionary mapping file name to modified time (epoch ms), in
            local listing order

        Raises:
            LocalUnavailableError: If the directory can no longer be resolved
        """
        if not self.local_store.is_accessible(directory):
            raise LocalUnavailableError(f"Local directory not accessible: {directory}")

        start = time.time()
        try:
            entries = dict(self.local_store.list_entries(directory))
        except OSError as e:
            raise LocalUnavailableError(
                f"Failed to list local directory {directory}: {e}"
            ) from e
        logger.debug(
            "Local scan of %s took %.2fs for %d files",
            directory,
            time.time() - start,
            len(entries),
        )
        return entries
