"""Single-file sync operations shared by full and incremental passes."""

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from ..exceptions import SyncCancelledError, TransferError
from ..models import RemoteFileRecord
from ..protocols import LocalStoreProtocol, RemoteStoreProtocol

logger = logging.getLogger(__name__)


class SyncOperations:
    """Download and delete primitives with rollback of partial writes."""

    def __init__(
        self,
        remote_store: RemoteStoreProtocol,
        local_store: LocalStoreProtocol,
        should_cancel: Optional[Callable[[], bool]] = None,
    ):
        """Initialize sync operations.

        Args:
            remote_store: Remote store collaborator
            local_store: Local store collaborator
            should_cancel: Optional hook polled during transfers; when it
                returns True the current transfer is abandoned
        """
        self.remote_store = remote_store
        self.local_store = local_store
        self.should_cancel = should_cancel

    def download_file(self, remote_file: RemoteFileRecord, directory: Path) -> None:
        """Download a remote file into the local directory.

        The destination entry is created or reused by name, truncated and
        filled with the remote content. On any failure the destination entry
        is deleted so that no truncated file survives.

        Args:
            remote_file: Remote file to download
            directory: Local directory handle

        Raises:
            TransferError: If the file could not be fully written
        """
        if self.should_cancel is not None and self.should_cancel():
            raise SyncCancelledError(f"Download of {remote_file.name} not started")

        start = time.time()
        try:
            entry = self.local_store.create_or_reuse(
                directory, remote_file.name, remote_file.mime_type
            )
        except Exception as e:
            raise TransferError(
                f"Failed to create local file for {remote_file.name}: {e}"
            ) from e
        if entry is None:
            raise TransferError(f"Failed to create local file for {remote_file.name}")

        try:
            sink = self.local_store.open_for_write(entry)
            if sink is None:
                raise TransferError(
                    f"Failed to open output stream for {remote_file.name}"
                )
            with sink:
                ok = self.remote_store.download_to_stream(
                    remote_file.id, sink, should_cancel=self.should_cancel
                )
            if not ok:
                raise TransferError(f"Download of {remote_file.name} reported failure")
        except Exception as e:
            # Any failure, including remote errors mid-stream, is per-file
            self._discard_partial(directory, remote_file.name)
            if isinstance(e, TransferError):
                raise
            raise TransferError(f"Error downloading {remote_file.name}: {e}") from e

        logger.debug(
            "Download of %s took %.2fs", remote_file.name, time.time() - start
        )

    def _discard_partial(self, directory: Path, name: str) -> None:
        """Delete an incomplete destination entry."""
        try:
            deleted = self.local_store.delete(directory, name)
        except Exception as e:
            logger.warning("Failed to delete incomplete file %s: %s", name, e)
            return
        if deleted:
            logger.debug("Deleted incomplete file: %s", name)
        else:
            logger.warning("Failed to delete incomplete file: %s", name)

    def delete_local(self, directory: Path, name: str) -> bool:
        """Delete a local file by name.

        Args:
            directory: Local directory handle
            name: File name

        Returns:
            True if the file was deleted, False otherwise
        """
        try:
            return bool(self.local_store.delete(directory, name))
        except OSError as e:
            logger.debug("Delete of %s raised: %s", name, e)
            return False
