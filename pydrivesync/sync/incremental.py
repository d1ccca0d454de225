"""Single-file reconciliation driven by remote change notifications."""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from ..models import ChangeEvent, ChangeKind, RemoteFileRecord
from .comparator import SyncDecision
from .executor import SyncExecutor
from .scanner import ManifestScanner
from .state import SelectedFolders

logger = logging.getLogger(__name__)


class IncrementalOutcome(str, Enum):
    """Result of handling one change event."""

    DOWNLOADED = "downloaded"
    UPDATED = "updated"
    DELETED = "deleted"
    UP_TO_DATE = "up_to_date"
    NOT_FOUND = "not_found"
    NO_OP = "no_op"
    FAILED = "failed"


class IncrementalReconciler:
    """Applies one remote change without re-listing the remote folder.

    Looking a file up remotely is a point query by name. A file that is no
    longer there (deleted again before the event was processed) yields
    ``IncrementalOutcome.NOT_FOUND``, not an error.
    """

    def __init__(self, scanner: ManifestScanner, executor: SyncExecutor):
        """Initialize incremental reconciler.

        Args:
            scanner: Manifest scanner (provides both stores)
            executor: Executor whose single-file path performs downloads
        """
        self.scanner = scanner
        self.executor = executor

    def handle(
        self, selection: SelectedFolders, event: ChangeEvent
    ) -> IncrementalOutcome:
        """Handle one change event.

        Args:
            selection: Complete folder selection
            event: Change notification

        Returns:
            IncrementalOutcome describing what was done

        Raises:
            LocalUnavailableError: If the local directory is not accessible
            RemoteUnavailableError: If a remote lookup fails
            ValueError: If the selection is incomplete
        """
        folder_id = selection.remote_folder_id
        directory = selection.local_dir
        if not folder_id or directory is None:
            raise ValueError("Both a remote folder and a local directory are required")

        local_files = self.scanner.fetch_local_manifest(directory)
        local_mtime = local_files.get(event.file_name)

        logger.debug(
            "Handling %s for %s (local mtime=%s)",
            event.kind.value,
            event.file_name,
            local_mtime,
        )

        if event.kind == ChangeKind.CREATED:
            if local_mtime is not None:
                return IncrementalOutcome.UP_TO_DATE
            return self._download(folder_id, event.file_name, directory, is_new=True)

        if event.kind == ChangeKind.UPDATED:
            return self._handle_updated(folder_id, event, directory, local_mtime)

        # ChangeKind.DELETED
        if local_mtime is None:
            logger.debug("%s not present locally, nothing to delete", event.file_name)
            return IncrementalOutcome.NO_OP
        if self.executor.operations.delete_local(directory, event.file_name):
            logger.info("Deleted local file %s", event.file_name)
            return IncrementalOutcome.DELETED
        logger.error("Failed to delete: %s", event.file_name)
        return IncrementalOutcome.FAILED

    def _handle_updated(
        self,
        folder_id: str,
        event: ChangeEvent,
        directory: Path,
        local_mtime: Optional[int],
    ) -> IncrementalOutcome:
        remote_file: Optional[RemoteFileRecord] = None
        remote_mtime = event.remote_modified_time

        if remote_mtime is None:
            remote_file = self.scanner.remote_store.find_file_by_name(
                folder_id, event.file_name
            )
            if remote_file is None:
                logger.debug("%s no longer exists remotely", event.file_name)
                return IncrementalOutcome.NOT_FOUND
            remote_mtime = remote_file.modified_time

        if local_mtime is not None and remote_mtime <= local_mtime:
            return IncrementalOutcome.UP_TO_DATE

        return self._download(
            folder_id,
            event.file_name,
            directory,
            is_new=local_mtime is None,
            remote_file=remote_file,
        )

    def _download(
        self,
        folder_id: str,
        name: str,
        directory: Path,
        is_new: bool,
        remote_file: Optional[RemoteFileRecord] = None,
    ) -> IncrementalOutcome:
        if remote_file is None:
            remote_file = self.scanner.remote_store.find_file_by_name(folder_id, name)
        if remote_file is None:
            logger.debug("%s no longer exists remotely", name)
            return IncrementalOutcome.NOT_FOUND

        decision = SyncDecision.download(remote_file, is_new=is_new)
        if not self.executor.download_one(decision, directory):
            return IncrementalOutcome.FAILED

        if is_new:
            outcome = IncrementalOutcome.DOWNLOADED
        else:
            outcome = IncrementalOutcome.UPDATED
        logger.info("%s %s", outcome.value.capitalize(), name)
        return outcome
