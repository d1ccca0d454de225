"""Execution of sync decisions with per-file failure isolation."""

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Optional

from ..exceptions import TransferError
from .comparator import FileComparator, SyncAction, SyncDecision
from .operations import SyncOperations
from .progress import ProgressCallback

logger = logging.getLogger(__name__)

SYNC_CANCELLED = "Sync cancelled"


@dataclass
class SyncResult:
    """Counters of a sync pass.

    Invariants after ``SyncExecutor.execute`` runs to completion:
    ``downloaded + updated + failed`` equals the number of DOWNLOAD
    decisions and ``skipped`` equals the remote file count minus that number.
    A cancelled pass has ``error`` set and counts only what was attempted.
    """

    downloaded: int = 0
    """New files written locally"""

    updated: int = 0
    """Existing local files replaced with a newer remote version"""

    skipped: int = 0
    """Remote files already up to date"""

    failed: int = 0
    """Downloads that could not be completed (partial files removed)"""

    deleted: int = 0
    """Local files removed because they no longer exist remotely"""

    error: Optional[str] = None
    """Reason the pass was aborted, None if it ran to completion"""

    @property
    def total_to_sync(self) -> int:
        return self.downloaded + self.updated + self.failed

    def to_dict(self) -> dict:
        """Convert result to dictionary for JSON serialization."""
        return asdict(self)

    def summary(self) -> str:
        """One-line human-readable summary."""
        return (
            f"Downloaded: {self.downloaded}, Updated: {self.updated}, "
            f"Skipped: {self.skipped}, Failed: {self.failed}, "
            f"Deleted: {self.deleted}"
        )


class SyncExecutor:
    """Applies sync decisions to the local directory."""

    def __init__(
        self,
        operations: SyncOperations,
        should_cancel: Optional[Callable[[], bool]] = None,
    ):
        """Initialize sync executor.

        Args:
            operations: Single-file operations
            should_cancel: Optional hook checked before every action; when
                it returns True the pass stops and the remaining decisions
                are left unapplied
        """
        self.operations = operations
        self.should_cancel = should_cancel

    def _cancelled(self) -> bool:
        return self.should_cancel is not None and self.should_cancel()

    def execute(
        self,
        decisions: Sequence[SyncDecision],
        directory: Path,
        remote_count: int,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> SyncResult:
        """Execute DOWNLOAD decisions, then DELETE_LOCAL decisions.

        Per-file failures are recovered and reflected in the counters,
        they are never raised. When cancellation is requested, no further
        entry is touched: the pass stops before the next download or delete
        and returns the partial counters with ``error`` set.

        Args:
            decisions: Decisions from the comparator
            directory: Local directory handle
            remote_count: Number of files in the remote manifest
            progress_callback: Optional function(completed, total) called
                after every download; called once with (0, 0) if there is
                nothing to download

        Returns:
            SyncResult with all counters set
        """
        downloads = [d for d in decisions if d.action == SyncAction.DOWNLOAD]
        deletes = [d for d in decisions if d.action == SyncAction.DELETE_LOCAL]
        total = len(downloads)

        result = SyncResult(
            skipped=FileComparator.count_skipped(remote_count, decisions)
        )
        logger.info("%d files to sync, %d to delete", total, len(deletes))

        if total == 0 and progress_callback:
            progress_callback(0, 0)

        for completed, decision in enumerate(downloads, start=1):
            if self._cancelled():
                return self._abandon(result)
            if self.download_one(decision, directory):
                if decision.is_new:
                    result.downloaded += 1
                else:
                    result.updated += 1
            else:
                result.failed += 1
            if progress_callback:
                progress_callback(completed, total)

        logger.debug("Skipped (already up to date): %d", result.skipped)
        if self._cancelled():
            return self._abandon(result)

        for decision in deletes:
            if self._cancelled():
                return self._abandon(result)
            logger.debug("Deleting local file not in cloud: %s", decision.name)
            if self.operations.delete_local(directory, decision.name):
                result.deleted += 1
                logger.debug("Deleted: %s", decision.name)
            else:
                logger.error("Failed to delete: %s", decision.name)

        logger.info("Sync complete. %s", result.summary())
        return result

    def _abandon(self, result: SyncResult) -> SyncResult:
        result.error = SYNC_CANCELLED
        logger.warning("Sync cancelled. %s", result.summary())
        return result

    def download_one(self, decision: SyncDecision, directory: Path) -> bool:
        """Execute a single DOWNLOAD decision.

        Args:
            decision: DOWNLOAD decision
            directory: Local directory handle

        Returns:
            True on success, False if the transfer failed
        """
        if decision.remote_file is None:
            logger.error("Download decision for %s has no remote file", decision.name)
            return False

        try:
            self.operations.download_file(decision.remote_file, directory)
        except TransferError as e:
            logger.error("Failed to download %s: %s", decision.name, e)
            return False

        if decision.is_new:
            logger.debug("Downloaded new file: %s", decision.name)
        else:
            logger.debug("Updated file: %s", decision.name)
        return True
