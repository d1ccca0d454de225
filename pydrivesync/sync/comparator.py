"""File comparison logic for one-way (remote to local) sync."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import RemoteFileRecord

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Actions that can be taken during sync."""

    DOWNLOAD = "download"
    """Download remote file to local (new or updated)"""

    DELETE_LOCAL = "delete_local"
    """Delete local file that no longer exists remotely"""

    SKIP = "skip"
    """Skip file (already up to date)"""


@dataclass(frozen=True)
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    name: str
    """File name (the reconciliation key)"""

    reason: str
    """Human-readable reason for this decision"""

    remote_file: Optional[RemoteFileRecord] = None
    """Remote file (set for DOWNLOAD and SKIP)"""

    is_new: bool = False
    """True if the file does not exist locally (DOWNLOAD only)"""

    @classmethod
    def download(cls, remote_file: RemoteFileRecord, is_new: bool) -> "SyncDecision":
        return cls(
            action=SyncAction.DOWNLOAD,
            name=remote_file.name,
            reason="New remote file" if is_new else "Remote file is newer",
            remote_file=remote_file,
            is_new=is_new,
        )

    @classmethod
    def delete(cls, name: str) -> "SyncDecision":
        return cls(
            action=SyncAction.DELETE_LOCAL,
            name=name,
            reason="File deleted from cloud",
        )


class FileComparator:
    """Compares a remote manifest against a local manifest.

    The remote side always wins: files are downloaded when missing or
    strictly newer remotely, and local files without a remote counterpart
    are deleted. Nothing is ever uploaded.
    """

    def compare_single_file(
        self, remote_file: RemoteFileRecord, local_mtime: Optional[int]
    ) -> SyncDecision:
        """Decide what to do with one remote file.

        Args:
            remote_file: Remote file record
            local_mtime: Local modified time (epoch ms), None if absent locally

        Returns:
            SyncDecision (DOWNLOAD or SKIP)
        """
        if local_mtime is None:
            return SyncDecision.download(remote_file, is_new=True)

        # Equal timestamps are up to date
        if remote_file.modified_time > local_mtime:
            return SyncDecision.download(remote_file, is_new=False)

        return SyncDecision(
            action=SyncAction.SKIP,
            name=remote_file.name,
            reason="File up to date",
            remote_file=remote_file,
        )

    def compare_files(
        self,
        remote_files: Sequence[RemoteFileRecord],
        local_files: Mapping[str, int],
    ) -> list[SyncDecision]:
        """Compute the actions that make local mirror remote.

        Downloads are returned in remote listing order, followed by deletes
        in local listing order. Up-to-date files produce no decision.

        Args:
            remote_files: Remote manifest
            local_files: Local manifest mapping name to modified time

        Returns:
            List of DOWNLOAD and DELETE_LOCAL decisions
        """
        downloads: list[SyncDecision] = []
        remote_names: set[str] = set()

        for remote_file in remote_files:
            remote_names.add(remote_file.name)
            decision = self.compare_single_file(
                remote_file, local_files.get(remote_file.name)
            )
            logger.debug("%s: %s", decision.name, decision.reason)
            if decision.action == SyncAction.DOWNLOAD:
                downloads.append(decision)

        deletes = [
            SyncDecision.delete(name)
            for name in local_files
            if name not in remote_names
        ]
        for decision in deletes:
            logger.debug("%s: %s", decision.name, decision.reason)

        return downloads + deletes

    @staticmethod
    def count_skipped(remote_count: int, decisions: Sequence[SyncDecision]) -> int:
        """Number of remote files that need no action.

        Args:
            remote_count: Number of files in the remote manifest
            decisions: Decisions computed for that manifest
        """
        downloads = sum(1 for d in decisions if d.action == SyncAction.DOWNLOAD)
        return remote_count - downloads


def reconcile(
    remote_files: Sequence[RemoteFileRecord], local_files: Mapping[str, int]
) -> list[SyncDecision]:
    """Compute DOWNLOAD and DELETE_LOCAL decisions for two manifests.

    Pure function, see ``FileComparator.compare_files``.
    """
    return FileComparator().compare_files(remote_files, local_files)
