"""Filesystem implementation of the local directory store."""

import logging
from pathlib import Path
from typing import IO, Optional

logger = logging.getLogger(__name__)


class LocalDirectoryStore:
    """Local store backed by a flat directory on the filesystem.

    Directory handles are ``Path`` objects and entry handles are the
    ``Path`` of the file inside that directory. Sub-directories are never
    listed, created or deleted.
    """

    def is_accessible(self, directory: Path) -> bool:
        """Check if the directory exists and its children can be listed.

        Args:
            directory: Local directory

        Returns:
            True if the directory is accessible, False otherwise
        """
        try:
            if not directory.is_dir():
                return False
            # Listing verifies read permission, not just existence
            next(directory.iterdir(), None)
            return True
        except OSError:
            return False

    def list_entries(self, directory: Path) -> dict[str, int]:
        """Map file names to modified time in epoch milliseconds.

        Args:
            directory: Local directory

        Returns:
            Dictionary of non-directory entry names to modified time

        Raises:
            OSError: If the directory cannot be listed
        """
        entries: dict[str, int] = {}
        for item in sorted(directory.iterdir(), key=lambda p: p.name):
            try:
                if item.is_dir():
                    continue
                stat = item.stat()
            except OSError as e:
                # Entry vanished or is unreadable between listing and stat
                logger.debug("Skipping unreadable entry %s: %s", item, e)
                continue
            entries[item.name] = stat.st_mtime_ns // 1_000_000
        return entries

    def create_or_reuse(
        self, directory: Path, name: str, mime_type: str
    ) -> Optional[Path]:
        """Return the entry for ``name``, creating an empty file if needed.

        Args:
            directory: Local directory
            name: File name
            mime_type: MIME type (unused on a plain filesystem)

        Returns:
            Path of the entry, or None if it cannot be created
        """
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            logger.error("Refusing to create entry with unsafe name: %r", name)
            return None

        entry = directory / name
        try:
            if entry.is_dir():
                logger.error("Cannot reuse %s: it is a directory", entry)
                return None
            entry.touch(exist_ok=True)
        except OSError as e:
            logger.error("Failed to create %s: %s", entry, e)
            return None
        return entry

    def open_for_write(self, entry: Path) -> Optional[IO[bytes]]:
        """Open an entry for writing in truncate mode.

        Args:
            entry: Entry handle from ``create_or_reuse``

        Returns:
            Writable binary stream, or None if opening fails
        """
        try:
            return open(entry, "wb")
        except OSError as e:
            logger.error("Failed to open %s for writing: %s", entry, e)
            return None

    def delete(self, directory: Path, name: str) -> bool:
        """Delete a non-directory entry by name.

        Args:
            directory: Local directory
            name: File name

        Returns:
            True if the entry was deleted, False otherwise
        """
        entry = directory / name
        try:
            if entry.is_dir():
                return False
            entry.unlink()
            return True
        except OSError as e:
            logger.debug("Failed to delete %s: %s", entry, e)
            return False
