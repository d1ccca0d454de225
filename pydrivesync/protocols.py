"""Collaborator protocols consumed by the sync engine.

The engine never talks to Google Drive or the filesystem directly. It calls
these primitives, which makes it possible to run the engine against
``DriveClient``/``LocalDirectoryStore`` in production and against in-memory
fakes in tests.
"""

from pathlib import Path
from typing import IO, Any, Callable, Optional, Protocol

from .models import RemoteFileRecord, RemoteFolder


class RemoteStoreProtocol(Protocol):
    """Read-only access to the remote folder store.

    All methods raise ``RemoteUnavailableError`` (or a subclass) on
    authentication or transport failures.
    """

    def list_folders(self) -> list[RemoteFolder]:
        """List selectable folders."""
        ...

    def list_files(self, folder_id: str) -> list[RemoteFileRecord]:
        """List non-folder, non-trashed files directly inside a folder."""
        ...

    def find_file_by_name(
        self, folder_id: str, name: str
    ) -> Optional[RemoteFileRecord]:
        """Look up a single file by exact name. Returns None when not found."""
        ...

    def download_to_stream(
        self,
        file_id: str,
        sink: IO[bytes],
        should_cancel: Optional[Callable[[], bool]] = None,
    ) -> bool:
        """Stream a file's content into ``sink``. Returns True on success."""
        ...


class LocalStoreProtocol(Protocol):
    """Access to the local directory that mirrors the remote folder."""

    def is_accessible(self, directory: Path) -> bool:
        """Check whether the directory handle still resolves."""
        ...

    def list_entries(self, directory: Path) -> dict[str, int]:
        """Map non-directory entry names to modified time (epoch ms)."""
        ...

    def create_or_reuse(
        self, directory: Path, name: str, mime_type: str
    ) -> Optional[Any]:
        """Return an entry handle for ``name``, creating it if needed."""
        ...

    def open_for_write(self, entry: Any) -> Optional[IO[bytes]]:
        """Open an entry for writing (truncating). Returns None on failure."""
        ...

    def delete(self, directory: Path, name: str) -> bool:
        """Delete a non-directory entry by name. Returns True if deleted."""
        ...


class SelectionStoreProtocol(Protocol):
    """Persistence of the user's folder selection."""

    def load_selection(self) -> Optional[Any]:
        """Return the saved ``SelectedFolders`` or None."""
        ...

    def save_selection(self, selection: Optional[Any]) -> None:
        """Persist ``SelectedFolders``, or clear it when None."""
        ...
