"""Folder selection state and its persistence.

The selection pairs a remote folder with a local directory. It is restored
at startup and must be verified (local directory still accessible) before
it is used for a sync.
"""

import json
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectedFolders:
    """The user's chosen remote folder and local directory."""

    remote_folder_id: Optional[str] = None
    """Remote folder ID"""

    remote_folder_name: Optional[str] = None
    """Remote folder display name"""

    local_dir: Optional[Path] = None
    """Local directory handle"""

    @property
    def is_complete(self) -> bool:
        """True when both a remote folder and a local directory are selected."""
        return bool(self.remote_folder_id) and self.local_dir is not None

    def with_remote_folder(self, folder_id: str, folder_name: str) -> "SelectedFolders":
        return replace(self, remote_folder_id=folder_id, remote_folder_name=folder_name)

    def with_local_dir(self, local_dir: Optional[Path]) -> "SelectedFolders":
        return replace(self, local_dir=local_dir)

    def to_dict(self) -> dict:
        """Convert selection to dictionary for JSON serialization."""
        return {
            "drive_folder_id": self.remote_folder_id,
            "drive_folder_name": self.remote_folder_name,
            "local_folder": str(self.local_dir) if self.local_dir else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SelectedFolders":
        """Create SelectedFolders from dictionary."""
        local = data.get("local_folder")
        return cls(
            remote_folder_id=data.get("drive_folder_id"),
            remote_folder_name=data.get("drive_folder_name"),
            local_dir=Path(local) if local else None,
        )


class SelectionStore:
    """Persists the folder selection as a JSON file.

    The file is stored in the user's config directory by default. Saving
    ``None`` removes the file.
    """

    def __init__(self, path: Optional[Path] = None):
        """Initialize selection store.

        Args:
            path: JSON file path. Defaults to
                  ~/.config/pydrivesync/selection.json
        """
        if path is None:
            path = Path.home() / ".config" / "pydrivesync" / "selection.json"
        self.path = path

    def load_selection(self) -> Optional[SelectedFolders]:
        """Load the saved selection.

        Returns:
            SelectedFolders if found, None otherwise
        """
        if not self.path.exists():
            logger.debug("No saved selection at %s", self.path)
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            selection = SelectedFolders.from_dict(data)
            logger.debug(
                "Loaded selection %s -> %s (saved %s)",
                selection.remote_folder_name,
                selection.local_dir,
                data.get("saved_at"),
            )
            return selection
        except (OSError, json.JSONDecodeError, AttributeError) as e:
            logger.warning("Failed to load saved selection: %s", e)
            return None

    def save_selection(self, selection: Optional[SelectedFolders]) -> None:
        """Save the selection, or clear it when ``selection`` is None.

        Args:
            selection: Selection to persist
        """
        if selection is None:
            self.clear_selection()
            return

        data = selection.to_dict()
        data["saved_at"] = datetime.now().isoformat()

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            logger.debug("Saved selection to %s", self.path)
        except OSError as e:
            logger.warning("Failed to save selection: %s", e)

    def clear_selection(self) -> bool:
        """Remove the saved selection.

        Returns:
            True if a selection was cleared, False if none existed
        """
        if self.path.exists():
            self.path.unlink()
            logger.debug("Cleared selection at %s", self.path)
            return True
        return False
