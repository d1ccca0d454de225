"""CLI progress display for sync operations.

This module provides a Rich-based progress display that receives the
sync engine's callbacks.
"""

from typing import Optional

from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .sync.executor import SyncResult
from .sync.progress import SyncCallbacks


class SyncProgressDisplay(SyncCallbacks):
    """Rich-based progress display for a sync pass.

    The engine calls back from its worker thread. Rich's ``Progress`` is
    safe to update from there while the display is active.

    The display also remembers how the pass ended so the CLI can report
    it after the context exits.
    """

    def __init__(self, enabled: bool = True) -> None:
        """Initialize the progress display.

        Args:
            enabled: Render a progress bar (callbacks are still recorded
                     when disabled)
        """
        self.enabled = enabled
        self.result: Optional[SyncResult] = None
        self.failure: Optional[str] = None
        self.selection_required = False
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def on_progress(self, completed: int, total: int) -> None:
        if self._progress is None or self._task is None:
            return
        if total == 0:
            self._progress.update(
                self._task, description="Nothing to download", total=1, completed=1
            )
            return
        self._progress.update(
            self._task,
            description="Downloading",
            total=total,
            completed=completed,
        )

    def on_sync_complete(self, result: SyncResult) -> None:
        self.result = result

    def on_sync_failed(self, reason: str) -> None:
        self.failure = reason

    def on_selection_required(self) -> None:
        self.selection_required = True

    def __enter__(self) -> "SyncProgressDisplay":
        """Enter context manager - start progress display."""
        if not self.enabled:
            return self

        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            refresh_per_second=4,
        )
        self._progress.__enter__()
        self._task = self._progress.add_task("Fetching file lists...", total=None)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            if self._task is not None:
                if self.failure:
                    description = "Sync failed"
                else:
                    description = "Sync complete"
                self._progress.update(self._task, description=description)
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._task = None
