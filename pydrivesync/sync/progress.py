"""Progress and result callbacks exposed by the sync engine.

Callbacks are invoked from the sync worker thread. UI code that is not
thread-safe must hand them over to its own thread.
"""

from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from .executor import SyncResult

ProgressCallback = Callable[[int, int], None]
"""function(completed, total) invoked after every download action"""


class SyncCallbacks:
    """Receiver of sync events. Subclass and override what you need.

    Examples:
        >>> class Printer(SyncCallbacks):
        ...     def on_sync_complete(self, result):
        ...         print(result.summary())
        >>> engine = SyncEngine(client, LocalDirectoryStore(), store, Printer())
    """

    def on_progress(self, completed: int, total: int) -> None:
        """Called after each download action of a full pass."""

    def on_sync_complete(self, result: "SyncResult") -> None:
        """Called when a full pass finished (possibly with per-file failures)."""

    def on_sync_failed(self, reason: str) -> None:
        """Called when a full pass was aborted before execution."""

    def on_selection_required(self) -> None:
        """Called when the folder selection was cleared and must be re-made."""
