"""Sync orchestrator: full passes and push-driven incremental updates."""

import logging
import time
from concurrent.futures import Future
from pathlib import Path
from typing import Any, Callable, Optional

from ..exceptions import LocalUnavailableError, RemoteUnavailableError
from ..models import ChangeEvent, RemoteFolder
from ..protocols import (
    LocalStoreProtocol,
    RemoteStoreProtocol,
    SelectionStoreProtocol,
)
from .comparator import FileComparator
from .executor import SyncExecutor, SyncResult
from .incremental import IncrementalOutcome, IncrementalReconciler
from .operations import SyncOperations
from .progress import SyncCallbacks
from .scanner import ManifestScanner
from .state import SelectedFolders
from .worker import SyncWorker

logger = logging.getLogger(__name__)


class SyncEngine:
    """Core sync engine that mirrors a remote folder into a local directory.

    Every operation is enqueued on a single ``SyncWorker``, so full passes,
    incremental events and selection changes run strictly in arrival order
    and never touch the local directory concurrently. Public methods return
    immediately with a ``Future``; results are also reported through the
    ``SyncCallbacks``.

    Examples:
        >>> engine = SyncEngine(
        ...     DriveClient(), LocalDirectoryStore(), SelectionStore()
        ... )
        >>> engine.restore_selection().result()
        >>> result = engine.request_sync().result()
        >>> print(result.summary())
    """

    def __init__(
        self,
        remote_store: RemoteStoreProtocol,
        local_store: LocalStoreProtocol,
        selection_store: Optional[SelectionStoreProtocol] = None,
        callbacks: Optional[SyncCallbacks] = None,
        worker: Optional[SyncWorker] = None,
    ):
        """Initialize sync engine.

        Args:
            remote_store: Remote store collaborator
            local_store: Local store collaborator
            selection_store: Optional persistence for the folder selection
            callbacks: Receiver of progress/result events
            worker: Worker queue (a new single-thread worker by default)
        """
        self.remote_store = remote_store
        self.local_store = local_store
        self.selection_store = selection_store
        self.callbacks = callbacks or SyncCallbacks()
        self.worker = worker or SyncWorker()

        self.scanner = ManifestScanner(remote_store, local_store)
        self.comparator = FileComparator()
        self.operations = SyncOperations(
            remote_store, local_store, should_cancel=self.worker.is_cancelled
        )
        self.executor = SyncExecutor(
            self.operations, should_cancel=self.worker.is_cancelled
        )
        self.incremental = IncrementalReconciler(self.scanner, self.executor)

        self._selection = SelectedFolders()

    @property
    def selection(self) -> SelectedFolders:
        """Current selection. May be stale when read off the worker thread."""
        return self._selection

    # =========================
    # Selection
    # =========================

    def restore_selection(self) -> "Future[SelectedFolders]":
        """Load the saved selection and verify its local directory."""
        return self.worker.submit(self._restore_selection)

    def select_remote_folder(
        self, folder_id: str, folder_name: str
    ) -> "Future[SelectedFolders]":
        """Set and persist the remote folder."""
        return self.worker.submit(
            self._update_selection, remote=(folder_id, folder_name)
        )

    def select_local_dir(self, local_dir: Path) -> "Future[SelectedFolders]":
        """Set and persist the local directory."""
        return self.worker.submit(self._update_selection, local_dir=local_dir)

    def list_remote_folders(self) -> "Future[list[RemoteFolder]]":
        """List folders that can be selected as the sync source."""
        return self.worker.submit(self.remote_store.list_folders)

    def _restore_selection(self) -> SelectedFolders:
        if self.selection_store is None:
            return self._selection

        loaded = self.selection_store.load_selection()
        if loaded is None:
            return self._selection

        self._selection = loaded
        if loaded.local_dir is not None and not self.local_store.is_accessible(
            loaded.local_dir
        ):
            logger.warning("Saved local folder not accessible: %s", loaded.local_dir)
            self._clear_local_dir()
        return self._selection

    def _update_selection(
        self,
        remote: Optional[tuple[str, str]] = None,
        local_dir: Optional[Path] = None,
    ) -> SelectedFolders:
        selection = self._selection
        if remote is not None:
            selection = selection.with_remote_folder(*remote)
            logger.info("Drive folder selected: %s (ID: %s)", remote[1], remote[0])
        if local_dir is not None:
            selection = selection.with_local_dir(local_dir)
            logger.info("Local folder selected: %s", local_dir)
        self._selection = selection
        self._persist_selection()
        return selection

    def _persist_selection(self) -> None:
        if self.selection_store is not None:
            self.selection_store.save_selection(self._selection)

    def _clear_local_dir(self) -> None:
        """Forget the unresolvable local directory and ask for a new one."""
        self._selection = self._selection.with_local_dir(None)
        self._persist_selection()
        self._notify(self.callbacks.on_selection_required)

    # =========================
    # Full sync
    # =========================

    def request_sync(self) -> "Future[SyncResult]":
        """Enqueue a full sync pass."""
        return self.worker.submit(self._run_sync)

    def _fail(self, reason: str) -> SyncResult:
        logger.error("Sync failed: %s", reason)
        self._notify(self.callbacks.on_sync_failed, reason)
        return SyncResult(error=reason)

    def _run_sync(self) -> SyncResult:
        """Fetch manifests, reconcile, execute and report. Runs on the worker."""
        selection = self._selection
        directory = selection.local_dir

        if directory is None:
            self._notify(self.callbacks.on_selection_required)
            return self._fail("Please select a local folder.")
        if not self.local_store.is_accessible(directory):
            logger.error("Local folder not accessible: %s", directory)
            self._clear_local_dir()
            return self._fail("Local folder not found. Please select a new folder.")
        if not selection.remote_folder_id:
            return self._fail("Please select a Drive folder.")

        logger.info(
            "Starting sync from Drive folder '%s' to local folder '%s'",
            selection.remote_folder_name,
            directory,
        )
        start = time.time()

        try:
            remote_files = self.scanner.fetch_remote_manifest(
                selection.remote_folder_id
            )
            local_files = self.scanner.fetch_local_manifest(directory)
        except RemoteUnavailableError as e:
            return self._fail(str(e))
        except LocalUnavailableError as e:
            self._clear_local_dir()
            return self._fail(str(e))

        logger.debug(
            "Found %d files in Drive folder, %d in local folder",
            len(remote_files),
            len(local_files),
        )

        decisions = self.comparator.compare_files(remote_files, local_files)
        result = self.executor.execute(
            decisions,
            directory,
            remote_count=len(remote_files),
            progress_callback=self._on_progress,
        )

        logger.debug("Sync pass took %.2fs", time.time() - start)
        if result.error:
            self._notify(self.callbacks.on_sync_failed, result.error)
        else:
            self._notify(self.callbacks.on_sync_complete, result)
        return result

    def _on_progress(self, completed: int, total: int) -> None:
        self._notify(self.callbacks.on_progress, completed, total)

    # =========================
    # Incremental sync
    # =========================

    def on_remote_change(
        self, event: ChangeEvent
    ) -> "Future[Optional[IncrementalOutcome]]":
        """Enqueue reconciliation of a single remote change notification."""
        return self.worker.submit(self._handle_change, event)

    def _handle_change(self, event: ChangeEvent) -> Optional[IncrementalOutcome]:
        selection = self._selection
        if not selection.is_complete:
            logger.warning(
                "Ignoring %s for %s: no folder selection",
                event.kind.value,
                event.file_name,
            )
            return None

        try:
            outcome = self.incremental.handle(selection, event)
        except LocalUnavailableError as e:
            logger.error("Cannot apply change to %s: %s", event.file_name, e)
            self._clear_local_dir()
            return IncrementalOutcome.FAILED
        except RemoteUnavailableError as e:
            logger.error("Cannot apply change to %s: %s", event.file_name, e)
            return IncrementalOutcome.FAILED

        logger.debug(
            "Change %s for %s: %s", event.kind.value, event.file_name, outcome.value
        )
        return outcome

    # =========================
    # Lifecycle
    # =========================

    def shutdown(self, wait: bool = True) -> None:
        """Abandon queued work and cancel in-flight transfers."""
        self.worker.shutdown(wait=wait)

    def _notify(self, callback: Callable[..., Any], *args: Any) -> None:
        """Invoke a caller-supplied callback, logging its errors."""
        try:
            callback(*args)
        except Exception:
            name = getattr(callback, "__name__", callback)
            logger.exception("Sync callback %s raised", name)
