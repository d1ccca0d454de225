"""Sync engine for pydrivesync - one-way mirror of a Drive folder."""

from .comparator import FileComparator, SyncAction, SyncDecision, reconcile
from .engine import SyncEngine
from .executor import SyncExecutor, SyncResult
from .incremental import IncrementalOutcome, IncrementalReconciler
from .operations import SyncOperations
from .progress import ProgressCallback, SyncCallbacks
from .scanner import ManifestScanner
from .state import SelectedFolders, SelectionStore
from .worker import SyncWorker

__all__ = [
    "SyncEngine",
    "SyncWorker",
    "SyncCallbacks",
    "ProgressCallback",
    "ManifestScanner",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "reconcile",
    "SyncOperations",
    "SyncExecutor",
    "SyncResult",
    "IncrementalOutcome",
    "IncrementalReconciler",
    "SelectedFolders",
    "SelectionStore",
]
