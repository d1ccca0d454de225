"""Shared fixtures: in-memory remote and local stores."""

import io
from pathlib import Path
from typing import Callable, Optional

import pytest

from pydrivesync.exceptions import DriveDownloadError, DriveNetworkError
from pydrivesync.models import RemoteFileRecord, RemoteFolder


def make_remote(
    name: str, modified_time: int, file_id: Optional[str] = None
) -> RemoteFileRecord:
    """Build a remote record with a predictable ID."""
    return RemoteFileRecord(
        id=file_id or f"id-{name}", name=name, modified_time=modified_time
    )


class FakeRemoteStore:
    """Remote store holding file records and their content in memory."""

    def __init__(self) -> None:
        self.folders: list[RemoteFolder] = []
        self.files: list[RemoteFileRecord] = []
        self.content: dict[str, bytes] = {}
        self.fail_downloads: set[str] = set()
        self.list_error: Optional[Exception] = None
        self.downloads: list[str] = []
        self.lookups: list[str] = []
        self.on_chunk: Optional[Callable[[str], None]] = None

    def add(
        self, name: str, modified_time: int, content: Optional[bytes] = None
    ) -> RemoteFileRecord:
        record = make_remote(name, modified_time)
        self.files.append(record)
        self.content[record.id] = (
            content if content is not None else f"content of {name}".encode()
        )
        return record

    def remove(self, name: str) -> None:
        self.files = [f for f in self.files if f.name != name]

    def list_folders(self) -> list[RemoteFolder]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.folders)

    def list_files(self, folder_id: str) -> list[RemoteFileRecord]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.files)

    def find_file_by_name(
        self, folder_id: str, name: str
    ) -> Optional[RemoteFileRecord]:
        self.lookups.append(name)
        if self.list_error is not None:
            raise self.list_error
        for record in self.files:
            if record.name == name:
                return record
        return None

    def download_to_stream(self, file_id, sink, should_cancel=None) -> bool:
        self.downloads.append(file_id)
        data = self.content.get(file_id, b"")
        half = len(data) // 2
        sink.write(data[:half])
        if self.on_chunk is not None:
            self.on_chunk(file_id)
        if file_id in self.fail_downloads:
            raise DriveNetworkError(f"Connection reset while reading {file_id}")
        if should_cancel is not None and should_cancel():
            raise DriveDownloadError(f"Download of {file_id} cancelled")
        sink.write(data[half:])
        return True


class _Sink(io.BytesIO):
    """Write stream that commits its content to the fake store on close."""

    def __init__(self, store: "FakeLocalStore", entry: tuple[Path, str]):
        super().__init__()
        self._store = store
        self._entry = entry

    def write(self, data) -> int:
        written = super().write(data)
        # Visible before close, like a real file being streamed into
        self._store.commit(self._entry, self.getvalue())
        return written

    def close(self) -> None:
        if not self.closed:
            self._store.commit(self._entry, self.getvalue())
        super().close()


class FakeLocalStore:
    """Local store keeping one flat directory per ``Path`` in memory."""

    def __init__(self) -> None:
        self.dirs: dict[Path, dict[str, tuple[bytes, int]]] = {}
        self.inaccessible: set[Path] = set()
        self.fail_create: set[str] = set()
        self.fail_open: set[str] = set()
        self.fail_delete: set[str] = set()
        self.clock = 10_000_000
        self.operations: list[tuple[str, str]] = []

    def make_dir(self, directory: Path) -> Path:
        self.dirs.setdefault(directory, {})
        return directory

    def put(self, directory: Path, name: str, mtime: int, data: bytes = b"old"):
        self.make_dir(directory)
        self.dirs[directory][name] = (data, mtime)

    def read(self, directory: Path, name: str) -> bytes:
        return self.dirs[directory][name][0]

    def names(self, directory: Path) -> list[str]:
        return list(self.dirs[directory])

    def commit(self, entry: tuple[Path, str], data: bytes) -> None:
        directory, name = entry
        if name in self.dirs.get(directory, {}):
            self.clock += 1
            self.dirs[directory][name] = (data, self.clock)

    def is_accessible(self, directory: Path) -> bool:
        return directory in self.dirs and directory not in self.inaccessible

    def list_entries(self, directory: Path) -> dict[str, int]:
        return {name: mtime for name, (_, mtime) in self.dirs[directory].items()}

    def create_or_reuse(self, directory: Path, name: str, mime_type: str):
        self.operations.append(("create", name))
        if name in self.fail_create:
            return None
        files = self.dirs[directory]
        if name not in files:
            self.clock += 1
            files[name] = (b"", self.clock)
        return (directory, name)

    def open_for_write(self, entry):
        self.operations.append(("open", entry[1]))
        if entry[1] in self.fail_open:
            return None
        return _Sink(self, entry)

    def delete(self, directory: Path, name: str) -> bool:
        self.operations.append(("delete", name))
        if name in self.fail_delete:
            return False
        return self.dirs.get(directory, {}).pop(name, None) is not None


@pytest.fixture
def remote_store():
    """Create an empty in-memory remote store."""
    return FakeRemoteStore()


@pytest.fixture
def local_store():
    """Create an in-memory local store."""
    return FakeLocalStore()


@pytest.fixture
def local_dir(local_store):
    """Create an empty in-memory local directory."""
    return local_store.make_dir(Path("/sync/target"))
