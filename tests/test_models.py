"""Tests for data models."""

import pytest

from pydrivesync.models import (
    ChangeEvent,
    ChangeKind,
    RemoteFileRecord,
    RemoteFolder,
)
from pydrivesync.utils import DEFAULT_MIME_TYPE


class TestRemoteFileRecord:
    """Tests for parsing Drive file resources."""

    def test_from_api_response(self):
        """All Drive fields are mapped."""
        record = RemoteFileRecord.from_api_response(
            {
                "id": "abc",
                "name": "photo.jpg",
                "modifiedTime": "2024-03-05T12:00:00Z",
                "mimeType": "image/jpeg",
                "md5Checksum": "d41d8cd98f00b204e9800998ecf8427e",
                "size": "2048",
            }
        )

        assert record.id == "abc"
        assert record.name == "photo.jpg"
        assert record.modified_time == 1709640000000
        assert record.mime_type == "image/jpeg"
        assert record.size == 2048
        assert record.checksum == "d41d8cd98f00b204e9800998ecf8427e"

    def test_optional_fields_default(self):
        """Missing optional fields fall back to defaults."""
        record = RemoteFileRecord.from_api_response(
            {"id": "abc", "name": "a", "modifiedTime": "2024-03-05T12:00:00.000Z"}
        )

        assert record.mime_type == DEFAULT_MIME_TYPE
        assert record.size == 0
        assert record.checksum is None

    @pytest.mark.parametrize(
        "data",
        [
            {"name": "a", "modifiedTime": "2024-03-05T12:00:00Z"},
            {"id": "abc", "modifiedTime": "2024-03-05T12:00:00Z"},
            {"id": "abc", "name": "a"},
            {"id": "abc", "name": "a", "modifiedTime": "yesterday"},
        ],
    )
    def test_invalid_resources(self, data):
        """Records without id, name or a valid modifiedTime are rejected."""
        with pytest.raises(ValueError):
            RemoteFileRecord.from_api_response(data)

    def test_folder_from_api_response(self):
        """Folders carry only id and name."""
        assert RemoteFolder.from_api_response({"id": "f", "name": "Photos"}) == (
            RemoteFolder("f", "Photos")
        )


class TestChangeKind:
    """Tests for change kind parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("created", ChangeKind.CREATED),
            ("update", ChangeKind.UPDATED),
            ("Updated", ChangeKind.UPDATED),
            ("delete", ChangeKind.DELETED),
            (" deleted ", ChangeKind.DELETED),
        ],
    )
    def test_from_string(self, value, expected):
        """Canonical names and legacy aliases are accepted."""
        assert ChangeKind.from_string(value) == expected

    def test_unknown_kind(self):
        """Unknown kinds are rejected."""
        with pytest.raises(ValueError, match="Invalid change kind"):
            ChangeKind.from_string("renamed")


class TestChangeEvent:
    """Tests for building events from push payloads."""

    def test_from_message(self):
        """The push payload keys are mapped."""
        event = ChangeEvent.from_message(
            {"changeType": "update", "fileName": "a.txt", "modified": "1700000000000"}
        )

        assert event == ChangeEvent(ChangeKind.UPDATED, "a.txt", 1700000000000)

    def test_from_message_without_modified(self):
        """A missing modified time is left for a remote lookup."""
        event = ChangeEvent.from_message({"changeType": "delete", "fileName": "a.txt"})

        assert event.kind == ChangeKind.DELETED
        assert event.remote_modified_time is None

    def test_from_message_bad_modified(self):
        """An unparseable modified time is treated as absent."""
        event = ChangeEvent.from_message(
            {"changeType": "updated", "fileName": "a.txt", "modified": "soon"}
        )

        assert event.remote_modified_time is None

    def test_from_message_missing_name(self):
        """A payload without a file name is rejected."""
        with pytest.raises(ValueError):
            ChangeEvent.from_message({"changeType": "created"})
