"""Data models for remote and local file metadata."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .utils import DEFAULT_MIME_TYPE, parse_iso_timestamp_ms


@dataclass(frozen=True)
class RemoteFileRecord:
    """A file listed in the remote folder.

    Produced fresh on every remote listing call and never cached beyond
    one reconciliation pass.
    """

    id: str
    """Opaque remote handle, stable across renames"""

    name: str
    """File name, unique within the parent folder (the reconciliation key)"""

    modified_time: int
    """Last modification time (epoch milliseconds)"""

    mime_type: str = DEFAULT_MIME_TYPE
    """MIME type reported by the remote store"""

    size: int = 0
    """File size in bytes (informational)"""

    checksum: Optional[str] = None
    """Content checksum if the remote store provides one (MD5 on Drive)"""

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "RemoteFileRecord":
        """Create a record from a Drive v3 ``files`` resource.

        Args:
            data: File resource dictionary

        Returns:
            RemoteFileRecord instance

        Raises:
            ValueError: If id, name or modifiedTime is missing or invalid
        """
        file_id = data.get("id")
        name = data.get("name")
        if not file_id or not name:
            raise ValueError(f"File resource is missing id or name: {data}")

        modified = parse_iso_timestamp_ms(data.get("modifiedTime"))
        if modified is None:
            raise ValueError(
                f"File resource {name!r} has invalid modifiedTime: "
                f"{data.get('modifiedTime')!r}"
            )

        try:
            size = int(data.get("size") or 0)
        except (TypeError, ValueError):
            size = 0

        return cls(
            id=file_id,
            name=name,
            modified_time=modified,
            mime_type=data.get("mimeType") or DEFAULT_MIME_TYPE,
            size=size,
            checksum=data.get("md5Checksum"),
        )


@dataclass(frozen=True)
class RemoteFolder:
    """A folder that can be selected as the sync source."""

    id: str
    name: str

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "RemoteFolder":
        """Create a folder from a Drive v3 ``files`` resource."""
        return cls(id=data["id"], name=data.get("name", ""))


class ChangeKind(str, Enum):
    """Kinds of remote change notifications."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"

    @classmethod
    def from_string(cls, value: str) -> "ChangeKind":
        """Parse a change kind, accepting the short aliases ``update``/``delete``.

        Args:
            value: Change kind string

        Returns:
            ChangeKind

        Raises:
            ValueError: If the value is not a known change kind
        """
        aliases = {
            "create": cls.CREATED,
            "created": cls.CREATED,
            "update": cls.UPDATED,
            "updated": cls.UPDATED,
            "delete": cls.DELETED,
            "deleted": cls.DELETED,
        }
        try:
            return aliases[value.strip().lower()]
        except KeyError:
            raise ValueError(f"Invalid change kind: {value!r}") from None


@dataclass(frozen=True)
class ChangeEvent:
    """A single externally delivered remote change notification."""

    kind: ChangeKind
    file_name: str
    remote_modified_time: Optional[int] = None

    @classmethod
    def from_message(cls, data: dict[str, Any]) -> "ChangeEvent":
        """Create an event from a push message payload.

        The payload carries ``changeType``, ``fileName`` and an optional
        ``modified`` value (epoch milliseconds, possibly as a string).
        An unparseable ``modified`` value is treated as absent.

        Args:
            data: Message data dictionary

        Returns:
            ChangeEvent

        Raises:
            ValueError: If changeType or fileName is missing or invalid
        """
        change_type = data.get("changeType")
        file_name = data.get("fileName")
        if not change_type or not file_name:
            raise ValueError("Change message requires changeType and fileName")

        modified: Optional[int] = None
        raw_modified = data.get("modified")
        if raw_modified is not None:
            try:
                modified = int(raw_modified)
            except (TypeError, ValueError):
                modified = None

        return cls(
            kind=ChangeKind.from_string(change_type),
            file_name=file_name,
            remote_modified_time=modified,
        )
