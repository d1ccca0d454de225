"""Utility functions for pydrivesync."""

from datetime import datetime, timezone
from typing import Optional

# =============================================================================
# Constants
# =============================================================================

# Chunk size used when streaming remote content to a local file (64 KB)
DEFAULT_CHUNK_SIZE: int = 64 * 1024

# MIME type used when the remote record does not carry one
DEFAULT_MIME_TYPE: str = "application/octet-stream"

# Google Drive folder MIME type
FOLDER_MIME_TYPE: str = "application/vnd.google-apps.folder"

# Single-page sizes for remote listings (pagination is not followed)
REMOTE_LIST_PAGE_SIZE: int = 1000
FOLDER_LIST_PAGE_SIZE: int = 100

# Fields requested for file listings and point lookups
FILE_FIELDS: str = "files(id, name, modifiedTime, md5Checksum, mimeType, size)"


# =============================================================================
# Timestamp parsing utilities
# =============================================================================


def parse_iso_timestamp_ms(timestamp_str: Optional[str]) -> Optional[int]:
    """Parse an RFC 3339 timestamp from the Drive API into epoch milliseconds.

    Args:
        timestamp_str: Timestamp string (e.g., "2025-01-15T10:30:00.123Z")

    Returns:
        Epoch milliseconds or None if parsing fails
    """
    if not timestamp_str:
        return None

    try:
        # The 'Z' suffix indicates UTC time
        if timestamp_str.endswith("Z"):
            timestamp_str = timestamp_str[:-1] + "+00:00"

        try:
            dt = datetime.fromisoformat(timestamp_str)
        except ValueError:
            # Retry with the fraction trimmed to milliseconds
            if "." not in timestamp_str:
                raise
            head, tail = timestamp_str.split(".", 1)
            digits = ""
            while tail and tail[0].isdigit():
                digits += tail[0]
                tail = tail[1:]
            dt = datetime.fromisoformat(f"{head}.{digits[:3].ljust(3, '0')}{tail}")

        # Naive timestamps are UTC
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return int(round(dt.timestamp() * 1000))
    except (ValueError, AttributeError):
        return None


# =============================================================================
# Formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


def escape_query_value(value: str) -> str:
    """Escape a string literal for use inside a Drive ``q`` expression.

    Backslashes are escaped first, then single quotes.

    Args:
        value: Raw value (e.g., a file name)

    Returns:
        Escaped value
    """
    return value.replace("\\", "\\\\").replace("'", "\\'")
