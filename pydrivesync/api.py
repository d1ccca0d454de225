"""API client for Google Drive (v3 REST)."""

from __future__ import annotations

import logging
import random
import time
from typing import IO, Any, Callable

import httpx

from .config import config
from .exceptions import (
    DriveAuthenticationError,
    DriveConfigError,
    DriveDownloadError,
    DriveInvalidResponseError,
    DriveNetworkError,
    DriveNotFoundError,
    DrivePermissionError,
    DriveRateLimitError,
    DriveSyncError,
    RemoteUnavailableError,
    SyncCancelledError,
)
from .models import RemoteFileRecord, RemoteFolder
from .utils import (
    DEFAULT_CHUNK_SIZE,
    FILE_FIELDS,
    FOLDER_LIST_PAGE_SIZE,
    FOLDER_MIME_TYPE,
    REMOTE_LIST_PAGE_SIZE,
    escape_query_value,
    format_size,
)

logger = logging.getLogger(__name__)

_RATE_LIMIT_REASONS = {"rateLimitExceeded", "userRateLimitExceeded"}


class DriveClient:
    """Client for the read-only subset of the Google Drive API used for sync."""

    def __init__(
        self,
        access_token: str | None = None,
        api_url: str | None = None,
        max_retries: int = 0,
        retry_delay: float = 1.0,
        timeout: float = 180.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize Drive API client.

        Args:
            access_token: Optional OAuth access token (uses config if not provided)
            api_url: Optional API URL (uses config if not provided)
            max_retries: Maximum number of retry attempts for transient errors
                (default: 0, failed calls surface to the caller immediately)
            retry_delay: Initial delay between retries in seconds (default: 1.0)
            timeout: Connect/read timeout in seconds (default: 180.0)
            transport: Optional httpx transport (used for testing)
        """
        self.access_token = access_token or config.access_token
        self.api_url = (api_url or config.api_url).rstrip("/")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self._transport = transport

        if not self.access_token:
            raise DriveConfigError(
                "Access token not configured. Please set DRIVESYNC_ACCESS_TOKEN "
                "or run 'pydrivesync init'."
            )

        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={"Authorization": f"Bearer {self.access_token}"},
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> DriveClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _calculate_retry_delay(self, attempt: int) -> float:
        """Calculate delay before next retry using exponential backoff.

        Args:
            attempt: Current attempt number (0-based)

        Returns:
            Delay in seconds
        """
        base_delay = self.retry_delay * (2**attempt)
        # Add jitter: +/- 25% of base delay
        jitter = base_delay * 0.25 * (2 * random.random() - 1)
        return base_delay + jitter

    @staticmethod
    def _error_details(response: httpx.Response) -> tuple[str | None, str | None]:
        """Extract (message, reason) from a Drive error body."""
        try:
            data = response.json()
        except ValueError:
            return None, None
        if not isinstance(data, dict) or not isinstance(data.get("error"), dict):
            return None, None
        error = data["error"]
        reason = None
        errors = error.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            reason = errors[0].get("reason")
        return error.get("message"), reason

    def _map_http_error(self, e: httpx.HTTPStatusError) -> RemoteUnavailableError:
        """Translate an HTTP status error into the exception hierarchy.

        Args:
            e: The HTTP error exception

        Returns:
            Exception to raise
        """
        status_code = e.response.status_code
        message, reason = self._error_details(e.response)

        if status_code == 401:
            return DriveAuthenticationError(
                "Invalid or expired access token - please sign in again"
            )
        if status_code == 429 or (status_code == 403 and reason in _RATE_LIMIT_REASONS):
            return DriveRateLimitError("Rate limit exceeded - please try again later")
        if status_code == 403:
            return DrivePermissionError(
                "Access forbidden - check the Drive scopes of your token"
            )
        if status_code == 404:
            return DriveNotFoundError(message or "Resource not found")

        error_msg = f"API request failed with status {status_code}"
        if message:
            error_msg = f"{error_msg}: {message}"
        return RemoteUnavailableError(error_msg)

    def _should_retry(
        self, error: Exception, status_code: int | None, attempt: int
    ) -> bool:
        """Determine if a request should be retried.

        Args:
            error: The mapped exception
            status_code: HTTP status code, if any
            attempt: Current attempt number (0-based)

        Returns:
            True if the request should be retried, False otherwise
        """
        if attempt >= self.max_retries:
            return False
        if isinstance(error, (DriveNetworkError, DriveRateLimitError)):
            return True
        return status_code is not None and 500 <= status_code < 600

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Make an API request.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data

        Raises:
            RemoteUnavailableError: If the request fails
        """
        url = f"{self.api_url}/{endpoint.lstrip('/')}"
        client = self._get_client()

        for attempt in range(self.max_retries + 1):
            try:
                response = client.request(method, url, **kwargs)
                response.raise_for_status()

                content_type = response.headers.get("Content-Type", "")
                if response.content and "application/json" not in content_type:
                    # An HTML page usually means a login redirect
                    if "text/html" in content_type:
                        raise DriveAuthenticationError(
                            "Invalid access token - server returned HTML "
                            "instead of JSON"
                        )
                    raise DriveInvalidResponseError(
                        f"Unexpected response type: {content_type}"
                    )

                if response.content:
                    try:
                        return response.json()
                    except ValueError as e:
                        raise DriveInvalidResponseError(
                            "Invalid JSON response from server"
                        ) from e
                return {}

            except httpx.HTTPStatusError as e:
                error: RemoteUnavailableError = self._map_http_error(e)
                if self._should_retry(error, e.response.status_code, attempt):
                    delay = self._calculate_retry_delay(attempt)
                    logger.debug(
                        "Request %s %s failed (%s), retrying in %.1fs",
                        method,
                        endpoint,
                        error,
                        delay,
                    )
                    time.sleep(delay)
                    continue
                raise error from e
            except httpx.RequestError as e:
                error = DriveNetworkError(f"Network error: {e}")
                if self._should_retry(error, None, attempt):
                    delay = self._calculate_retry_delay(attempt)
                    logger.debug("Network error on %s, retrying: %s", endpoint, e)
                    time.sleep(delay)
                    continue
                raise error from e

        raise RemoteUnavailableError("Request failed after all retry attempts")

    def _list(self, query: str, fields: str, page_size: int) -> list[dict[str, Any]]:
        """Run a single-page ``files.list`` query."""
        result = self._request(
            "GET",
            "/files",
            params={
                "q": query,
                "fields": fields,
                "spaces": "drive",
                "pageSize": page_size,
            },
        )
        files = result.get("files") if isinstance(result, dict) else None
        if files is None:
            return []
        if not isinstance(files, list):
            raise DriveInvalidResponseError("Expected 'files' to be a list")
        return files

    # =========================
    # Listing Operations
    # =========================

    def list_folders(self) -> list[RemoteFolder]:
        """List all non-trashed folders visible to the user.

        Returns:
            List of RemoteFolder objects
        """
        query = f"mimeType = '{FOLDER_MIME_TYPE}' and trashed = false"
        entries = self._list(query, "files(id, name)", FOLDER_LIST_PAGE_SIZE)
        folders = [RemoteFolder.from_api_response(entry) for entry in entries]
        logger.debug("Found %d folders", len(folders))
        return folders

    def _to_records(self, entries: list[dict[str, Any]]) -> list[RemoteFileRecord]:
        records: list[RemoteFileRecord] = []
        for entry in entries:
            try:
                records.append(RemoteFileRecord.from_api_response(entry))
            except ValueError as e:
                raise DriveInvalidResponseError(str(e)) from e
        return records

    def list_files(self, folder_id: str) -> list[RemoteFileRecord]:
        """List non-folder, non-trashed files directly inside a folder.

        Args:
            folder_id: Drive folder ID

        Returns:
            List of RemoteFileRecord objects in listing order
        """
        query = (
            f"'{escape_query_value(folder_id)}' in parents and trashed = false "
            f"and mimeType != '{FOLDER_MIME_TYPE}'"
        )
        entries = self._list(query, FILE_FIELDS, REMOTE_LIST_PAGE_SIZE)
        records = self._to_records(entries)
        logger.debug("Found %d files in folder %s", len(records), folder_id)
        return records

    def find_file_by_name(self, folder_id: str, name: str) -> RemoteFileRecord | None:
        """Look up a single file in a folder by exact name.

        Args:
            folder_id: Drive folder ID
            name: File name

        Returns:
            RemoteFileRecord, or None if no such file exists
        """
        query = (
            f"'{escape_query_value(folder_id)}' in parents and trashed = false "
            f"and name = '{escape_query_value(name)}'"
        )
        records = self._to_records(self._list(query, FILE_FIELDS, 1))
        return records[0] if records else None

    # =========================
    # Download Operations
    # =========================

    def download_to_stream(
        self,
        file_id: str,
        sink: IO[bytes],
        should_cancel: Callable[[], bool] | None = None,
        progress_callback: Callable[[int, int], None] | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> bool:
        """Stream a file's content into a writable binary sink.

        Args:
            file_id: Drive file ID
            sink: Writable binary stream
            should_cancel: Optional hook checked between chunks; when it
                returns True the transfer is abandoned
            progress_callback: Optional callback function(bytes_written, total_bytes)
            chunk_size: Read chunk size in bytes

        Returns:
            True when the whole content was written

        Raises:
            DriveDownloadError: If the server rejects the download or the sink
                cannot be written
            DriveNetworkError: If the transfer is interrupted
            SyncCancelledError: If ``should_cancel`` requested abandonment
        """
        url = f"{self.api_url}/files/{file_id}"
        client = self._get_client()

        try:
            with client.stream("GET", url, params={"alt": "media"}) as response:
                response.raise_for_status()
                total_size = int(response.headers.get("Content-Length", 0))
                bytes_written = 0

                for chunk in response.iter_bytes(chunk_size=chunk_size):
                    if should_cancel is not None and should_cancel():
                        raise SyncCancelledError(
                            f"Download of {file_id} cancelled after "
                            f"{bytes_written} bytes"
                        )
                    if chunk:
                        sink.write(chunk)
                        bytes_written += len(chunk)
                        if progress_callback:
                            progress_callback(bytes_written, total_size)

                if total_size and bytes_written < total_size:
                    raise DriveDownloadError(
                        f"Download of {file_id} truncated: "
                        f"{bytes_written}/{total_size} bytes"
                    )
                logger.debug(
                    "Downloaded %s of %s", format_size(bytes_written), file_id
                )
                return True

        except DriveSyncError:
            raise
        except httpx.HTTPStatusError as e:
            raise DriveDownloadError(f"Download failed: {e}") from e
        except httpx.RequestError as e:
            raise DriveNetworkError(f"Network error during download: {e}") from e
        except OSError as e:
            raise DriveDownloadError(f"Failed to write file: {e}") from e
