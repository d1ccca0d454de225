"""Unit tests for the Drive API client."""

import io
from unittest.mock import patch

import httpx
import pytest

from pydrivesync.api import DriveClient
from pydrivesync.exceptions import (
    DriveAuthenticationError,
    DriveConfigError,
    DriveDownloadError,
    DriveInvalidResponseError,
    DriveNetworkError,
    DriveNotFoundError,
    DrivePermissionError,
    DriveRateLimitError,
    RemoteUnavailableError,
    SyncCancelledError,
)
from pydrivesync.models import RemoteFileRecord, RemoteFolder

API_URL = "https://drive.test/v3"


def _client(handler, **kwargs) -> DriveClient:
    """Create a client whose requests are answered by ``handler``."""
    return DriveClient(
        access_token="test_token",
        api_url=API_URL,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _file(name: str, file_id: str = "f1", **extra) -> dict:
    data = {
        "id": file_id,
        "name": name,
        "modifiedTime": "2024-01-01T00:00:00.500Z",
        "mimeType": "text/plain",
        "size": "12",
    }
    data.update(extra)
    return data


class TestDriveClient:
    """Tests for DriveClient initialization."""

    def test_init_with_access_token(self):
        """Test client initialization with an access token."""
        client = DriveClient(access_token="test_token", api_url=API_URL + "/")
        assert client.access_token == "test_token"
        assert client.api_url == API_URL
        assert client.max_retries == 0

    def test_init_without_token_raises_error(self):
        """Test that initializing without a token raises DriveConfigError."""
        with patch("pydrivesync.api.config") as mock_config:
            mock_config.access_token = None
            mock_config.api_url = API_URL
            with pytest.raises(DriveConfigError, match="Access token not configured"):
                DriveClient(access_token=None)

    def test_bearer_header_sent(self):
        """Test that requests carry the bearer token."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json={"files": [{"id": "f1", "name": "Photos"}]})

        with _client(handler) as client:
            assert client.list_folders() == [RemoteFolder("f1", "Photos")]

        assert seen["auth"] == "Bearer test_token"


class TestAPIRequest:
    """Tests for the _request method."""

    def test_empty_response(self):
        """Test handling of an empty response body."""
        client = _client(lambda request: httpx.Response(204))
        assert client._request("GET", "/about") == {}

    def test_html_response_raises_auth_error(self):
        """Test that an HTML page is treated as an authentication failure."""
        client = _client(lambda request: httpx.Response(200, html="<html></html>"))
        with pytest.raises(DriveAuthenticationError, match="HTML"):
            client._request("GET", "/about")

    def test_unexpected_content_type(self):
        """Test that a non-JSON response raises DriveInvalidResponseError."""
        client = _client(lambda request: httpx.Response(200, text="plain"))
        with pytest.raises(DriveInvalidResponseError, match="Unexpected response"):
            client._request("GET", "/about")

    def test_invalid_json(self):
        """Test that malformed JSON raises DriveInvalidResponseError."""
        client = _client(
            lambda request: httpx.Response(
                200, content=b"{oops", headers={"Content-Type": "application/json"}
            )
        )
        with pytest.raises(DriveInvalidResponseError, match="Invalid JSON"):
            client._request("GET", "/about")

    @pytest.mark.parametrize(
        "status,body,expected",
        [
            (401, {}, DriveAuthenticationError),
            (403, {}, DrivePermissionError),
            (404, {}, DriveNotFoundError),
            (429, {}, DriveRateLimitError),
            (
                403,
                {"error": {"errors": [{"reason": "userRateLimitExceeded"}]}},
                DriveRateLimitError,
            ),
        ],
    )
    def test_http_error_mapping(self, status, body, expected):
        """Test that HTTP errors map onto the exception hierarchy."""
        client = _client(lambda request: httpx.Response(status, json=body))
        with pytest.raises(expected):
            client._request("GET", "/files")

    def test_other_http_error_includes_message(self):
        """Test that other errors carry the Drive error message."""
        body = {"error": {"code": 500, "message": "Backend Error"}}
        client = _client(lambda request: httpx.Response(500, json=body))
        with pytest.raises(RemoteUnavailableError, match="500: Backend Error"):
            client._request("GET", "/files")

    def test_network_error(self):
        """Test that transport failures raise DriveNetworkError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)
        with pytest.raises(DriveNetworkError, match="connection refused"):
            client._request("GET", "/files")

    def test_no_retry_by_default(self):
        """Test that a failed call is not retried unless configured."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503, json={})

        client = _client(handler)
        with pytest.raises(RemoteUnavailableError):
            client._request("GET", "/files")
        assert len(calls) == 1

    @patch("pydrivesync.api.time.sleep")
    def test_retry_on_server_error_when_enabled(self, mock_sleep):
        """Test that 5xx responses are retried when max_retries is set."""
        responses = [httpx.Response(503, json={}), httpx.Response(200, json={})]

        client = _client(lambda request: responses.pop(0), max_retries=2)
        assert client._request("GET", "/files") == {}
        mock_sleep.assert_called_once()


class TestListing:
    """Tests for folder and file listings."""

    def test_list_folders_query(self):
        """Test the folder listing query and result parsing."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            seen["path"] = request.url.path
            files = [{"id": "a", "name": "Photos"}, {"id": "b", "name": "X"}]
            return httpx.Response(200, json={"files": files})

        folders = _client(handler).list_folders()

        assert folders == [RemoteFolder("a", "Photos"), RemoteFolder("b", "X")]
        assert seen["path"] == "/v3/files"
        assert seen["params"]["q"] == (
            "mimeType = 'application/vnd.google-apps.folder' and trashed = false"
        )
        assert seen["params"]["pageSize"] == "100"

    def test_list_files_query(self):
        """Test the file listing query excludes folders and trashed items."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"files": [_file("a.txt")]})

        records = _client(handler).list_files("folder-1")

        assert records == [
            RemoteFileRecord(
                id="f1",
                name="a.txt",
                modified_time=1704067200500,
                mime_type="text/plain",
                size=12,
            )
        ]
        assert seen["params"]["q"] == (
            "'folder-1' in parents and trashed = false "
            "and mimeType != 'application/vnd.google-apps.folder'"
        )
        assert seen["params"]["pageSize"] == "1000"
        assert "modifiedTime" in seen["params"]["fields"]

    def test_list_files_without_files_key(self):
        """Test that a response without 'files' is an empty listing."""
        client = _client(lambda request: httpx.Response(200, json={}))
        assert client.list_files("folder-1") == []

    def test_list_files_invalid_record(self):
        """Test that a record without modifiedTime is an invalid response."""
        body = {"files": [{"id": "f1", "name": "a.txt"}]}
        client = _client(lambda request: httpx.Response(200, json=body))
        with pytest.raises(DriveInvalidResponseError, match="modifiedTime"):
            client.list_files("folder-1")

    def test_find_file_by_name_escapes_query(self):
        """Test that the name lookup escapes quotes and uses page size 1."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"files": [_file("it's.txt")]})

        record = _client(handler).find_file_by_name("folder-1", "it's.txt")

        assert record is not None
        assert record.name == "it's.txt"
        assert "name = 'it\\'s.txt'" in seen["params"]["q"]
        assert seen["params"]["pageSize"] == "1"

    def test_find_file_by_name_not_found(self):
        """Test that an empty lookup returns None."""
        client = _client(lambda request: httpx.Response(200, json={"files": []}))
        assert client.find_file_by_name("folder-1", "x.txt") is None


class TestDownload:
    """Tests for streaming downloads."""

    def test_download_to_stream(self):
        """Test that content is streamed into the sink."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            return httpx.Response(200, content=b"hello world")

        sink = io.BytesIO()
        progress = []
        ok = _client(handler).download_to_stream(
            "f1",
            sink,
            progress_callback=lambda done, total: progress.append((done, total)),
        )

        assert ok is True
        assert sink.getvalue() == b"hello world"
        assert seen["url"] == f"{API_URL}/files/f1?alt=media"
        assert progress[-1] == (11, 11)

    def test_download_cancelled(self):
        """Test that the cancellation hook abandons the transfer."""
        client = _client(lambda request: httpx.Response(200, content=b"data"))
        sink = io.BytesIO()

        with pytest.raises(SyncCancelledError):
            client.download_to_stream("f1", sink, should_cancel=lambda: True)

        assert sink.getvalue() == b""

    def test_download_truncated(self):
        """Test that a body shorter than Content-Length is an error."""
        client = _client(
            lambda request: httpx.Response(
                200, content=b"short", headers={"Content-Length": "100"}
            )
        )
        with pytest.raises(DriveDownloadError, match="truncated"):
            client.download_to_stream("f1", io.BytesIO())

    def test_download_http_error(self):
        """Test that a rejected download raises DriveDownloadError."""
        client = _client(lambda request: httpx.Response(404, json={}))
        with pytest.raises(DriveDownloadError, match="Download failed"):
            client.download_to_stream("f1", io.BytesIO())

    def test_download_network_error(self):
        """Test that a dropped connection raises DriveNetworkError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadError("reset", request=request)

        with pytest.raises(DriveNetworkError):
            _client(handler).download_to_stream("f1", io.BytesIO())

    def test_download_sink_error(self):
        """Test that a failing sink raises DriveDownloadError."""

        class BrokenSink(io.BytesIO):
            def write(self, data):
                raise OSError("disk full")

        client = _client(lambda request: httpx.Response(200, content=b"data"))
        with pytest.raises(DriveDownloadError, match="disk full"):
            client.download_to_stream("f1", BrokenSink())
