"""Unit tests for sharefile/client.py — OAuth token handling and HTTP calls."""

import io
import json
from io import BytesIO
from typing import Any
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError

import pytest

from sharefile_fs.config import AppConfig
from sharefile_fs.sharefile.client import (
    ShareFileApiError,
    ShareFileAuthError,
    ShareFileClient,
    sharefile_client_from_config,
)

_URLOPEN = "sharefile_fs.sharefile.client.urllib_request.urlopen"

_TOKEN = {
    "access_token": "fake-token-abc",
    "subdomain": "acme",
    "apicp": "sf-api.com",
    "expires_in": 28800,
}

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_client() -> ShareFileClient:
    return ShareFileClient(
        hostname="acme.sharefile.com",
        client_id="test-client-id",
        client_secret="test-secret",
        username="user@acme.com",
        password="test-password",
    )


def _response(data: Any) -> MagicMock:
    """Return a context-manager mock whose read() yields ``data``."""
    mock_response = MagicMock()
    if isinstance(data, bytes):
        mock_response.read.return_value = data
    else:
        mock_response.read.return_value = json.dumps(data).encode()
    mock_response.__enter__ = lambda s: s
    mock_response.__exit__ = MagicMock(return_value=False)
    return mock_response


def _http_error(code: int, body: bytes = b"{}") -> HTTPError:
    return HTTPError(
        url="https://acme.sf-api.com/sf/v3/Items(bad)",
        code=code,
        msg="Error",
        hdrs=MagicMock(),  # type: ignore[arg-type]
        fp=BytesIO(body),
    )


def _request_at(mock_urlopen: MagicMock, index: int) -> Any:
    return mock_urlopen.call_args_list[index][0][0]


# ---------------------------------------------------------------------------
# _acquire_token tests
# ---------------------------------------------------------------------------


class TestAcquireToken:
    def test_posts_password_grant_to_account_host(self) -> None:
        client = _make_client()
        with patch(_URLOPEN, return_value=_response(_TOKEN)) as mock_urlopen:
            token = client._acquire_token()

        assert token == "fake-token-abc"
        req = _request_at(mock_urlopen, 0)
        assert req.full_url == "https://acme.sharefile.com/oauth/token"
        assert req.get_method() == "POST"
        assert b"grant_type=password" in req.data
        assert b"username=user%40acme.com" in req.data

    def test_token_is_reused_until_expiry(self) -> None:
        client = _make_client()
        with patch(_URLOPEN, return_value=_response(_TOKEN)) as mock_urlopen:
            client._acquire_token()
            client._acquire_token()

        assert mock_urlopen.call_count == 1

    def test_raises_auth_error_without_access_token(self) -> None:
        client = _make_client()
        failure = {"error": "invalid_grant", "error_description": "Bad password"}
        with (
            patch(_URLOPEN, return_value=_response(failure)),
            pytest.raises(ShareFileAuthError, match="invalid_grant"),
        ):
            client._acquire_token()

    def test_raises_auth_error_on_http_error(self) -> None:
        client = _make_client()
        with patch(_URLOPEN, side_effect=_http_error(400)), pytest.raises(ShareFileAuthError):
            client._acquire_token()


# ---------------------------------------------------------------------------
# Item call tests
# ---------------------------------------------------------------------------


class TestItemCalls:
    def test_get_item_by_path_uses_api_host_and_bearer_token(self) -> None:
        client = _make_client()
        item = {"Id": "fi-1", "odata.type": "ShareFile.Api.Models.File"}
        with patch(_URLOPEN, side_effect=[_response(_TOKEN), _response(item)]) as mock_urlopen:
            result = client.get_item_by_path("/docs/report.txt")

        assert result == item
        req = _request_at(mock_urlopen, 1)
        assert req.full_url.startswith("https://acme.sf-api.com/sf/v3/Items/ByPath?")
        assert "path=%2Fdocs%2Freport.txt" in req.full_url
        assert req.get_header("Authorization") == "Bearer fake-token-abc"

    def test_get_item_by_id_expands_children(self) -> None:
        client = _make_client()
        with patch(_URLOPEN, side_effect=[_response(_TOKEN), _response({})]) as mock_urlopen:
            client.get_item_by_id("fo-1", expand_children=True)

        req = _request_at(mock_urlopen, 1)
        assert "/Items(fo-1)?" in req.full_url
        assert "Children" in req.full_url

    def test_get_item_contents_downloads_from_download_url(self) -> None:
        client = _make_client()
        responses = [
            _response(_TOKEN),
            _response({"DownloadUrl": "https://storage.example/dl/abc"}),
            _response(b"file body"),
        ]
        with patch(_URLOPEN, side_effect=responses) as mock_urlopen:
            contents = client.get_item_contents("fi-1")

        assert contents == b"file body"
        assert "/Items(fi-1)/Download?redirect=false" in _request_at(mock_urlopen, 1).full_url
        assert _request_at(mock_urlopen, 2) == "https://storage.example/dl/abc"

    def test_open_download_stream_uses_configured_timeout(self) -> None:
        client = ShareFileClient("acme.sharefile.com", "cid", "cs", "u", "p", timeout=7)
        stream = _response(b"file body")
        with patch(_URLOPEN, return_value=stream) as mock_urlopen:
            result = client.open_download_stream("https://storage.example/dl/abc")

        assert result is stream
        mock_urlopen.assert_called_once_with("https://storage.example/dl/abc", timeout=7)

    def test_open_download_stream_raises_api_error(self) -> None:
        client = _make_client()
        with (
            patch(_URLOPEN, side_effect=_http_error(403)),
            pytest.raises(ShareFileApiError) as exc_info,
        ):
            client.open_download_stream("https://storage.example/dl/abc")

        assert exc_info.value.status_code == 403

    def test_upload_posts_stream_to_chunk_uri(self) -> None:
        client = _make_client()
        stream = io.BytesIO(b"hello")
        responses = [
            _response(_TOKEN),
            _response({"ChunkUri": "https://storage.example/upload?id=1"}),
            _response(b""),
        ]
        with patch(_URLOPEN, side_effect=responses) as mock_urlopen:
            client.upload_file_streamed(stream, "fo-1", "report.txt", False, True)

        spec_req = _request_at(mock_urlopen, 1)
        assert "/Items(fo-1)/Upload2" in spec_req.full_url
        body = json.loads(spec_req.data)
        assert body["FileName"] == "report.txt"
        assert body["Overwrite"] is True
        assert body["Unzip"] is False

        upload_req = _request_at(mock_urlopen, 2)
        assert upload_req.full_url == "https://storage.example/upload?id=1"
        assert upload_req.data is stream

    def test_create_folder(self) -> None:
        client = _make_client()
        with patch(_URLOPEN, side_effect=[_response(_TOKEN), _response({})]) as mock_urlopen:
            client.create_folder("fo-1", "Reports", "Reports", True)

        req = _request_at(mock_urlopen, 1)
        assert "/Items(fo-1)/Folder?overwrite=true" in req.full_url
        assert json.loads(req.data) == {"Name": "Reports", "Description": "Reports"}

    def test_update_item_patches_fields(self) -> None:
        client = _make_client()
        data = {"Name": "new.txt", "Parent": {"Id": "fo-2"}}
        with patch(_URLOPEN, side_effect=[_response(_TOKEN), _response({})]) as mock_urlopen:
            client.update_item("fi-1", data)

        req = _request_at(mock_urlopen, 1)
        assert req.get_method() == "PATCH"
        assert json.loads(req.data) == data

    def test_copy_item(self) -> None:
        client = _make_client()
        with patch(_URLOPEN, side_effect=[_response(_TOKEN), _response({})]) as mock_urlopen:
            client.copy_item("fo-2", "fi-1", True)

        req = _request_at(mock_urlopen, 1)
        assert "/Items(fi-1)/Copy?" in req.full_url
        assert "targetid=fo-2" in req.full_url
        assert "overwrite=true" in req.full_url

    def test_delete_item_handles_empty_body(self) -> None:
        client = _make_client()
        with patch(_URLOPEN, side_effect=[_response(_TOKEN), _response(b"")]) as mock_urlopen:
            client.delete_item("fi-1")

        assert _request_at(mock_urlopen, 1).get_method() == "DELETE"

    def test_raises_api_error_with_message(self) -> None:
        client = _make_client()
        body = json.dumps(
            {"code": "NotFound", "message": {"lang": "en-US", "value": "Item not found"}}
        ).encode()
        with (
            patch(_URLOPEN, side_effect=[_response(_TOKEN), _http_error(404, body)]),
            pytest.raises(ShareFileApiError) as exc_info,
        ):
            client.get_item_by_path("/missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Item not found"

    def test_raises_api_error_on_500(self) -> None:
        client = _make_client()
        with (
            patch(_URLOPEN, side_effect=[_response(_TOKEN), _http_error(500, b"oops")]),
            pytest.raises(ShareFileApiError) as exc_info,
        ):
            client.get_item_by_id("fo-1")

        assert exc_info.value.status_code == 500


# ---------------------------------------------------------------------------
# ShareFileApiError / factory tests
# ---------------------------------------------------------------------------


class TestShareFileApiError:
    def test_status_code_and_message_stored(self) -> None:
        err = ShareFileApiError(403, "Access denied")
        assert err.status_code == 403
        assert err.message == "Access denied"
        assert "403" in str(err)


class TestClientFromConfig:
    def test_builds_client_from_config(self) -> None:
        config = AppConfig(
            hostname="acme.sharefile.com",
            client_id="cid",
            client_secret="cs",
            username="u",
            password="p",
            timeout_seconds=7,
        )
        client = sharefile_client_from_config(config)
        assert isinstance(client, ShareFileClient)
        assert client._hostname == "acme.sharefile.com"
        assert client._timeout == 7
