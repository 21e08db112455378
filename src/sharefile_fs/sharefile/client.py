"""ShareFile REST API v3 client with OAuth password-grant authentication."""

from __future__ import annotations

import json
import logging
import time
from typing import IO, TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode

from sharefile_fs.sharefile.models import FIELD_CHUNK_URI, FIELD_DOWNLOAD_URL

if TYPE_CHECKING:
    from sharefile_fs.config import AppConfig

logger = logging.getLogger(__name__)

TOKEN_PATH = "/oauth/token"
API_PATH = "/sf/v3"
DEFAULT_API_DOMAIN = "sf-api.com"

# Refresh the token this many seconds before it actually expires.
TOKEN_EXPIRY_MARGIN = 60


class ShareFileAuthError(Exception):
    """Raised when the OAuth token request fails."""


class ShareFileApiError(Exception):
    """Raised when the ShareFile API returns a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"ShareFile API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _error_detail(exc: HTTPError) -> str:
    raw = exc.read()
    try:
        message = json.loads(raw).get("message", {})
    except Exception:
        return str(exc.reason)
    if isinstance(message, dict):
        return str(message.get("value") or exc.reason)
    return str(message or exc.reason)


def _item_path(item_id: str, suffix: str = "") -> str:
    return f"/Items({quote(str(item_id), safe='')}){suffix}"


class ShareFileClient:
    """Authenticated client for the ShareFile REST API."""

    def __init__(
        self,
        hostname: str,
        client_id: str,
        client_secret: str,
        username: str,
        password: str,
        timeout: int = 30,
    ) -> None:
        """Store credentials; the token is acquired lazily on the first call.

        Args:
            hostname: Account hostname (e.g. "acme.sharefile.com").
            client_id: OAuth client ID.
            client_secret: OAuth client secret.
            username: ShareFile user name.
            password: ShareFile password.
            timeout: Socket timeout in seconds for every request.
        """
        self._hostname = hostname
        self._client_id = client_id
        self._client_secret = client_secret
        self._username = username
        self._password = password
        self._timeout = timeout
        self._token: str | None = None
        self._token_expires_at = 0.0
        self._base_url: str | None = None

    # ------------------------------------------------------------------
    # Authentication and transport
    # ------------------------------------------------------------------

    def _acquire_token(self) -> str:
        """Return a Bearer token, requesting a new one when expired.

        Returns:
            Access token string.

        Raises:
            ShareFileAuthError: If the token endpoint rejects the credentials.
        """
        if self._token is not None and time.monotonic() < self._token_expires_at:
            return self._token

        body = urlencode(
            {
                "grant_type": "password",
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "username": self._username,
                "password": self._password,
            }
        ).encode("utf-8")
        req = urllib_request.Request(
            f"https://{self._hostname}{TOKEN_PATH}",
            data=body,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            method="POST",
        )
        try:
            with urllib_request.urlopen(req, timeout=self._timeout) as resp:
                result: dict[str, Any] = json.loads(resp.read() or b"{}")
        except (HTTPError, URLError) as exc:
            logger.error("[_acquire_token] token request failed; hostname:%s", self._hostname)
            raise ShareFileAuthError(f"Token request failed: {exc}") from exc

        if "access_token" not in result:
            error = result.get("error", "unknown_error")
            description = result.get("error_description", "No description provided")
            logger.error("[_acquire_token] token acquisition failed; error:%s", error)
            raise ShareFileAuthError(f"Token acquisition failed: {error} — {description}")

        subdomain = result.get("subdomain")
        apicp = result.get("apicp", DEFAULT_API_DOMAIN)
        host = f"{subdomain}.{apicp}" if subdomain else self._hostname
        self._base_url = f"https://{host}{API_PATH}"
        self._token = str(result["access_token"])
        expires_in = int(result.get("expires_in", 0) or 0)
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        return self._token

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform an authenticated API request and parse the JSON response.

        Args:
            method: HTTP method.
            path: URL path relative to the API base (must start with '/').
            params: Optional query string parameters.
            json_body: Optional JSON request body.

        Returns:
            Parsed JSON response body, or an empty dict for empty responses.

        Raises:
            ShareFileAuthError: If token acquisition fails.
            ShareFileApiError: If the API returns a non-2xx status code.
        """
        token = self._acquire_token()
        url = f"{self._base_url}{path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        data = None
        if json_body is not None:
            data = json.dumps(json_body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        req = urllib_request.Request(url, data=data, headers=headers, method=method)
        logger.debug("[_request] api call; method:%s;path:%s", method, path)
        try:
            with urllib_request.urlopen(req, timeout=self._timeout) as resp:
                body = resp.read()
        except HTTPError as exc:
            detail = _error_detail(exc)
            logger.error(
                "[_request] api call failed; method:%s;path:%s;status:%d", method, path, exc.code
            )
            raise ShareFileApiError(exc.code, detail) from exc
        return json.loads(body) if body else {}

    def _expand(self, expand_children: bool) -> dict[str, str]:
        return {"$expand": "Children,Info" if expand_children else "Info"}

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def get_item_by_path(self, path: str) -> dict[str, Any]:
        """Fetch an item by its absolute path (e.g. "/Folder/file.txt")."""
        return self._request("GET", "/Items/ByPath", params={"path": path, **self._expand(False)})

    def get_item_by_id(self, item_id: str, expand_children: bool = False) -> dict[str, Any]:
        """Fetch an item by ID, optionally expanding its children."""
        return self._request("GET", _item_path(item_id), params=self._expand(expand_children))

    def get_item_download_url(self, item_id: str) -> dict[str, Any]:
        """Return the download specification (with a time-limited DownloadUrl)."""
        return self._request("GET", _item_path(item_id, "/Download"), params={"redirect": "false"})

    def open_download_stream(self, url: str) -> IO[bytes]:
        """Open a byte stream on a download URL; the caller must close it.

        Raises:
            ShareFileApiError: If the storage host returns a non-2xx status code.
        """
        try:
            return urllib_request.urlopen(url, timeout=self._timeout)  # type: ignore[no-any-return]
        except HTTPError as exc:
            logger.error("[open_download_stream] download failed; status:%d", exc.code)
            raise ShareFileApiError(exc.code, str(exc.reason)) from exc

    def get_item_contents(self, item_id: str) -> bytes:
        """Download the full contents of a file item."""
        url = self.get_item_download_url(item_id)[FIELD_DOWNLOAD_URL]
        with self.open_download_stream(url) as resp:
            return resp.read()

    def upload_file_streamed(
        self,
        stream: IO[bytes],
        parent_id: str,
        name: str,
        unzip: bool = False,
        overwrite: bool = False,
    ) -> None:
        """Upload a binary stream as a file in the given folder.

        Requests an upload specification, then posts the stream to its
        ChunkUri. The stream is passed through unread and is not closed.
        """
        upload_spec = self._request(
            "POST",
            _item_path(parent_id, "/Upload2"),
            json_body={
                "Method": "Standard",
                "Raw": True,
                "FileName": name,
                "Overwrite": overwrite,
                "Unzip": unzip,
            },
        )
        chunk_uri = upload_spec[FIELD_CHUNK_URI]
        req = urllib_request.Request(
            chunk_uri,
            data=stream,  # type: ignore[arg-type]
            headers={"Content-Type": "application/octet-stream"},
            method="POST",
        )
        try:
            with urllib_request.urlopen(req, timeout=self._timeout) as resp:
                resp.read()
        except HTTPError as exc:
            logger.error(
                "[upload_file_streamed] upload failed; parent_id:%s;name:%s", parent_id, name
            )
            raise ShareFileApiError(exc.code, str(exc.reason)) from exc
        logger.info("[upload_file_streamed] uploaded file; parent_id:%s;name:%s", parent_id, name)

    def create_folder(
        self,
        parent_id: str,
        name: str,
        description: str = "",
        overwrite: bool = False,
    ) -> dict[str, Any]:
        """Create a folder under the given parent."""
        return self._request(
            "POST",
            _item_path(parent_id, "/Folder"),
            params={"overwrite": str(overwrite).lower()},
            json_body={"Name": name, "Description": description},
        )

    def update_item(self, item_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Patch an item's fields (name, parent, ...)."""
        return self._request("PATCH", _item_path(item_id), json_body=data)

    def copy_item(self, target_id: str, item_id: str, overwrite: bool = False) -> dict[str, Any]:
        """Copy an item into the target folder, server side."""
        return self._request(
            "POST",
            _item_path(item_id, "/Copy"),
            params={"targetid": target_id, "overwrite": str(overwrite).lower()},
        )

    def delete_item(self, item_id: str) -> None:
        """Move an item to the recycle bin."""
        self._request("DELETE", _item_path(item_id))


def sharefile_client_from_config(config: AppConfig) -> ShareFileClient:
    """Construct a ShareFileClient from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured ShareFileClient instance.
    """
    return ShareFileClient(
        hostname=config.hostname,
        client_id=config.client_id,
        client_secret=config.client_secret,
        username=config.username,
        password=config.password,
        timeout=config.timeout_seconds,
    )
