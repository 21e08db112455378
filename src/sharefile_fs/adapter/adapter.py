"""Filesystem adapter — generic file operations on top of ShareFile.

Every operation resolves its path(s), checks the ShareFile access-control
rules, calls the API, and re-resolves the target to confirm the result.
Precondition failures (missing item, denied access) become None or False;
API errors raised after the preconditions have passed propagate.
"""

from __future__ import annotations

import io
import logging
import posixpath
from typing import IO, TYPE_CHECKING

from sharefile_fs.adapter.access import AccessGate
from sharefile_fs.adapter.errors import (
    AccessDeniedError,
    ItemNotFoundError,
    SharefileAdapterError,
    VisibilityNotSupportedError,
)
from sharefile_fs.adapter.lister import TreeLister
from sharefile_fs.adapter.metadata import Metadata, map_item
from sharefile_fs.adapter.resolver import PathResolver
from sharefile_fs.sharefile.client import ShareFileClient, sharefile_client_from_config
from sharefile_fs.sharefile.models import (
    FIELD_DOWNLOAD_URL,
    FIELD_FILE_NAME,
    FIELD_ID,
    FIELD_NAME,
    FIELD_PARENT,
    AccessCapability,
    SharefileItem,
)

if TYPE_CHECKING:
    from sharefile_fs.config import AppConfig

logger = logging.getLogger(__name__)

ROOT_PATHS = ("", "/")

Contents = str | bytes


def _dirname(path: str) -> str:
    return posixpath.dirname(path.rstrip("/"))


def _basename(path: str) -> str:
    return posixpath.basename(path.rstrip("/"))


def _is_server_side_copy(path: str, new_path: str) -> bool:
    """Same file name in a different folder can be copied by ShareFile itself."""
    return (
        _dirname(path).casefold() != _dirname(new_path).casefold()
        and _basename(path).casefold() == _basename(new_path).casefold()
    )


class SharefileAdapter:
    """Generic filesystem operations backed by a ShareFile account."""

    def __init__(
        self,
        client: ShareFileClient,
        prefix: str = "",
        return_sharefile_item: bool = False,
    ) -> None:
        """Initialise the adapter.

        Args:
            client: ShareFile API client.
            prefix: Folder prefix applied to every path.
            return_sharefile_item: Attach the raw ShareFile item to metadata.
        """
        self._client = client
        self._verbose = return_sharefile_item
        self._resolver = PathResolver(client, prefix)
        self._gate = AccessGate(client)
        self._lister = TreeLister(client, verbose=return_sharefile_item)

    def get_client(self) -> ShareFileClient:
        return self._client

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def has(self, path: str) -> Metadata | None:
        return self.get_metadata(path)

    def get_metadata(self, path: str) -> Metadata | None:
        """Return metadata for the file or folder at ``path``."""
        item = self._resolver.resolve(path)
        if item is None:
            return None
        metadata = self._map(item, _dirname(path))
        if path in ROOT_PATHS:
            metadata.path = path
        return metadata

    def get_size(self, path: str) -> Metadata | None:
        return self.get_metadata(path)

    def get_mimetype(self, path: str) -> Metadata | None:
        return self.get_metadata(path)

    def get_timestamp(self, path: str) -> Metadata | None:
        return self.get_metadata(path)

    def read(self, path: str) -> Metadata | None:
        """Download a file; the returned metadata carries its contents."""
        try:
            item = self._require_item(path)
            self._require_access(item, AccessCapability.DOWNLOAD, path)
        except SharefileAdapterError as exc:
            logger.info("[read] %s", exc)
            return None

        contents = self._client.get_item_contents(item.id)
        return self._map(item, _dirname(path), contents=contents)

    def read_stream(self, path: str) -> Metadata | None:
        """Open a download stream; the caller must close ``metadata.stream``."""
        try:
            item = self._require_item(path)
            self._require_access(item, AccessCapability.DOWNLOAD, path)
        except SharefileAdapterError as exc:
            logger.info("[read_stream] %s", exc)
            return None

        download = self._client.get_item_download_url(item.id)
        stream = self._client.open_download_stream(download[FIELD_DOWNLOAD_URL])
        return self._map(item, _dirname(path), stream=stream)

    def list_contents(self, directory: str = "", recursive: bool = False) -> list[Metadata] | None:
        """List a folder, or return None when it does not exist."""
        item = self._resolver.resolve(directory)
        if item is None:
            return None
        return self._lister.list_items(item, directory, recursive)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write(self, path: str, contents: Contents) -> Metadata | None:
        return self._upload(path, contents)

    def write_stream(self, path: str, resource: IO[bytes]) -> Metadata | None:
        return self._upload(path, resource)

    def update(self, path: str, contents: Contents) -> Metadata | None:
        return self._upload(path, contents)

    def update_stream(self, path: str, resource: IO[bytes]) -> Metadata | None:
        return self._upload(path, resource)

    def put(self, path: str, contents: Contents) -> Metadata | None:
        return self._upload(path, contents)

    def rename(self, path: str, new_path: str) -> bool:
        """Move and/or rename an item."""
        try:
            target_folder = self._require_target_folder(new_path)
            item = self._require_item(path)
        except SharefileAdapterError as exc:
            logger.info("[rename] %s", exc)
            return False

        name = _basename(new_path)
        self._client.update_item(
            item.id,
            {
                FIELD_FILE_NAME: name,
                FIELD_NAME: name,
                FIELD_PARENT: {FIELD_ID: target_folder.id},
            },
        )
        logger.info("[rename] renamed item; path:%s;new_path:%s", path, new_path)
        return self.has(new_path) is not None

    def copy(self, path: str, new_path: str) -> bool:
        """Copy a file.

        ShareFile copies server side only into another folder under the same
        name; any other copy downloads the file and uploads it again.
        """
        try:
            target_folder = self._require_target_folder(new_path)
            item = self._require_item(path)
        except SharefileAdapterError as exc:
            logger.info("[copy] %s", exc)
            return False

        if _is_server_side_copy(path, new_path):
            self._client.copy_item(target_folder.id, item.id, True)
        else:
            contents = self._client.get_item_contents(item.id)
            self._upload(new_path, contents)
        logger.info("[copy] copied item; path:%s;new_path:%s", path, new_path)
        return self.has(new_path) is not None

    def delete(self, path: str) -> bool:
        return self.delete_dir(path)

    def delete_dir(self, dirname: str) -> bool:
        """Delete a file or folder; True once it no longer resolves."""
        try:
            item = self._require_item(dirname)
            self._require_access(item, AccessCapability.DELETE_CURRENT_ITEM, dirname)
        except SharefileAdapterError as exc:
            logger.info("[delete_dir] %s", exc)
            return False

        self._client.delete_item(item.id)
        logger.info("[delete_dir] deleted item; path:%s", dirname)
        return self.has(dirname) is None

    def create_dir(self, dirname: str) -> Metadata | None:
        """Create a folder; an existing folder of the same name is overwritten."""
        folder = _basename(dirname)
        try:
            parent = self._require_item(_dirname(dirname))
            self._require_access(parent, AccessCapability.ADD_FOLDER, _dirname(dirname))
        except SharefileAdapterError as exc:
            logger.info("[create_dir] %s", exc)
            return None

        self._client.create_folder(parent.id, folder, folder, True)
        logger.info("[create_dir] created folder; path:%s", dirname)
        return self.has(dirname)

    def read_and_delete(self, path: str) -> bytes | None:
        """Return a file's contents and delete it."""
        try:
            item = self._require_item(path)
            self._require_access(item, AccessCapability.DOWNLOAD, path)
            self._require_access(item, AccessCapability.DELETE_CURRENT_ITEM, path)
        except SharefileAdapterError as exc:
            logger.info("[read_and_delete] %s", exc)
            return None

        contents = self._client.get_item_contents(item.id)
        self.delete(path)
        return contents

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------

    def get_visibility(self, path: str) -> None:
        raise VisibilityNotSupportedError("ShareFile does not support visibility")

    def set_visibility(self, path: str, visibility: str) -> None:
        raise VisibilityNotSupportedError("ShareFile does not support visibility")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _map(
        self,
        item: SharefileItem,
        base_path: str,
        contents: Contents | None = None,
        stream: IO[bytes] | None = None,
    ) -> Metadata:
        return map_item(item, base_path, contents=contents, stream=stream, verbose=self._verbose)

    def _require_item(self, path: str) -> SharefileItem:
        item = self._resolver.resolve(path)
        if item is None:
            raise ItemNotFoundError(path)
        return item

    def _require_access(
        self, item: SharefileItem, capability: AccessCapability, path: str
    ) -> None:
        if not self._gate.check(item, capability):
            raise AccessDeniedError(path, capability.value)

    def _require_target_folder(self, new_path: str) -> SharefileItem:
        """Resolve the folder ``new_path`` lands in and check it accepts uploads."""
        folder = self._require_item(_dirname(new_path))
        self._require_access(folder, AccessCapability.UPLOAD, _dirname(new_path))
        return folder

    def _upload(self, path: str, contents: Contents | IO[bytes]) -> Metadata | None:
        """Upload contents or a stream to ``path``, overwriting any existing file."""
        try:
            parent = self._require_target_folder(path)
        except SharefileAdapterError as exc:
            logger.info("[_upload] %s", exc)
            return None

        if isinstance(contents, str):
            stream: IO[bytes] = io.BytesIO(contents.encode("utf-8"))
        elif isinstance(contents, bytes):
            stream = io.BytesIO(contents)
        else:
            stream = contents

        self._client.upload_file_streamed(stream, parent.id, _basename(path), False, True)
        logger.info("[_upload] uploaded file; path:%s", path)

        metadata = self.get_metadata(path)
        if metadata is None:
            return None
        if isinstance(contents, (str, bytes)):
            metadata.contents = contents
        return metadata


def sharefile_adapter_from_config(config: AppConfig) -> SharefileAdapter:
    """Construct a SharefileAdapter (and its client) from application configuration.

    Args:
        config: Application configuration instance.

    Returns:
        Configured SharefileAdapter instance.
    """
    return SharefileAdapter(
        client=sharefile_client_from_config(config),
        prefix=config.root_prefix,
        return_sharefile_item=config.return_sharefile_item,
    )
