"""Resolution of adapter paths to ShareFile items."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sharefile_fs.sharefile.models import ItemKind, SharefileItem

if TYPE_CHECKING:
    from sharefile_fs.sharefile.client import ShareFileClient

logger = logging.getLogger(__name__)


def apply_prefix(prefix: str, path: str) -> str:
    """Return the absolute ShareFile path for an adapter path."""
    if path == ".":
        path = ""
    prefixed = "/".join(part for part in (prefix.strip("/"), path.strip("/")) if part)
    return f"/{prefixed}"


class PathResolver:
    """Looks up files and folders by path under a fixed root prefix."""

    def __init__(self, client: ShareFileClient, prefix: str = "") -> None:
        self._client = client
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def resolve(self, path: str) -> SharefileItem | None:
        """Return the file or folder at ``path``, or None.

        Any client error is treated as a miss, as is an item that is
        neither a file nor a folder (links, notes, ...).
        """
        absolute = apply_prefix(self._prefix, path)
        try:
            raw = self._client.get_item_by_path(absolute)
        except Exception as exc:
            logger.debug("[resolve] lookup failed; path:%s;error:%s", absolute, exc)
            return None

        item = SharefileItem.from_raw(raw)
        if item.kind is ItemKind.OTHER:
            logger.debug("[resolve] not a file or folder; path:%s", absolute)
            return None
        return item
