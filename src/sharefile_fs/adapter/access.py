"""Access-control checks against ShareFile item Info maps."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sharefile_fs.sharefile.models import AccessCapability, SharefileItem

if TYPE_CHECKING:
    from sharefile_fs.sharefile.client import ShareFileClient

logger = logging.getLogger(__name__)


def effective_check(
    item: SharefileItem,
    capability: AccessCapability,
    parent: SharefileItem | None = None,
) -> tuple[SharefileItem, AccessCapability]:
    """Return the item and capability that actually govern an access check.

    Files carry no access-control info of their own; their rules come from
    the parent folder, where deleting the file is a child deletion.

    Args:
        item: Item the caller wants to act on.
        capability: Requested capability.
        parent: Parent folder of ``item``; required when ``item`` is a file.

    Returns:
        Tuple of (target item, effective capability).
    """
    if not item.is_file:
        return item, capability
    if parent is None:
        raise ValueError("A file's access check requires its parent folder")
    if capability is AccessCapability.DELETE_CURRENT_ITEM:
        capability = AccessCapability.DELETE_CHILD_ITEMS
    return parent, capability


def is_granted(item: SharefileItem, capability: AccessCapability) -> bool:
    """Check a capability in the item's Info map; missing means denied."""
    return item.info.get(capability.value) == 1


class AccessGate:
    """Checks ShareFile access-control rules before an operation."""

    def __init__(self, client: ShareFileClient) -> None:
        self._client = client

    def check(self, item: SharefileItem, capability: AccessCapability) -> bool:
        """Return True when ``capability`` is granted for ``item``.

        For files the parent folder is fetched and checked instead.
        """
        parent = None
        if item.is_file:
            parent = SharefileItem.from_raw(self._client.get_item_by_id(item.parent_id))
        target, effective = effective_check(item, capability, parent)

        granted = is_granted(target, effective)
        if not granted:
            logger.info(
                "[check] access denied; item_id:%s;capability:%s",
                target.id,
                effective.value,
            )
        return granted
