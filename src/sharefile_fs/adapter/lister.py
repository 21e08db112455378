"""Directory listing built from ShareFile folder children."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sharefile_fs.adapter.metadata import Metadata, join_path, map_item
from sharefile_fs.sharefile.models import FIELD_CHILDREN, FIELD_FILE_COUNT, SharefileItem

if TYPE_CHECKING:
    from sharefile_fs.sharefile.client import ShareFileClient

# ShareFile reports no expandable children below this count.
MIN_LISTABLE_FILE_COUNT = 2


class TreeLister:
    """Lists folder contents, optionally descending into sub-folders."""

    def __init__(self, client: ShareFileClient, verbose: bool = False) -> None:
        self._client = client
        self._verbose = verbose

    def list_items(
        self, item: SharefileItem, base_path: str, recursive: bool = False
    ) -> list[Metadata]:
        """Return metadata for the children of ``item``.

        Each level is listed before the sub-folders below it, in the order
        ShareFile returns the children.

        Args:
            item: Folder to list. Files have no children.
            base_path: Root-relative path of ``item``.
            recursive: Also list every sub-folder.

        Returns:
            Flat list of child metadata.
        """
        if item.is_file:
            return []

        expanded = self._client.get_item_by_id(item.id, expand_children=True)
        raw_children = expanded.get(FIELD_CHILDREN)
        if int(expanded.get(FIELD_FILE_COUNT) or 0) < MIN_LISTABLE_FILE_COUNT or not raw_children:
            return []

        children = self._files_and_folders(raw_children)
        listing = [map_item(child, base_path, verbose=self._verbose) for child in children]

        if recursive:
            for child in children:
                if child.is_folder:
                    child_path = join_path(base_path, child.file_name)
                    listing.extend(self.list_items(child, child_path, recursive=True))
        return listing

    @staticmethod
    def _files_and_folders(raw_children: list[dict[str, Any]]) -> list[SharefileItem]:
        children = (SharefileItem.from_raw(raw) for raw in raw_children)
        return [child for child in children if child.is_file or child.is_folder]
