"""Data models for ShareFile API items and access-control info."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# ShareFile API JSON field names
FIELD_ID = "Id"
FIELD_ODATA_TYPE = "odata.type"
FIELD_FILE_NAME = "FileName"
FIELD_NAME = "Name"
FIELD_FILE_SIZE = "FileSizeBytes"
FIELD_FILE_COUNT = "FileCount"
FIELD_PARENT = "Parent"
FIELD_INFO = "Info"
FIELD_CHILDREN = "Children"
FIELD_DOWNLOAD_URL = "DownloadUrl"
FIELD_CHUNK_URI = "ChunkUri"

# Timestamp fields, in order of preference
TIMESTAMP_FIELDS = (
    "ClientModifiedDate",
    "ClientCreatedDate",
    "CreationDate",
    "ProgenyEditDate",
)

ODATA_TYPE_FILE = "ShareFile.Api.Models.File"
ODATA_TYPE_FOLDER = "ShareFile.Api.Models.Folder"


class ItemKind(Enum):
    """Kind of a ShareFile item, derived from its odata.type."""

    FILE = "file"
    FOLDER = "folder"
    OTHER = "other"

    @classmethod
    def from_odata_type(cls, odata_type: str | None) -> ItemKind:
        if odata_type == ODATA_TYPE_FILE:
            return cls.FILE
        if odata_type == ODATA_TYPE_FOLDER:
            return cls.FOLDER
        return cls.OTHER


class AccessCapability(str, Enum):
    """Access-control rules reported in a ShareFile item's Info map."""

    ADD_FOLDER = "CanAddFolder"
    ADD_NODE = "CanAddNode"
    VIEW = "CanView"
    DOWNLOAD = "CanDownload"
    UPLOAD = "CanUpload"
    SEND = "CanSend"
    DELETE_CURRENT_ITEM = "CanDeleteCurrentItem"
    DELETE_CHILD_ITEMS = "CanDeleteChildItems"
    MANAGE_PERMISSIONS = "CanManagePermissions"
    CREATE_OFFICE_DOCUMENTS = "CanCreateOfficeDocuments"


@dataclass(frozen=True)
class SharefileItem:
    """A ShareFile item record tagged with its kind.

    The raw record is kept as returned by the API and is never modified.
    """

    kind: ItemKind
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> SharefileItem:
        """Classify a raw API record."""
        return cls(kind=ItemKind.from_odata_type(raw.get(FIELD_ODATA_TYPE)), raw=raw)

    @property
    def id(self) -> str:
        return str(self.raw.get(FIELD_ID, ""))

    @property
    def file_name(self) -> str:
        return str(self.raw.get(FIELD_FILE_NAME, ""))

    @property
    def size(self) -> int:
        return int(self.raw.get(FIELD_FILE_SIZE) or 0)

    @property
    def parent_id(self) -> str:
        parent = self.raw.get(FIELD_PARENT) or {}
        return str(parent.get(FIELD_ID, ""))

    @property
    def info(self) -> dict[str, Any]:
        return self.raw.get(FIELD_INFO) or {}

    @property
    def is_file(self) -> bool:
        return self.kind is ItemKind.FILE

    @property
    def is_folder(self) -> bool:
        return self.kind is ItemKind.FOLDER
