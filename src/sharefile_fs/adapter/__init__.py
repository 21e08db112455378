"""Generic filesystem operations mapped onto ShareFile items."""

from sharefile_fs.adapter.adapter import SharefileAdapter, sharefile_adapter_from_config
from sharefile_fs.adapter.errors import (
    AccessDeniedError,
    ItemNotFoundError,
    SharefileAdapterError,
    VisibilityNotSupportedError,
)
from sharefile_fs.adapter.metadata import Metadata

__all__ = [
    "AccessDeniedError",
    "ItemNotFoundError",
    "Metadata",
    "SharefileAdapter",
    "SharefileAdapterError",
    "VisibilityNotSupportedError",
    "sharefile_adapter_from_config",
]
