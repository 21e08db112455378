"""Mapping of ShareFile items to generic filesystem metadata."""

from __future__ import annotations

import mimetypes
import posixpath
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import IO, Any

from sharefile_fs.sharefile.models import TIMESTAMP_FIELDS, SharefileItem

DIRECTORY_MIMETYPE = "inode/directory"
DEFAULT_MIMETYPE = "text/plain"
BINARY_MIMETYPE = "application/octet-stream"

TYPE_FILE = "file"
TYPE_DIR = "dir"


@dataclass
class Metadata:
    """Generic metadata for a file or directory.

    Attributes:
        path: Root-relative path, forward-slash separated, no leading slash.
        type: "file" or "dir".
        mimetype: Guessed MIME type; "inode/directory" for directories.
        size: Size in bytes as reported by ShareFile.
        timestamp: Unix epoch seconds, or None when ShareFile reports no date.
        dirname: Directory part of ``path`` ("." at the top level).
        filename: File name without extension.
        extension: Extension without the leading dot.
        basename: File name without extension.
        contents: File contents, only when read or written.
        stream: Open byte stream, only for streamed reads.
        sharefile_item: Raw ShareFile record, only in verbose mode.
    """

    path: str
    type: str
    mimetype: str
    size: int
    timestamp: int | None
    dirname: str
    filename: str
    extension: str
    basename: str
    contents: str | bytes | None = None
    stream: IO[bytes] | None = None
    sharefile_item: dict[str, Any] | None = None

    @property
    def is_file(self) -> bool:
        return self.type == TYPE_FILE

    @property
    def is_dir(self) -> bool:
        return self.type == TYPE_DIR

    def to_dict(self) -> dict[str, Any]:
        """Render as a plain mapping; the raw item key only when present."""
        result: dict[str, Any] = {
            "timestamp": self.timestamp,
            "path": self.path,
            "mimetype": self.mimetype,
            "dirname": self.dirname,
            "extension": self.extension,
            "filename": self.filename,
            "basename": self.basename,
            "type": self.type,
            "size": self.size,
            "contents": self.contents,
            "stream": self.stream,
        }
        if self.sharefile_item is not None:
            result["sharefile_item"] = self.sharefile_item
        return result


def parse_timestamp(raw: dict[str, Any]) -> int | None:
    """Return epoch seconds from the first non-empty ShareFile date field.

    ShareFile dates are ISO-8601 strings ("2017-09-04T21:48:44Z"); dates
    without an offset are taken as UTC.
    """
    value = next((raw[name] for name in TIMESTAMP_FIELDS if raw.get(name)), None)
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


def guess_mimetype(name: str, contents: str | bytes | None = None) -> str:
    """Guess a file's MIME type from its name, then from its contents."""
    mimetype, _ = mimetypes.guess_type(name, strict=False)
    if mimetype:
        return mimetype
    if isinstance(contents, bytes) and contents:
        try:
            contents.decode("utf-8")
        except UnicodeDecodeError:
            return BINARY_MIMETYPE
    return DEFAULT_MIMETYPE


def split_name(name: str) -> tuple[str, str]:
    """Split a file name into (stem, extension) at the last dot."""
    if "." not in name:
        return name, ""
    stem, _, extension = name.rpartition(".")
    return stem, extension


def join_path(base_path: str, name: str) -> str:
    """Join a base path and a name, trimming surrounding slashes."""
    if base_path == ".":
        base_path = ""
    return "/".join(part for part in (base_path.strip("/"), name.strip("/")) if part)


def map_item(
    item: SharefileItem,
    base_path: str = "",
    contents: str | bytes | None = None,
    stream: IO[bytes] | None = None,
    verbose: bool = False,
) -> Metadata:
    """Map a ShareFile item to generic metadata.

    Args:
        item: Resolved ShareFile item.
        base_path: Root-relative directory containing the item.
        contents: File contents to embed, if any.
        stream: Open byte stream to embed, if any.
        verbose: Attach the raw ShareFile record.

    Returns:
        A new Metadata instance.
    """
    name = item.file_name
    path = join_path(base_path, name)
    stem, extension = split_name(name)

    if item.is_file:
        mimetype = guess_mimetype(name, contents)
        item_type = TYPE_FILE
    else:
        mimetype = DIRECTORY_MIMETYPE
        item_type = TYPE_DIR

    return Metadata(
        path=path,
        type=item_type,
        mimetype=mimetype,
        size=item.size,
        timestamp=parse_timestamp(item.raw),
        dirname=posixpath.dirname(path) or ".",
        filename=stem,
        extension=extension,
        basename=stem,
        contents=contents if contents else None,
        stream=stream,
        sharefile_item=item.raw if verbose else None,
    )
