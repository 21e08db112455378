"""Unit tests for adapter/resolver.py — path prefixing and item lookup."""

from unittest.mock import MagicMock

import pytest

from sharefile_fs.adapter.resolver import PathResolver, apply_prefix
from sharefile_fs.sharefile.client import ShareFileApiError
from sharefile_fs.sharefile.models import ItemKind


class TestApplyPrefix:
    @pytest.mark.parametrize(
        ("prefix", "path", "expected"),
        [
            ("/prefix", "docs/report.txt", "/prefix/docs/report.txt"),
            ("/prefix/", "/docs/", "/prefix/docs"),
            ("prefix", "", "/prefix"),
            ("/prefix", ".", "/prefix"),
            ("", "docs", "/docs"),
            ("", "", "/"),
        ],
    )
    def test_apply_prefix(self, prefix: str, path: str, expected: str) -> None:
        assert apply_prefix(prefix, path) == expected


class TestPathResolver:
    def test_resolves_file(self) -> None:
        client = MagicMock()
        client.get_item_by_path.return_value = {
            "odata.type": "ShareFile.Api.Models.File",
            "Id": "fi-1",
        }
        resolver = PathResolver(client, "/prefix")

        item = resolver.resolve("docs/report.txt")

        assert item is not None
        assert item.kind is ItemKind.FILE
        client.get_item_by_path.assert_called_once_with("/prefix/docs/report.txt")

    def test_dot_resolves_to_root(self) -> None:
        client = MagicMock()
        client.get_item_by_path.return_value = {"odata.type": "ShareFile.Api.Models.Folder"}
        resolver = PathResolver(client, "/prefix")

        item = resolver.resolve(".")

        assert item is not None
        assert item.is_folder
        client.get_item_by_path.assert_called_once_with("/prefix")

    def test_client_error_is_a_miss(self) -> None:
        client = MagicMock()
        client.get_item_by_path.side_effect = ShareFileApiError(404, "Item not found")
        resolver = PathResolver(client, "/prefix")

        assert resolver.resolve("missing.txt") is None

    def test_any_client_exception_is_a_miss(self) -> None:
        client = MagicMock()
        client.get_item_by_path.side_effect = OSError("connection reset")
        resolver = PathResolver(client)

        assert resolver.resolve("docs") is None

    def test_other_item_kinds_are_a_miss(self) -> None:
        client = MagicMock()
        client.get_item_by_path.return_value = {"odata.type": "ShareFile.Api.Models.Link"}
        resolver = PathResolver(client)

        assert resolver.resolve("docs/link") is None
