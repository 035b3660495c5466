"""Unit tests for server/tools.py: catalog and dispatch."""

import base64
import json
from unittest.mock import MagicMock, patch

import pytest

from sharepoint_mcp.config import AppConfig
from sharepoint_mcp.errors import (
    ConfigurationError,
    InvalidArgumentsError,
    InvalidOperationError,
    UnknownToolError,
)
from sharepoint_mcp.graph.models import Credentials
from sharepoint_mcp.server.tools import TOOL_HANDLERS, TOOLS, ToolDispatcher

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_SITE_DRIVE = {"siteId": "site-1", "driveId": "drive-1"}
_BASE = "/sites/site-1/drives/drive-1/root"

_EXPECTED_TOOLS = {
    "getFolders",
    "createFolder",
    "deleteFolder",
    "getFolderTree",
    "getDocuments",
    "getDocumentContent",
    "uploadDocument",
    "updateDocumentContent",
    "deleteDocument",
    "searchDocumentsByKeywords",
}


def _make_dispatcher() -> tuple[ToolDispatcher, MagicMock]:
    """Return (dispatcher, mock_graph_client) with graph client creation patched."""
    mock_graph = MagicMock()
    mock_graph.base_url = "https://graph.microsoft.com/v1.0"
    dispatcher = ToolDispatcher(AppConfig(), token_provider=MagicMock())
    return dispatcher, mock_graph


def _dispatch(name: str, arguments: dict) -> tuple[object, MagicMock]:  # type: ignore[type-arg]
    dispatcher, mock_graph = _make_dispatcher()
    with patch(
        "sharepoint_mcp.server.tools.graph_client_from_config", return_value=mock_graph
    ):
        result = dispatcher.dispatch(name, arguments)
    return result, mock_graph


# ---------------------------------------------------------------------------
# Catalog tests
# ---------------------------------------------------------------------------


class TestCatalog:
    def test_catalog_matches_handlers(self) -> None:
        assert {tool.name for tool in TOOLS} == set(TOOL_HANDLERS) == _EXPECTED_TOOLS

    def test_every_tool_accepts_auth_and_requires_site_drive(self) -> None:
        for tool in TOOLS:
            assert "auth" in tool.inputSchema["properties"]
            assert "siteDrive" in tool.inputSchema["required"]
            assert "auth" not in tool.inputSchema["required"]

    def test_upload_requires_file_path_and_content(self) -> None:
        upload = next(tool for tool in TOOLS if tool.name == "uploadDocument")
        assert set(upload.inputSchema["required"]) == {"siteDrive", "filePath", "content"}


# ---------------------------------------------------------------------------
# dispatch tests
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_unknown_tool_raises(self) -> None:
        dispatcher, _ = _make_dispatcher()
        with pytest.raises(UnknownToolError, match="noSuchTool"):
            dispatcher.dispatch("noSuchTool", {"siteDrive": _SITE_DRIVE})

    def test_missing_site_drive_raises(self) -> None:
        dispatcher, _ = _make_dispatcher()
        with pytest.raises(InvalidArgumentsError):
            dispatcher.dispatch("getFolders", {"path": "root"})

    def test_credentials_are_passed_to_graph_client_factory(self) -> None:
        dispatcher, mock_graph = _make_dispatcher()
        mock_graph.get.return_value = {"value": []}
        with patch(
            "sharepoint_mcp.server.tools.graph_client_from_config", return_value=mock_graph
        ) as mock_factory:
            dispatcher.dispatch(
                "getFolders",
                {
                    "auth": {"tenantId": "t", "clientId": "c", "clientSecret": "s"},
                    "siteDrive": _SITE_DRIVE,
                    "path": "root",
                },
            )

        assert mock_factory.call_args.args[2] == Credentials("t", "c", "s")

    def test_get_folders(self) -> None:
        folder = {"id": "f", "name": "Docs", "folder": {"childCount": 0}}
        dispatcher, mock_graph = _make_dispatcher()
        mock_graph.get.return_value = {"value": [folder]}
        with patch(
            "sharepoint_mcp.server.tools.graph_client_from_config", return_value=mock_graph
        ):
            result = dispatcher.dispatch("getFolders", {"siteDrive": _SITE_DRIVE, "path": "/"})

        assert result == [folder]

    def test_create_folder_requires_folder_name(self) -> None:
        with pytest.raises(InvalidArgumentsError, match="folderName"):
            _dispatch("createFolder", {"siteDrive": _SITE_DRIVE, "path": "Docs"})

    def test_get_folder_tree_defaults(self) -> None:
        dispatcher, mock_graph = _make_dispatcher()
        mock_graph.get.return_value = {"value": []}
        with patch(
            "sharepoint_mcp.server.tools.graph_client_from_config", return_value=mock_graph
        ):
            result = dispatcher.dispatch("getFolderTree", {"siteDrive": _SITE_DRIVE})

        assert result == []
        assert mock_graph.get.call_args.args[0].startswith(f"{_BASE}/children")

    def test_get_folder_tree_serializes_nodes_and_coerces_depth(self) -> None:
        dispatcher, mock_graph = _make_dispatcher()
        mock_graph.get.return_value = {
            "value": [{"id": "f", "name": "A", "folder": {"childCount": 3}}]
        }
        with patch(
            "sharepoint_mcp.server.tools.graph_client_from_config", return_value=mock_graph
        ):
            result = dispatcher.dispatch(
                "getFolderTree", {"siteDrive": _SITE_DRIVE, "path": "root", "maxDepth": 1.0}
            )

        assert result == [{"name": "A", "path": "A", "id": "f", "childCount": 3, "children": []}]

    def test_delete_folder_root_never_authenticates(self) -> None:
        provider = MagicMock()
        dispatcher = ToolDispatcher(AppConfig(), token_provider=provider)

        with pytest.raises(InvalidOperationError):
            dispatcher.dispatch("deleteFolder", {"siteDrive": _SITE_DRIVE, "path": "root"})

        provider.for_credentials.assert_not_called()

    def test_missing_credentials_surface_configuration_error(self) -> None:
        dispatcher = ToolDispatcher(AppConfig())

        with pytest.raises(ConfigurationError):
            dispatcher.dispatch("getDocuments", {"siteDrive": _SITE_DRIVE, "path": "Docs"})

    def test_upload_document_defaults(self) -> None:
        dispatcher, mock_graph = _make_dispatcher()
        mock_graph.put_content.return_value = {"id": "f-1", "name": "a.bin", "size": 2}
        with patch(
            "sharepoint_mcp.server.tools.graph_client_from_config", return_value=mock_graph
        ):
            result = dispatcher.dispatch(
                "uploadDocument",
                {
                    "siteDrive": _SITE_DRIVE,
                    "filePath": "a.bin",
                    "content": base64.b64encode(b"\x01\x02").decode(),
                },
            )

        url, data = mock_graph.put_content.call_args.args
        assert url.endswith("?@microsoft.graph.conflictBehavior=fail")
        assert data == b"\x01\x02"
        assert mock_graph.put_content.call_args.kwargs["content_type"] == (
            "application/octet-stream"
        )
        assert result["id"] == "f-1"

    @pytest.mark.parametrize("overwrite", ["false", "true", 1])
    def test_upload_rejects_non_boolean_overwrite(self, overwrite: object) -> None:
        with pytest.raises(InvalidArgumentsError, match="overwrite"):
            _dispatch(
                "uploadDocument",
                {
                    "siteDrive": _SITE_DRIVE,
                    "filePath": "a.bin",
                    "content": "AQI=",
                    "overwrite": overwrite,
                },
            )

    def test_upload_with_overwrite_true_omits_conflict_behavior(self) -> None:
        _, mock_graph = _dispatch(
            "uploadDocument",
            {"siteDrive": _SITE_DRIVE, "filePath": "a.bin", "content": "AQI=", "overwrite": True},
        )

        url, _ = mock_graph.put_content.call_args.args
        assert url == f"{_BASE}:/a.bin:/content"

    def test_non_object_auth_raises_invalid_arguments(self) -> None:
        with pytest.raises(InvalidArgumentsError, match="auth"):
            _dispatch("getFolders", {"siteDrive": _SITE_DRIVE, "auth": "secret"})

    def test_search_wraps_single_keyword(self) -> None:
        dispatcher, mock_graph = _make_dispatcher()
        mock_graph.get.return_value = {
            "value": [{"id": "1", "driveItem": {"name": "Report_2024.pdf", "file": {}}}]
        }
        with patch(
            "sharepoint_mcp.server.tools.graph_client_from_config", return_value=mock_graph
        ):
            result = dispatcher.dispatch(
                "searchDocumentsByKeywords",
                {
                    "siteDrive": {"siteId": "site-1"},
                    "listId": "list-1",
                    "keywords": "2024",
                    "attributeName": "name",
                },
            )

        assert [item["id"] for item in result] == ["1"]
        assert mock_graph.get.call_args.args[0].startswith("/sites/site-1/lists/list-1/items")


class TestCallToolJson:
    def test_serializes_result(self) -> None:
        dispatcher, mock_graph = _make_dispatcher()
        with patch(
            "sharepoint_mcp.server.tools.graph_client_from_config", return_value=mock_graph
        ):
            text = dispatcher.call_tool_json(
                "deleteDocument", {"siteDrive": _SITE_DRIVE, "filePath": "/Docs/ä.txt"}
            )

        assert json.loads(text) == {"deleted": True, "path": "Docs/ä.txt"}
        assert "ä" in text
