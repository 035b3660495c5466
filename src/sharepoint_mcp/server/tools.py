"""Tool catalog and dispatch shared by the MCP and HTTP surfaces.

``TOOLS`` declares every tool with its JSON input schema and
``TOOL_HANDLERS`` maps the same names to the functions that run them.
Each call gets its own GraphClient, so nothing is shared between calls.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mcp.types import Tool

from sharepoint_mcp.errors import InvalidArgumentsError, UnknownToolError
from sharepoint_mcp.graph.auth import TokenProvider
from sharepoint_mcp.graph.client import GraphClient, graph_client_from_config
from sharepoint_mcp.graph.models import Credentials, SiteDrive
from sharepoint_mcp.operations.documents import DEFAULT_CONTENT_TYPE, DocumentService
from sharepoint_mcp.operations.folders import DEFAULT_MAX_DEPTH, FolderService
from sharepoint_mcp.operations.search import search_documents_by_keywords

if TYPE_CHECKING:
    from sharepoint_mcp.config import AppConfig

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Input schemas
# ---------------------------------------------------------------------------

AUTH_SCHEMA: dict[str, Any] = {
    "type": "object",
    "description": (
        "Microsoft Entra ID app authentication parameters (optional; "
        "defaults come from the server environment)"
    ),
    "properties": {
        "tenantId": {"type": "string", "description": "The directory (tenant) ID"},
        "clientId": {"type": "string", "description": "The application (client) ID"},
        "clientSecret": {"type": "string", "description": "The client secret"},
    },
}

SITE_DRIVE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "description": "SharePoint site and drive identifiers",
    "properties": {
        "siteId": {"type": "string", "description": "The ID of the SharePoint site"},
        "driveId": {
            "type": "string",
            "description": "The ID of the drive within the SharePoint site",
        },
    },
    "required": ["siteId"],
}


def _input_schema(properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {"auth": AUTH_SCHEMA, "siteDrive": SITE_DRIVE_SCHEMA, **properties},
        "required": ["siteDrive", *required],
    }


_PATH = {"type": "string", "description": "The path in SharePoint (e.g. 'Folder_1/Sub')"}
_FILE_PATH = {
    "type": "string",
    "description": "The path to the file (e.g. 'Folder_1/file.docx')",
}
_CONTENT = {
    "type": "string",
    "description": "Text content for text/* types, otherwise base64-encoded bytes",
}
_CONTENT_TYPE = {
    "type": "string",
    "description": "The MIME type of the content (default: 'application/octet-stream')",
}

TOOLS: list[Tool] = [
    Tool(
        name="getFolders",
        description="Retrieve a list of folders from the specified path in SharePoint",
        inputSchema=_input_schema({"path": _PATH}, ["path"]),
    ),
    Tool(
        name="createFolder",
        description="Create a new folder in SharePoint at the specified path",
        inputSchema=_input_schema(
            {
                "path": {
                    "type": "string",
                    "description": "The parent path where the folder will be created",
                },
                "folderName": {
                    "type": "string",
                    "description": "The name of the new folder to create",
                },
            },
            ["path", "folderName"],
        ),
    ),
    Tool(
        name="deleteFolder",
        description="Delete an empty folder in SharePoint at the specified path",
        inputSchema=_input_schema(
            {"path": {"type": "string", "description": "The path of the folder to delete"}},
            ["path"],
        ),
    ),
    Tool(
        name="getFolderTree",
        description="Get a tree view of the folder structure in SharePoint",
        inputSchema=_input_schema(
            {
                "path": {"type": "string", "description": "The starting path (default: 'root')"},
                "maxDepth": {
                    "type": "number",
                    "description": f"Maximum depth to traverse (default: {DEFAULT_MAX_DEPTH})",
                },
            },
            [],
        ),
    ),
    Tool(
        name="getDocuments",
        description="List all documents and their metadata in a specified path in SharePoint",
        inputSchema=_input_schema({"path": _PATH}, ["path"]),
    ),
    Tool(
        name="getDocumentContent",
        description=(
            "Get the text content of a document in SharePoint; Word, Excel and "
            "PowerPoint files are converted to PDF first"
        ),
        inputSchema=_input_schema({"filePath": _FILE_PATH}, ["filePath"]),
    ),
    Tool(
        name="uploadDocument",
        description="Upload a document to a specified path in SharePoint",
        inputSchema=_input_schema(
            {
                "filePath": _FILE_PATH,
                "content": _CONTENT,
                "contentType": _CONTENT_TYPE,
                "overwrite": {
                    "type": "boolean",
                    "description": "Whether to overwrite an existing file (default: false)",
                },
            },
            ["filePath", "content"],
        ),
    ),
    Tool(
        name="updateDocumentContent",
        description=(
            "Update the content of an existing document in SharePoint, "
            "replacing the entire content"
        ),
        inputSchema=_input_schema(
            {
                "filePath": _FILE_PATH,
                "content": _CONTENT,
                "contentType": _CONTENT_TYPE,
            },
            ["filePath", "content"],
        ),
    ),
    Tool(
        name="deleteDocument",
        description="Delete a document in SharePoint at the specified path",
        inputSchema=_input_schema({"filePath": _FILE_PATH}, ["filePath"]),
    ),
    Tool(
        name="searchDocumentsByKeywords",
        description=(
            "Search for documents in a SharePoint list containing any of the "
            "keywords in the given attribute"
        ),
        inputSchema=_input_schema(
            {
                "listId": {
                    "type": "string",
                    "description": "The ID of the SharePoint list to search in",
                },
                "keywords": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "List of keywords to search for",
                },
                "attributeName": {
                    "type": "string",
                    "description": (
                        "The attribute to search in (e.g. 'name', 'contentType' "
                        "or any list column)"
                    ),
                },
            },
            ["listId", "keywords", "attributeName"],
        ),
    ),
]


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ToolCall:
    """Arguments and per-call collaborators handed to a tool handler."""

    arguments: dict[str, Any]
    site_drive: SiteDrive
    graph: GraphClient

    def require(self, key: str) -> Any:
        value = self.arguments.get(key)
        if value is None or value == "":
            raise InvalidArgumentsError(f"Missing required argument: {key}")
        return value

    def folders(self) -> FolderService:
        return FolderService(self.graph, self.site_drive)

    def documents(self) -> DocumentService:
        return DocumentService(self.graph, self.site_drive)


def _get_folders(call: ToolCall) -> list[dict[str, Any]]:
    return call.folders().list_folders(call.arguments.get("path"))


def _create_folder(call: ToolCall) -> dict[str, Any]:
    return call.folders().create_folder(call.arguments.get("path"), call.require("folderName"))


def _delete_folder(call: ToolCall) -> dict[str, Any]:
    return call.folders().delete_folder(call.arguments.get("path"))


def _get_folder_tree(call: ToolCall) -> list[dict[str, Any]]:
    max_depth = call.arguments.get("maxDepth")
    tree = call.folders().get_folder_tree(
        call.arguments.get("path") or "root",
        DEFAULT_MAX_DEPTH if max_depth is None else int(max_depth),
    )
    return [node.to_dict() for node in tree]


def _get_documents(call: ToolCall) -> list[dict[str, Any]]:
    return call.documents().list_documents(call.arguments.get("path"))


def _get_document_content(call: ToolCall) -> dict[str, Any]:
    return call.documents().get_document_content(call.require("filePath")).to_dict()


def _flag(call: ToolCall, key: str) -> bool:
    value = call.arguments.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise InvalidArgumentsError(f"Argument {key} must be a boolean")
    return value


def _upload_document(call: ToolCall) -> dict[str, Any]:
    result = call.documents().upload_document(
        call.require("filePath"),
        call.require("content"),
        call.arguments.get("contentType") or DEFAULT_CONTENT_TYPE,
        _flag(call, "overwrite"),
    )
    return result.to_dict()


def _update_document_content(call: ToolCall) -> dict[str, Any]:
    result = call.documents().update_document_content(
        call.require("filePath"),
        call.require("content"),
        call.arguments.get("contentType") or DEFAULT_CONTENT_TYPE,
    )
    return result.to_dict()


def _delete_document(call: ToolCall) -> dict[str, Any]:
    return call.documents().delete_document(call.require("filePath"))


def _search_documents_by_keywords(call: ToolCall) -> list[dict[str, Any]]:
    keywords = call.require("keywords")
    if isinstance(keywords, str):
        keywords = [keywords]
    return search_documents_by_keywords(
        call.graph,
        call.site_drive.site_id,
        call.require("listId"),
        list(keywords),
        call.require("attributeName"),
    )


TOOL_HANDLERS: dict[str, Callable[[ToolCall], Any]] = {
    "getFolders": _get_folders,
    "createFolder": _create_folder,
    "deleteFolder": _delete_folder,
    "getFolderTree": _get_folder_tree,
    "getDocuments": _get_documents,
    "getDocumentContent": _get_document_content,
    "uploadDocument": _upload_document,
    "updateDocumentContent": _update_document_content,
    "deleteDocument": _delete_document,
    "searchDocumentsByKeywords": _search_documents_by_keywords,
}


class ToolDispatcher:
    """Routes named tool calls to their handlers."""

    def __init__(self, config: AppConfig, token_provider: TokenProvider | None = None) -> None:
        """Initialise the dispatcher.

        Args:
            config: Application configuration, shared by every call.
            token_provider: Token provider; built from ``config`` when omitted.
        """
        self._config = config
        self._token_provider = token_provider or TokenProvider(config)

    def dispatch(self, name: str, arguments: dict[str, Any] | None) -> Any:
        """Run a tool and return its JSON-serializable result.

        Raises:
            UnknownToolError: If ``name`` is not in the catalog.
            InvalidArgumentsError: If a required argument is missing.
            SharePointError: Any classified failure raised by the operation.
            GraphApiError: Any other Graph API failure.
        """
        handler = TOOL_HANDLERS.get(name)
        if handler is None:
            raise UnknownToolError(name)

        arguments = arguments or {}
        site_drive = SiteDrive.from_dict(arguments.get("siteDrive"))
        credentials = Credentials.from_dict(arguments.get("auth"))
        graph = graph_client_from_config(self._config, self._token_provider, credentials)

        logger.info("[dispatch] calling tool; name:%s;site_id:%s", name, site_drive.site_id)
        return handler(ToolCall(arguments=arguments, site_drive=site_drive, graph=graph))

    def call_tool_json(self, name: str, arguments: dict[str, Any] | None) -> str:
        """Run a tool and serialize its result to JSON text."""
        return json.dumps(self.dispatch(name, arguments), ensure_ascii=False)
