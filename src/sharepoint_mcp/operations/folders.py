"""Folder operations: list, create, delete and tree traversal."""

from __future__ import annotations

import logging
from typing import Any

from sharepoint_mcp.errors import ConflictError, InvalidOperationError, NotEmptyError
from sharepoint_mcp.graph.client import GraphApiError, GraphClient
from sharepoint_mcp.graph.models import (
    CONFLICT_BEHAVIOR,
    FIELD_CHILD_COUNT,
    FIELD_FOLDER,
    FIELD_ID,
    FIELD_NAME,
    ODATA_VALUE,
    FolderNode,
    NormalizedPath,
    SiteDrive,
)
from sharepoint_mcp.graph.paths import (
    as_normalized,
    children_path,
    item_path,
    join_child,
    normalize_path,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10

# Server-side filter; results are re-checked client-side.
_FOLDER_FILTER = "$filter=folder ne null"


class FolderService:
    """Folder operations scoped to one site drive."""

    def __init__(self, graph_client: GraphClient, site_drive: SiteDrive) -> None:
        """Initialise the folder service.

        Args:
            graph_client: Authenticated GraphClient for the current call.
            site_drive: Site and drive the operations act on.
        """
        self._graph = graph_client
        self._site_drive = site_drive

    def list_folders(self, path: str | NormalizedPath | None) -> list[dict[str, Any]]:
        """List the sub-folders of ``path``.

        Returns:
            Raw Graph drive items carrying a ``folder`` facet, in listing order.
        """
        url = f"{children_path(self._site_drive, path)}?{_FOLDER_FILTER}"
        response = self._graph.get(url)
        folders = [item for item in response.get(ODATA_VALUE, []) if FIELD_FOLDER in item]
        logger.info(
            "[list_folders] listed folders; path:%s;folder_count:%d",
            as_normalized(path).clean_path,
            len(folders),
        )
        return folders

    def create_folder(self, path: str | None, folder_name: str) -> dict[str, Any]:
        """Create ``folder_name`` under ``path``, failing on a name collision.

        Raises:
            ConflictError: If an item with the same name already exists.
        """
        payload = {FIELD_NAME: folder_name, FIELD_FOLDER: {}, CONFLICT_BEHAVIOR: "fail"}
        try:
            created = self._graph.post_json(children_path(self._site_drive, path), payload)
        except GraphApiError as exc:
            if exc.status_code == 409:
                parent = normalize_path(path).clean_path
                raise ConflictError(
                    f"An item named '{folder_name}' already exists in '{parent}'"
                ) from exc
            raise
        logger.info("[create_folder] created folder; name:%s", folder_name)
        return created

    def delete_folder(self, path: str | None) -> dict[str, Any]:
        """Delete an empty folder.

        The emptiness check and the delete are separate requests; an item
        added in between is deleted along with the folder.

        Raises:
            InvalidOperationError: If ``path`` addresses the drive root.
            NotEmptyError: If the folder has any children.
        """
        normalized = normalize_path(path)
        if normalized.is_root:
            raise InvalidOperationError("Cannot delete root folder")

        response = self._graph.get(children_path(self._site_drive, path))
        children = response.get(ODATA_VALUE, [])
        if children:
            raise NotEmptyError(
                f"Folder '{normalized.clean_path}' is not empty "
                f"({len(children)} item(s)); cannot delete"
            )

        self._graph.delete(item_path(self._site_drive, path))
        logger.info("[delete_folder] deleted folder; path:%s", normalized.clean_path)
        return {"success": True, "message": "Folder deleted successfully"}

    def get_folder_tree(
        self, path: str | None = "root", max_depth: int = DEFAULT_MAX_DEPTH
    ) -> list[FolderNode]:
        """Build the folder tree below ``path``, depth first.

        Folders at depth ``max_depth`` are not expanded, so ``max_depth=0``
        yields no nodes and ``max_depth=1`` only the immediate sub-folders.
        Each expanded folder costs one listing request.

        Returns:
            Top-level FolderNode objects in listing order.
        """
        tree = self._build_tree(normalize_path(path), 0, max_depth)
        logger.info(
            "[get_folder_tree] built tree; path:%s;max_depth:%d;top_level_count:%d",
            normalize_path(path).clean_path,
            max_depth,
            len(tree),
        )
        return tree

    def _build_tree(self, parent: NormalizedPath, depth: int, max_depth: int) -> list[FolderNode]:
        if depth >= max_depth:
            return []
        nodes: list[FolderNode] = []
        for folder in self.list_folders(parent):
            # Children are never the root, whatever their name.
            folder_path = join_child(parent, folder.get(FIELD_NAME, ""))
            child = NormalizedPath(is_root=False, clean_path=folder_path)
            nodes.append(
                FolderNode(
                    name=folder.get(FIELD_NAME, ""),
                    path=folder_path,
                    id=folder.get(FIELD_ID, ""),
                    child_count=(folder.get(FIELD_FOLDER) or {}).get(FIELD_CHILD_COUNT, 0),
                    children=self._build_tree(child, depth + 1, max_depth),
                )
            )
        return nodes
