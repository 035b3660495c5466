"""Keyword search over SharePoint list items."""

from __future__ import annotations

import logging
from typing import Any

from sharepoint_mcp.graph.client import GraphClient
from sharepoint_mcp.graph.models import (
    FIELD_DRIVE_ITEM,
    FIELD_FIELDS,
    FIELD_FILE,
    FIELD_NAME,
    ODATA_NEXT_LINK,
    ODATA_VALUE,
)

logger = logging.getLogger(__name__)

# SharePoint list columns used when resolving well-known attributes
LIST_FIELD_FILE_LEAF_REF = "FileLeafRef"
LIST_FIELD_CONTENT_TYPE = "ContentType"


def fetch_all_list_items(
    graph_client: GraphClient, site_id: str, list_id: str
) -> list[dict[str, Any]]:
    """Retrieve every item of a list, following @odata.nextLink to the end.

    Args:
        graph_client: Authenticated GraphClient for the current call.
        site_id: SharePoint site ID.
        list_id: ID of the list (document library) to read.

    Returns:
        All list items with their ``fields`` and ``driveItem`` expanded.
    """
    items: list[dict[str, Any]] = []
    next_path: str | None = (
        f"/sites/{site_id}/lists/{list_id}/items"
        "?$expand=fields,driveItem&$select=id,fields,driveItem"
    )
    pages = 0
    while next_path is not None:
        response = graph_client.get(next_path)
        items.extend(response.get(ODATA_VALUE, []))
        pages += 1
        # Next links are absolute and already encoded; they are requested as-is.
        next_path = response.get(ODATA_NEXT_LINK) or None

    logger.info(
        "[fetch_all_list_items] fetched list items; page_count:%d;item_count:%d",
        pages,
        len(items),
    )
    return items


def resolve_attribute(item: dict[str, Any], attribute_name: str) -> Any:
    """Return the value of ``attribute_name`` for a list item, or None.

    ``name`` prefers the drive item name over the ``FileLeafRef`` column,
    ``contentType`` reads the ``ContentType`` column, and any other name is
    looked up in the list fields first and the drive item second.
    """
    fields = item.get(FIELD_FIELDS) or {}
    drive_item = item.get(FIELD_DRIVE_ITEM) or {}
    if attribute_name == "name":
        return drive_item.get(FIELD_NAME) or fields.get(LIST_FIELD_FILE_LEAF_REF)
    if attribute_name == "contentType":
        return fields.get(LIST_FIELD_CONTENT_TYPE)
    return fields.get(attribute_name) or drive_item.get(attribute_name)


def matches_keywords(value: Any, keywords: list[str]) -> bool:
    """Case-insensitive substring match of any keyword against ``value``."""
    if not value:
        return False
    haystack = str(value).lower()
    return any(str(keyword).lower() in haystack for keyword in keywords)


def search_documents_by_keywords(
    graph_client: GraphClient,
    site_id: str,
    list_id: str,
    keywords: list[str],
    attribute_name: str,
) -> list[dict[str, Any]]:
    """Find the files of a list whose attribute contains any of ``keywords``.

    Filtering happens client-side after all pages are fetched; folders
    (items whose drive item has no ``file`` facet) never match.

    Returns:
        Matching list items in listing order, in their original shape.
    """
    items = fetch_all_list_items(graph_client, site_id, list_id)
    documents = [item for item in items if FIELD_FILE in (item.get(FIELD_DRIVE_ITEM) or {})]
    matches = [
        doc
        for doc in documents
        if matches_keywords(resolve_attribute(doc, attribute_name), keywords)
    ]
    logger.info(
        "[search_documents_by_keywords] search complete; attribute:%s;document_count:%d;"
        "match_count:%d",
        attribute_name,
        len(documents),
        len(matches),
    )
    return matches
