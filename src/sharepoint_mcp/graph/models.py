"""Data models for Microsoft Graph drive items and tool results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sharepoint_mcp.errors import InvalidArgumentsError

# Graph API JSON field names
FIELD_ID = "id"
FIELD_NAME = "name"
FIELD_FILE = "file"
FIELD_FOLDER = "folder"
FIELD_SIZE = "size"
FIELD_MIME_TYPE = "mimeType"
FIELD_CHILD_COUNT = "childCount"
FIELD_WEB_URL = "webUrl"
FIELD_PARENT_REFERENCE = "parentReference"
FIELD_PATH = "path"
FIELD_FIELDS = "fields"
FIELD_DRIVE_ITEM = "driveItem"

# OData response keys
ODATA_NEXT_LINK = "@odata.nextLink"
ODATA_VALUE = "value"

CONFLICT_BEHAVIOR = "@microsoft.graph.conflictBehavior"


@dataclass(frozen=True)
class Credentials:
    """Per-call credential overrides; any field may be absent."""

    tenant_id: str | None = None
    client_id: str | None = None
    client_secret: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> Credentials:
        """Build Credentials from the optional ``auth`` tool argument.

        Raises:
            InvalidArgumentsError: If ``auth`` is present but not an object.
        """
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise InvalidArgumentsError("auth must be an object")
        return cls(
            tenant_id=raw.get("tenantId") or None,
            client_id=raw.get("clientId") or None,
            client_secret=raw.get("clientSecret") or None,
        )


@dataclass(frozen=True)
class SiteDrive:
    """Identifies a SharePoint site and a document library (drive) within it."""

    site_id: str
    drive_id: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> SiteDrive:
        """Build a SiteDrive from the ``siteDrive`` tool argument.

        Raises:
            InvalidArgumentsError: If the object or its ``siteId`` is missing.
        """
        if not isinstance(raw, dict) or not raw.get("siteId"):
            raise InvalidArgumentsError("siteDrive.siteId is required")
        return cls(site_id=raw["siteId"], drive_id=raw.get("driveId") or None)

    def require_drive(self) -> str:
        if not self.drive_id:
            raise InvalidArgumentsError("siteDrive.driveId is required")
        return self.drive_id


@dataclass(frozen=True)
class NormalizedPath:
    """A drive path reduced to either the root or a slash-joined relative path."""

    is_root: bool
    clean_path: str


@dataclass
class FolderNode:
    """One folder in a tree built by FolderService.get_folder_tree."""

    name: str
    path: str
    id: str
    child_count: int
    children: list[FolderNode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "id": self.id,
            "childCount": self.child_count,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass
class DocumentContent:
    """Downloaded document with its extracted text."""

    name: str
    mime_type: str
    original_mime_type: str
    converted: bool
    size: int
    text: str
    pages: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "mimeType": self.mime_type,
            "originalMimeType": self.original_mime_type,
            "converted": self.converted,
            "size": self.size,
            "text": self.text,
            "pages": self.pages,
        }


@dataclass
class UploadResult:
    """Summary of a drive item written by an upload or update."""

    id: str
    name: str
    size: int | None
    mime_type: str | None
    web_url: str | None
    path: str | None = None
    updated: bool = False

    @classmethod
    def from_item(cls, raw: dict[str, Any], *, updated: bool = False) -> UploadResult:
        """Map a raw Graph drive item to an UploadResult."""
        return cls(
            id=raw.get(FIELD_ID, ""),
            name=raw.get(FIELD_NAME, ""),
            size=raw.get(FIELD_SIZE),
            mime_type=(raw.get(FIELD_FILE) or {}).get(FIELD_MIME_TYPE),
            web_url=raw.get(FIELD_WEB_URL),
            path=(raw.get(FIELD_PARENT_REFERENCE) or {}).get(FIELD_PATH),
            updated=updated,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "mimeType": self.mime_type,
            "webUrl": self.web_url,
        }
        # Uploads report the parent path; updates report the flag instead.
        if self.updated:
            result["updated"] = True
        else:
            result["path"] = self.path
        return result
