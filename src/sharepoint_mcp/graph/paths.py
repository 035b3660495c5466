"""Path normalization and Graph URL path builders for drive items."""

from __future__ import annotations

from sharepoint_mcp.graph.models import NormalizedPath, SiteDrive

ROOT = "root"


def normalize_path(path: str | None) -> NormalizedPath:
    """Reduce a user-supplied drive path to the root or a relative path.

    ``None``, ``""``, ``"/"`` and ``"root"`` (any case) address the drive root.
    Anything else loses one leading and one trailing slash; the remainder is
    kept verbatim, without validation or percent-encoding.

    Args:
        path: Path as supplied by the caller.

    Returns:
        NormalizedPath; for the root, ``clean_path`` is ``"root"``.
    """
    if not path or path == "/" or path.lower() == ROOT:
        return NormalizedPath(is_root=True, clean_path=ROOT)
    clean = path
    if clean.startswith("/"):
        clean = clean[1:]
    if clean.endswith("/"):
        clean = clean[:-1]
    # "//" strips down to nothing, which can only mean the root.
    if not clean:
        return NormalizedPath(is_root=True, clean_path=ROOT)
    return NormalizedPath(is_root=False, clean_path=clean)


def as_normalized(path: str | NormalizedPath | None) -> NormalizedPath:
    """Normalize ``path`` unless it already is a NormalizedPath."""
    if isinstance(path, NormalizedPath):
        return path
    return normalize_path(path)


def join_child(parent: NormalizedPath, name: str) -> str:
    """Return the path of ``name`` directly below ``parent``."""
    return name if parent.is_root else f"{parent.clean_path}/{name}"


def drive_root(site_drive: SiteDrive) -> str:
    return f"/sites/{site_drive.site_id}/drives/{site_drive.require_drive()}/root"


def item_path(site_drive: SiteDrive, path: str | NormalizedPath | None) -> str:
    """Graph path addressing the item itself."""
    normalized = as_normalized(path)
    if normalized.is_root:
        return drive_root(site_drive)
    return f"{drive_root(site_drive)}:/{normalized.clean_path}"


def children_path(site_drive: SiteDrive, path: str | NormalizedPath | None) -> str:
    """Graph path listing the children of a folder."""
    normalized = as_normalized(path)
    if normalized.is_root:
        return f"{drive_root(site_drive)}/children"
    return f"{drive_root(site_drive)}:/{normalized.clean_path}:/children"


def content_path(site_drive: SiteDrive, path: str | NormalizedPath | None) -> str:
    """Graph path for downloading or uploading a file's content."""
    normalized = as_normalized(path)
    return f"{drive_root(site_drive)}:/{normalized.clean_path}:/content"
