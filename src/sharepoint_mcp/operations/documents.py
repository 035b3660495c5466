"""Document operations: list, read, upload, update and delete files."""

from __future__ import annotations

import base64
import logging
from typing import Any

from sharepoint_mcp.errors import (
    ConflictError,
    ConversionError,
    NotFoundError,
    PermissionDeniedError,
)
from sharepoint_mcp.graph.client import GraphApiError, GraphClient
from sharepoint_mcp.graph.models import (
    CONFLICT_BEHAVIOR,
    FIELD_FILE,
    FIELD_MIME_TYPE,
    FIELD_NAME,
    ODATA_VALUE,
    DocumentContent,
    SiteDrive,
    UploadResult,
)
from sharepoint_mcp.graph.paths import children_path, content_path, item_path, normalize_path
from sharepoint_mcp.operations.pdf import extract_pdf_text

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
PDF_MIME_TYPE = "application/pdf"

# Office MIME type markers that Graph can convert to PDF
_CONVERTIBLE_MIME_MARKERS = ("wordprocessingml", "spreadsheetml", "presentationml")


def should_convert_to_pdf(mime_type: str) -> bool:
    """Return True for Word, Excel and PowerPoint (OOXML) MIME types."""
    return any(marker in mime_type for marker in _CONVERTIBLE_MIME_MARKERS)


def decode_content(content: str | bytes, content_type: str | None) -> bytes:
    """Turn tool-supplied content into the bytes to upload.

    ``text/*`` content is encoded as UTF-8; everything else is expected to
    arrive base64-encoded.
    """
    if isinstance(content, bytes):
        return content
    content_type = content_type or DEFAULT_CONTENT_TYPE
    if content_type.startswith("text/"):
        return content.encode("utf-8")
    return base64.b64decode(content)


class DocumentService:
    """File operations scoped to one site drive."""

    def __init__(self, graph_client: GraphClient, site_drive: SiteDrive) -> None:
        """Initialise the document service.

        Args:
            graph_client: Authenticated GraphClient for the current call.
            site_drive: Site and drive the operations act on.
        """
        self._graph = graph_client
        self._site_drive = site_drive

    def list_documents(self, path: str | None) -> list[dict[str, Any]]:
        """List the files (not folders) directly inside ``path``."""
        response = self._graph.get(children_path(self._site_drive, path))
        documents = [item for item in response.get(ODATA_VALUE, []) if FIELD_FILE in item]
        logger.info(
            "[list_documents] listed documents; path:%s;document_count:%d",
            normalize_path(path).clean_path,
            len(documents),
        )
        return documents

    def get_document_content(self, file_path: str) -> DocumentContent:
        """Download a document and extract its text.

        Word, Excel and PowerPoint files are downloaded pre-converted to PDF.
        ``text/*`` files are decoded directly; everything else is read as PDF.

        Raises:
            ConversionError: If a requested PDF conversion returned another type.
        """
        metadata_url = f"{item_path(self._site_drive, file_path)}?$select=name,file,size"
        metadata = self._graph.get(metadata_url)
        mime_type = (metadata.get(FIELD_FILE) or {}).get(FIELD_MIME_TYPE, "") or ""
        convert = should_convert_to_pdf(mime_type)

        url = content_path(self._site_drive, file_path)
        if convert:
            url = f"{url}?format=pdf"
        content, response_type = self._graph.get_content(url)

        if convert and "pdf" not in response_type.lower():
            raise ConversionError(
                f"PDF conversion failed for '{metadata.get(FIELD_NAME, file_path)}': "
                f"received '{response_type or 'unknown'}'"
            )

        if not convert and mime_type.startswith("text/"):
            text, pages = content.decode("utf-8", errors="replace"), 0
        else:
            text, pages = extract_pdf_text(content)

        logger.info(
            "[get_document_content] fetched document; mime_type:%s;converted:%s;size:%d;pages:%d",
            mime_type,
            convert,
            len(content),
            pages,
        )
        return DocumentContent(
            name=metadata.get(FIELD_NAME, ""),
            mime_type=PDF_MIME_TYPE if convert else mime_type,
            original_mime_type=mime_type,
            converted=convert,
            size=len(content),
            text=text,
            pages=pages,
        )

    def upload_document(
        self,
        file_path: str,
        content: str | bytes,
        content_type: str | None = DEFAULT_CONTENT_TYPE,
        overwrite: bool = False,
    ) -> UploadResult:
        """Upload a new document.

        Raises:
            ConflictError: If the file exists and ``overwrite`` is False.
        """
        content_type = content_type or DEFAULT_CONTENT_TYPE
        data = decode_content(content, content_type)
        url = content_path(self._site_drive, file_path)
        if not overwrite:
            url = f"{url}?{CONFLICT_BEHAVIOR}=fail"

        try:
            item = self._graph.put_content(url, data, content_type=content_type)
        except GraphApiError as exc:
            if exc.status_code == 409:
                raise ConflictError(
                    f"Document already exists: '{normalize_path(file_path).clean_path}'"
                ) from exc
            raise
        logger.info(
            "[upload_document] uploaded document; size:%d;overwrite:%s", len(data), overwrite
        )
        return UploadResult.from_item(item)

    def update_document_content(
        self,
        file_path: str,
        content: str | bytes,
        content_type: str | None = DEFAULT_CONTENT_TYPE,
    ) -> UploadResult:
        """Replace the whole content of an existing document.

        Existence is checked with a metadata request before the upload.

        Raises:
            NotFoundError: If the document does not exist.
        """
        content_type = content_type or DEFAULT_CONTENT_TYPE
        data = decode_content(content, content_type)
        clean_path = normalize_path(file_path).clean_path

        try:
            self._graph.get(f"{item_path(self._site_drive, file_path)}?$select=id")
            item = self._graph.put_content(
                content_path(self._site_drive, file_path), data, content_type=content_type
            )
        except GraphApiError as exc:
            if exc.status_code == 404:
                raise NotFoundError(
                    f"Document does not exist: cannot update '{clean_path}'"
                ) from exc
            raise
        logger.info("[update_document_content] updated document; size:%d", len(data))
        return UploadResult.from_item(item, updated=True)

    def delete_document(self, file_path: str) -> dict[str, Any]:
        """Delete a document.

        Raises:
            NotFoundError: If the document does not exist.
            PermissionDeniedError: If Graph denies the deletion.
        """
        clean_path = normalize_path(file_path).clean_path
        try:
            self._graph.delete(item_path(self._site_drive, file_path))
        except GraphApiError as exc:
            if exc.status_code == 404:
                raise NotFoundError(f"Document not found: cannot delete '{clean_path}'") from exc
            if exc.status_code == 403:
                raise PermissionDeniedError(
                    f"Insufficient permissions to delete '{clean_path}'"
                ) from exc
            raise
        logger.info("[delete_document] deleted document; path:%s", clean_path)
        return {"deleted": True, "path": clean_path}
