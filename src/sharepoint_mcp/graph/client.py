"""Microsoft Graph API client bound to one tool call's bearer token."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any
from urllib import request as urllib_request
from urllib.error import HTTPError
from urllib.parse import quote, urlsplit

if TYPE_CHECKING:
    from sharepoint_mcp.config import AppConfig
    from sharepoint_mcp.graph.auth import TokenProvider
    from sharepoint_mcp.graph.models import Credentials

logger = logging.getLogger(__name__)

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"

# Characters left as-is when quoting a relative path: separators and OData
# query syntax. "%" is always encoded, so relative paths must arrive unencoded.
_PATH_SAFE_CHARS = "/:$?=&@,;'()!*+"


class _SameHostAuthRedirectHandler(urllib_request.HTTPRedirectHandler):
    """Follow redirects, dropping the bearer token when the host changes.

    Graph answers content downloads with a redirect to a pre-authenticated
    download URL on another host.
    """

    def redirect_request(  # type: ignore[no-untyped-def]
        self, req, fp, code, msg, headers, newurl
    ):
        new_req = super().redirect_request(req, fp, code, msg, headers, newurl)
        if new_req is not None and urlsplit(newurl).netloc != urlsplit(req.full_url).netloc:
            new_req.remove_header("Authorization")
        return new_req


_OPENER = urllib_request.build_opener(_SameHostAuthRedirectHandler)


class GraphApiError(Exception):
    """Raised when the Graph API returns a non-2xx response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Graph API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class GraphClient:
    """Authenticated client for Microsoft Graph API.

    The bearer token is requested from ``token_supplier`` on the first
    outbound request and reused for the remaining requests of the same
    client. Create one client per tool call.
    """

    def __init__(self, token_supplier: Callable[[], str], base_url: str = GRAPH_BASE_URL) -> None:
        """Initialise the client.

        Args:
            token_supplier: Zero-argument callable returning a bearer token.
            base_url: Graph API base URL without a trailing slash.
        """
        self._token_supplier = token_supplier
        self._token: str | None = None
        self.base_url = base_url.rstrip("/")

    def _acquire_token(self) -> str:
        if self._token is None:
            self._token = self._token_supplier()
        return self._token

    def _build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}{quote(path, safe=_PATH_SAFE_CHARS)}"

    def _request(
        self,
        method: str,
        path: str,
        data: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> tuple[bytes, str]:
        """Send a request and return the raw body and its Content-Type.

        Raises:
            AuthenticationError: If token acquisition fails.
            ConfigurationError: If credentials are missing.
            GraphApiError: If the API returns a non-2xx status code.
        """
        token = self._acquire_token()
        req = urllib_request.Request(
            self._build_url(path),
            data=data,
            headers={"Authorization": f"Bearer {token}", **(headers or {})},
            method=method,
        )
        try:
            with _OPENER.open(req) as resp:
                body = resp.read()
                content_type = resp.headers.get("Content-Type", "") or ""
                return body, content_type
        except HTTPError as exc:
            raw = exc.read()
            try:
                detail = json.loads(raw).get("error", {}).get("message", exc.reason)
            except Exception:
                detail = exc.reason
            logger.info(
                "[_request] Graph request failed; method:%s;status:%d", method, exc.code
            )
            raise GraphApiError(exc.code, str(detail)) from exc

    @staticmethod
    def _parse_json(body: bytes) -> dict[str, Any]:
        if not body:
            return {}
        return json.loads(body)  # type: ignore[no-any-return]

    def get(self, path: str) -> dict[str, Any]:
        """Perform an authenticated GET request and parse the JSON response.

        Args:
            path: URL path relative to the base URL (must start with '/'),
                or an absolute URL such as an ``@odata.nextLink``.

        Returns:
            Parsed JSON response body as a dict.
        """
        body, _ = self._request("GET", path, headers={"Accept": "application/json"})
        return self._parse_json(body)

    def get_content(self, path: str) -> tuple[bytes, str]:
        """Download raw content.

        Returns:
            A tuple of (content bytes, response Content-Type header).
        """
        return self._request("GET", path)

    def post_json(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Perform an authenticated POST with a JSON body."""
        body, _ = self._request(
            "POST",
            path,
            data=json.dumps(payload).encode("utf-8"),
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        return self._parse_json(body)

    def put_content(
        self,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> dict[str, Any]:
        """Upload content with an authenticated PUT.

        Args:
            path: URL path relative to the base URL (must start with '/').
            content: Raw bytes to upload.
            content_type: MIME type for the Content-Type header.

        Returns:
            The drive item returned by Graph.
        """
        body, _ = self._request(
            "PUT",
            path,
            data=content,
            headers={"Content-Type": content_type, "Content-Length": str(len(content))},
        )
        return self._parse_json(body)

    def delete(self, path: str) -> None:
        """Perform an authenticated DELETE request."""
        self._request("DELETE", path)


def graph_client_from_config(
    config: AppConfig,
    token_provider: TokenProvider,
    credentials: Credentials,
) -> GraphClient:
    """Construct a GraphClient for one tool call.

    Args:
        config: Application configuration instance.
        token_provider: Provider used to exchange the credentials for a token.
        credentials: Per-call credential overrides.

    Returns:
        Configured GraphClient instance.
    """
    return GraphClient(
        token_supplier=lambda: token_provider.for_credentials(credentials),
        base_url=config.graph_base_url,
    )
