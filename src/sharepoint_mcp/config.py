"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass

DEFAULT_GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_AUTHORITY_BASE_URL = "https://login.microsoftonline.com"


@dataclass(frozen=True)
class AppConfig:
    """Process-wide defaults shared by every tool call.

    Credentials are optional here: a tool call may supply its own, and the
    token provider only fails when neither source has a value.
    """

    # Credential defaults: used when a call omits them
    tenant_id: str | None = None
    client_id: str | None = None
    client_secret: str | None = None

    # Endpoints and server identity: overridable via env
    graph_base_url: str = DEFAULT_GRAPH_BASE_URL
    authority_base_url: str = DEFAULT_AUTHORITY_BASE_URL
    server_name: str = "sharepoint-mcp"
    log_level: str = "INFO"


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Optional environment variables:
        TENANT_ID: Entra ID directory (tenant) ID.
        CLIENT_ID: Entra ID application (client) ID.
        CLIENT_SECRET: Entra ID application client secret.
        SP_GRAPH_BASE_URL: Microsoft Graph base URL (default: v1.0 endpoint).
        SP_AUTHORITY_BASE_URL: Identity provider base URL.
        SP_SERVER_NAME: Name advertised by the MCP server.
        SP_LOG_LEVEL: Root logging level (default: INFO).

    Empty values are treated as absent.

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        tenant_id=os.environ.get("TENANT_ID") or None,
        client_id=os.environ.get("CLIENT_ID") or None,
        client_secret=os.environ.get("CLIENT_SECRET") or None,
        graph_base_url=os.environ.get("SP_GRAPH_BASE_URL", DEFAULT_GRAPH_BASE_URL).rstrip("/"),
        authority_base_url=os.environ.get(
            "SP_AUTHORITY_BASE_URL", DEFAULT_AUTHORITY_BASE_URL
        ).rstrip("/"),
        server_name=os.environ.get("SP_SERVER_NAME", "sharepoint-mcp"),
        log_level=os.environ.get("SP_LOG_LEVEL", "INFO").upper(),
    )
