"""Client-credentials token acquisition via MSAL."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import msal

from sharepoint_mcp.errors import AuthenticationError, ConfigurationError

if TYPE_CHECKING:
    from sharepoint_mcp.config import AppConfig
    from sharepoint_mcp.graph.models import Credentials

logger = logging.getLogger(__name__)

GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]


class TokenProvider:
    """Exchanges tenant/client credentials for a Graph bearer token.

    Every call builds a fresh MSAL application, so no token survives
    between calls.
    """

    def __init__(self, config: AppConfig) -> None:
        """Initialise the provider.

        Args:
            config: Application configuration holding credential defaults
                and the identity provider base URL.
        """
        self._config = config

    def get_access_token(
        self,
        tenant_id: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> str:
        """Acquire a bearer token using the client credentials flow.

        Each argument falls back to the like-named configuration value.

        Returns:
            Access token string.

        Raises:
            ConfigurationError: If any credential is still missing after fallback.
            AuthenticationError: If the identity provider rejects the exchange.
        """
        tenant_id = tenant_id or self._config.tenant_id
        client_id = client_id or self._config.client_id
        client_secret = client_secret or self._config.client_secret

        missing = [
            name
            for name, value in (
                ("tenantId", tenant_id),
                ("clientId", client_id),
                ("clientSecret", client_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                "Tenant ID, Client ID, and Client Secret must be provided; "
                f"missing: {', '.join(missing)}"
            )

        authority = f"{self._config.authority_base_url}/{tenant_id}"
        try:
            app = msal.ConfidentialClientApplication(
                client_id=client_id,
                client_credential=client_secret,
                authority=authority,
            )
        except ValueError as exc:
            # MSAL validates the authority (tenant) eagerly.
            logger.error("[get_access_token] authority rejected; tenant_id:%s", tenant_id)
            raise AuthenticationError(f"Token acquisition failed: {exc}") from exc

        result: dict[str, Any] = app.acquire_token_for_client(scopes=GRAPH_SCOPES) or {}
        if "access_token" not in result:
            error = result.get("error", "unknown_error")
            description = result.get("error_description", "No description provided")
            logger.error("[get_access_token] MSAL token acquisition failed; error:%s", error)
            raise AuthenticationError(f"Token acquisition failed: {error}: {description}")
        return str(result["access_token"])

    def for_credentials(self, credentials: Credentials) -> str:
        """Acquire a token for the given per-call credential overrides."""
        return self.get_access_token(
            tenant_id=credentials.tenant_id,
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
        )
