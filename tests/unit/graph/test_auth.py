"""Unit tests for graph/auth.py: TokenProvider credential fallback and MSAL."""

from unittest.mock import MagicMock, patch

import pytest

from sharepoint_mcp.config import AppConfig
from sharepoint_mcp.errors import AuthenticationError, ConfigurationError
from sharepoint_mcp.graph.auth import GRAPH_SCOPES, TokenProvider
from sharepoint_mcp.graph.models import Credentials

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_MSAL_APP = "sharepoint_mcp.graph.auth.msal.ConfidentialClientApplication"

_FULL_CONFIG = AppConfig(
    tenant_id="cfg-tenant", client_id="cfg-client", client_secret="cfg-secret"
)


def _mock_msal_app(result: dict | None) -> MagicMock:  # type: ignore[type-arg]
    app = MagicMock()
    app.acquire_token_for_client.return_value = result
    return app


# ---------------------------------------------------------------------------
# get_access_token tests
# ---------------------------------------------------------------------------


class TestGetAccessToken:
    def test_returns_token_on_success(self) -> None:
        app = _mock_msal_app({"access_token": "fake-token-abc"})
        with patch(_MSAL_APP, return_value=app):
            token = TokenProvider(_FULL_CONFIG).get_access_token()

        assert token == "fake-token-abc"
        app.acquire_token_for_client.assert_called_once_with(scopes=GRAPH_SCOPES)

    def test_uses_config_values_when_arguments_missing(self) -> None:
        app = _mock_msal_app({"access_token": "tok"})
        with patch(
            _MSAL_APP, return_value=app
        ) as mock_msal:
            TokenProvider(_FULL_CONFIG).get_access_token()

        mock_msal.assert_called_once_with(
            client_id="cfg-client",
            client_credential="cfg-secret",
            authority="https://login.microsoftonline.com/cfg-tenant",
        )

    def test_arguments_override_config(self) -> None:
        app = _mock_msal_app({"access_token": "tok"})
        with patch(
            _MSAL_APP, return_value=app
        ) as mock_msal:
            TokenProvider(_FULL_CONFIG).get_access_token("t-1", "c-1", "s-1")

        mock_msal.assert_called_once_with(
            client_id="c-1",
            client_credential="s-1",
            authority="https://login.microsoftonline.com/t-1",
        )

    def test_partial_override_mixes_sources(self) -> None:
        app = _mock_msal_app({"access_token": "tok"})
        with patch(
            _MSAL_APP, return_value=app
        ) as mock_msal:
            TokenProvider(_FULL_CONFIG).get_access_token(tenant_id="call-tenant")

        kwargs = mock_msal.call_args.kwargs
        assert kwargs["authority"].endswith("/call-tenant")
        assert kwargs["client_id"] == "cfg-client"

    def test_raises_configuration_error_when_credentials_missing(self) -> None:
        with (
            patch(_MSAL_APP) as mock_msal,
            pytest.raises(ConfigurationError, match="clientSecret"),
        ):
            TokenProvider(AppConfig()).get_access_token("t", "c")

        mock_msal.assert_not_called()

    def test_raises_authentication_error_on_rejection(self) -> None:
        app = _mock_msal_app(
            {"error": "invalid_client", "error_description": "Client secret is wrong"}
        )
        with (
            patch(_MSAL_APP, return_value=app),
            pytest.raises(AuthenticationError, match="invalid_client"),
        ):
            TokenProvider(_FULL_CONFIG).get_access_token()

    def test_raises_authentication_error_on_empty_result(self) -> None:
        app = _mock_msal_app(None)
        with (
            patch(_MSAL_APP, return_value=app),
            pytest.raises(AuthenticationError, match="unknown_error"),
        ):
            TokenProvider(_FULL_CONFIG).get_access_token()

    def test_wraps_invalid_authority(self) -> None:
        with (
            patch(
                _MSAL_APP,
                side_effect=ValueError("Unable to get authority configuration"),
            ),
            pytest.raises(AuthenticationError, match="authority"),
        ):
            TokenProvider(_FULL_CONFIG).get_access_token()

    def test_every_call_builds_a_new_msal_app(self) -> None:
        app = _mock_msal_app({"access_token": "tok"})
        with patch(
            _MSAL_APP, return_value=app
        ) as mock_msal:
            provider = TokenProvider(_FULL_CONFIG)
            provider.get_access_token()
            provider.get_access_token()

        assert mock_msal.call_count == 2


class TestForCredentials:
    def test_passes_credential_fields(self) -> None:
        provider = TokenProvider(AppConfig())
        with patch.object(provider, "get_access_token", return_value="tok") as mock_get:
            token = provider.for_credentials(Credentials("t", "c", "s"))

        assert token == "tok"
        mock_get.assert_called_once_with(tenant_id="t", client_id="c", client_secret="s")
