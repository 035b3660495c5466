"""Error taxonomy surfaced by tool operations.

Every error carries an HTTP-style ``status_code`` so that transports which
speak HTTP can report it without a separate mapping table.
"""


class SharePointError(Exception):
    """Base class for classified tool failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(SharePointError):
    """Raised when credentials are missing after configuration fallback."""


class AuthenticationError(SharePointError):
    """Raised when the identity provider rejects the token exchange."""

    status_code = 401


class InvalidArgumentsError(SharePointError):
    """Raised when a tool call is missing a required argument."""

    status_code = 400


class NotFoundError(SharePointError):
    """Raised when the target item does not exist."""

    status_code = 404


class ConflictError(SharePointError):
    """Raised when an item with the same name already exists."""

    status_code = 409


class NotEmptyError(SharePointError):
    """Raised when deleting a folder that still has children."""

    status_code = 409


class InvalidOperationError(SharePointError):
    """Raised for operations that are never allowed, e.g. deleting the root."""

    status_code = 400


class PermissionDeniedError(SharePointError):
    """Raised when the remote service denies access to an item."""

    status_code = 403


class ConversionError(SharePointError):
    """Raised when a requested PDF conversion returns another content type."""

    status_code = 502


class UnknownToolError(SharePointError):
    """Raised when a tool name is not part of the catalog."""

    status_code = 404

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name
