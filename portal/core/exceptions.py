"""Exception classes for the admin portal.

Backend failures, authentication failures and authorization failures each
get their own type so routes can decide whether to redirect, re-render with
an alert, or render a placeholder.
"""

NOT_FOUND_CODE = "PGRST116"


class PortalError(Exception):
    """Base exception for all admin portal errors."""

    pass


class BackendError(PortalError):
    """Raised when a query or mutation against the backend tables fails."""

    def __init__(self, message: str, code: str | None = None):
        self.code = code
        super().__init__(message)


class RecordNotFoundError(BackendError):
    """Raised when a single-row lookup matches no row."""

    def __init__(self, table: str, filters: dict):
        self.table = table
        self.filters = filters
        super().__init__(f"No row in '{table}' matches {filters}", code=NOT_FOUND_CODE)


class AuthenticationError(PortalError):
    """Raised when sign-in with the auth provider fails."""

    pass


class AuthorizationError(PortalError):
    """Raised when a signed-in identity may not use the console."""

    def __init__(self, reason, message: str):
        self.reason = reason
        super().__init__(message)


class PermissionDeniedError(PortalError):
    """Raised when an admin attempts a super-admin-only action."""

    pass
