class OutlookError(Exception):
    """Base class for all outlook-cli exceptions."""
    pass

class NotConfiguredError(OutlookError):
    """Raised when no OAuth client credentials have been configured."""

    def __init__(self, message: str = "Not configured. Run 'outlook config <client-id>' first"):
        super().__init__(message)

class NotLoggedInError(OutlookError):
    """Raised when there is no usable cached login."""

    def __init__(self, message: str = "Not logged in. Run 'outlook login' first"):
        super().__init__(message)

class AuthError(OutlookError):
    """Raised when the OAuth flow or a token request fails."""

    def __init__(self, message: str, error: str = None, description: str = None):
        super().__init__(message)
        self.error = error
        self.description = description

    @classmethod
    def from_result(cls, result: dict, context: str) -> "AuthError":
        """Build an AuthError from an MSAL error payload."""
        error = result.get("error", "unknown")
        description = result.get("error_description", "Unknown error")
        return cls(f"{context}: {error} - {description}", error=error, description=description)

class GraphAPIError(OutlookError):
    """Raised when Microsoft Graph returns a non-success response."""

    def __init__(self, status_code: int, body: str = "", code: str = None, message: str = None):
        self.status_code = status_code
        self.body = body
        self.code = code
        self.message = message
        if code or message:
            detail = f"{code or 'Error'}: {message or ''}".rstrip(": ")
        else:
            detail = body
        super().__init__(f"HTTP {status_code} - {detail}")

class NoUnsubscribeLinkError(OutlookError):
    """Raised when a message carries no List-Unsubscribe target."""

    def __init__(self, message: str = "No unsubscribe link found in message headers"):
        super().__init__(message)
