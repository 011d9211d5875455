class SDKError(Exception):
    """Base exception for SDK related errors."""


class InvalidConfiguration(SDKError, ValueError):
    """Raised when retry or client settings are inconsistent."""


class CredentialsError(SDKError):
    """Raised when an access token cannot be obtained or refreshed."""


class HttpResponseError(SDKError):
    """Raised when a request ends with an unsuccessful HTTP response."""

    def __init__(self, response, message: str | None = None) -> None:
        self.response = response
        self.status_code = response.status_code
        super().__init__(message or f"HTTP {self.status_code}: {response.reason}")
