from typing import Any, Optional


class ProviderException(Exception):
    def __init__(
        self, message: str, status_code: Optional[int] = None, error_content: Any = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_content = error_content
        details = f"{self.message}"
        if self.status_code is not None:
            details += f" (Status code: {self.status_code})"
        if self.error_content is not None:
            details += f"\nError content: {self.error_content}"
        super().__init__(details)


class NetworkError(ProviderException):
    """Timeout, abort or connectivity failure."""


class AuthError(ProviderException):
    """Missing or invalid credential."""


class NotFoundError(ProviderException):
    """Hash or torrent absent from the debrid library."""


class RateLimitError(ProviderException):
    """Request rate or account quota exhausted."""


class ParseError(ProviderException):
    """Malformed payload or unrecognized title."""


class AddError(ProviderException):
    """A torrent could not be pushed into the debrid library."""


class ResolveError(ProviderException):
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_content: Any = None,
        not_ready: bool = False,
    ):
        super().__init__(message, status_code, error_content)
        self.not_ready = not_ready
