"""Directory client exceptions for error handling."""


class DirectoryError(Exception):
    """Base exception for all directory operations."""
    pass


class GraphAPIError(DirectoryError):
    """HTTP error response from the Graph API (status >= 400).

    Attributes:
        status_code: HTTP status code
        message: Error body returned by the server
        endpoint: URL that failed
    """

    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class RemoteOperationError(DirectoryError):
    """A mutating call or paginated fetch was rejected by the server.

    Always raised from the underlying GraphAPIError, which stays available
    as ``__cause__``.

    Attributes:
        status_code: HTTP status code of the rejected request
    """

    def __init__(self, message: str, status_code: int):
        self.status_code = status_code
        super().__init__(f"{message} (HTTP {status_code})")


class MissingFieldError(DirectoryError, ValueError):
    """Raw payload lacks a field required to build a record."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing data element: {field}")
