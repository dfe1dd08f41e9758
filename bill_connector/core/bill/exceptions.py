"""Bill.com connector exceptions for error handling."""
from __future__ import annotations


class BillError(Exception):
    """Base exception for all Bill.com connector operations."""
    pass


class TransportError(BillError):
    """The HTTP call itself failed (connection error, timeout)."""
    pass


class HTTPStatusError(BillError):
    """HTTP status >= 300 returned by the Bill.com API.

    Attributes:
        status_code: HTTP status code
        endpoint: API endpoint that failed
    """

    def __init__(self, status_code: int, endpoint: str):
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: Request failed")


class DecodeError(BillError):
    """Response body is not valid JSON or does not match the envelope shape."""
    pass


class APIError(BillError):
    """HTTP 2xx response whose envelope reports a failure.

    Attributes:
        status: response_status from the envelope
        message: response_message from the envelope
        endpoint: API endpoint that failed
    """

    def __init__(self, status: int, message: str, endpoint: str):
        self.status = status
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status}] {endpoint}: {message or 'Request failed'}")


class SessionRequiredError(BillError):
    """Organization-scoped call issued before login."""
    pass


class ParseError(BillError):
    """Pagination token could not be decoded."""
    pass


class ProfileAttributeMissingError(BillError):
    """Resource profile lacks an expected attribute (e.g. role_id)."""
    pass


class ConnectorError(BillError):
    """Syncer operation failed; the underlying error is chained as __cause__.

    Attributes:
        operation: Short description of the failing operation
    """

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        message = f"bill-connector: {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class AuthenticationError(BillError):
    """Connector validation failed; lower-level causes are masked."""
    pass


class SyncError(BillError):
    """Sync driver detected an unrecoverable paging state."""
    pass
