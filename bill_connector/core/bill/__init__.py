"""Bill.com v2 API client library.

This package provides a small, testable interface to the Bill.com API
operations the connector needs.

Architecture:
- client.py: HTTP client with session login and envelope decoding
- models.py: Entities, session and the generic response envelope
- request_options.py: Credentials/pagination/search options applied to form bodies
- exceptions.py: Typed exceptions for error handling

Usage:
    from bill_connector.core.bill import BillClient, Credentials, PaginationParams

    client = BillClient(Credentials(username="u", password="p", developer_key="k"))
    for org in client.get_organizations():
        client.login(org.id)
        users, next_start = client.get_users(PaginationParams(max=50, start=0))
"""
from .client import (
    BillClient,
    REQUEST_TIMEOUT,
    BASE_URL,
    SANDBOX_BASE_URL,
)
from .exceptions import (
    BillError,
    TransportError,
    HTTPStatusError,
    DecodeError,
    APIError,
    SessionRequiredError,
    ParseError,
    ProfileAttributeMissingError,
    ConnectorError,
    AuthenticationError,
    SyncError,
)
from .models import (
    Envelope,
    LoginData,
    Organization,
    Session,
    SessionDetails,
    User,
    UserRoleProfile,
    is_invalid_response,
)
from .request_options import (
    Credentials,
    Filter,
    PaginationParams,
    RequestOption,
    SearchParams,
    Sort,
)

__all__ = [
    # Client
    "BillClient",
    "REQUEST_TIMEOUT",
    "BASE_URL",
    "SANDBOX_BASE_URL",

    # Exceptions
    "BillError",
    "TransportError",
    "HTTPStatusError",
    "DecodeError",
    "APIError",
    "SessionRequiredError",
    "ParseError",
    "ProfileAttributeMissingError",
    "ConnectorError",
    "AuthenticationError",
    "SyncError",

    # Models
    "Envelope",
    "LoginData",
    "Organization",
    "Session",
    "SessionDetails",
    "User",
    "UserRoleProfile",
    "is_invalid_response",

    # Request options
    "Credentials",
    "Filter",
    "PaginationParams",
    "RequestOption",
    "SearchParams",
    "Sort",
]
