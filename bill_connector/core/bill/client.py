"""Low-level HTTP client for the Bill.com v2 API.

Handles session login, form body building, and envelope decoding.
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from .exceptions import (
    APIError,
    DecodeError,
    HTTPStatusError,
    SessionRequiredError,
    TransportError,
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
    parse_list,
    parse_object,
    parse_permissions,
)
from .request_options import (
    Credentials,
    PaginationParams,
    RequestOption,
    SearchParams,
    encode_values,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30

BASE_URL = "https://api.bill.com/api/v2"
SANDBOX_BASE_URL = "https://api-sandbox.bill.com/api/v2"

# Usual format: <base>/Crud/<Operation>/<Entity>.json
# (https://developer.bill.com/docs/api-request-format)
LOGIN_PATH = "/Login.json"
USERS_PATH = "/List/User.json"
ORGANIZATIONS_PATH = "/ListOrgs.json"
USER_ROLE_PROFILE_PATH = "/Crud/Read/Profile.json"
USER_ROLE_PROFILES_PATH = "/List/Profile.json"
USER_ROLE_PERMISSIONS_PATH = "/GetProfilePermissions.json"
SESSION_INFO_PATH = "/GetSessionInfo.json"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class BillClient:
    """HTTP client for the Bill.com v2 API.

    Features:
    - One request builder shared by every operation
    - Envelope status checked in one place (``is_invalid_response``)
    - Explicit session: org-scoped calls require ``login`` first

    Not safe for concurrent use: ``login`` mutates the credentials that every
    later call reads.

    Usage:
        client = BillClient(Credentials(username="u", password="p", developer_key="k"))
        orgs = client.get_organizations()
        client.login(orgs[0].id)
        users, next_start = client.get_users(PaginationParams(max=50))
    """

    def __init__(
        self,
        credentials: Credentials,
        http_session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """Initialize Bill.com client.

        Args:
            credentials: Username, password and developer key (session fields optional)
            http_session: HTTP transport (defaults to a new ``requests.Session``)
            base_url: API base URL (defaults to production)
            timeout: Per-request timeout in seconds
        """
        self.credentials = credentials
        self.http = http_session or requests.Session()
        self.base_url = (base_url or BASE_URL).rstrip("/")
        self.timeout = timeout
        self.current_session: Optional[Session] = None
        if credentials.session_id:
            self.current_session = Session(credentials.session_id, credentials.organization_id)

    # ─────────────────────────────────────────────────────────────────────
    # Session
    # ─────────────────────────────────────────────────────────────────────

    def login(self, organization_id: str) -> Session:
        """Log into one organization and remember the returned session.

        Bill.com's list-users endpoint doubles as the login call here: it
        validates the credentials and hands back the session id and org id.

        Args:
            organization_id: Organization to log into

        Returns:
            The new session (also stored on the client). On failure the
            previous session is kept.
        """
        credentials = Credentials(
            username=self.credentials.username,
            password=self.credentials.password,
            organization_id=organization_id,
            developer_key=self.credentials.developer_key,
        )
        envelope = self._do_request(USERS_PATH, parse_object(LoginData.from_api), credentials)
        login: LoginData = envelope.data
        if not login.session_id or not login.org_id:
            raise DecodeError(f"{self.base_url}{USERS_PATH}: login response missing sessionId/orgId")

        self.credentials.session_id = login.session_id
        self.credentials.organization_id = login.org_id
        self.current_session = Session(session_id=login.session_id, organization_id=login.org_id)
        logger.info(f"Logged into Bill.com organization {login.org_id}")
        return self.current_session

    def ensure_session(self, organization_id: str) -> Session:
        """Return the current session if it targets ``organization_id``, else log in."""
        if self.current_session and self.current_session.organization_id == organization_id:
            return self.current_session
        return self.login(organization_id)

    def _session_credentials(self) -> Credentials:
        if not self.credentials.session_id:
            raise SessionRequiredError("Not logged in - call login(organization_id) first")
        return Credentials(
            developer_key=self.credentials.developer_key,
            session_id=self.credentials.session_id,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Operations
    # ─────────────────────────────────────────────────────────────────────

    def get_organizations(self) -> List[Organization]:
        """Return every organization visible to the user.

        Does not require ``login``. Bill.com does not paginate this endpoint.
        """
        credentials = Credentials(
            username=self.credentials.username,
            password=self.credentials.password,
            developer_key=self.credentials.developer_key,
        )
        envelope = self._do_request(ORGANIZATIONS_PATH, parse_list(Organization.from_api), credentials)
        return envelope.data

    def get_session_details(self) -> SessionDetails:
        """Return organization and user ids of the current session."""
        envelope = self._do_request(
            USERS_PATH,
            parse_object(SessionDetails.from_api),
            self._session_credentials(),
        )
        return envelope.data

    def get_users(self, pagination: PaginationParams) -> Tuple[List[User], int]:
        """Return one page of users and the start offset of the next page.

        The next offset is ``start + max`` whatever the page size was; an
        empty page is the only end-of-list signal.
        """
        envelope = self._do_request(
            USERS_PATH,
            parse_list(User.from_api),
            self._session_credentials(),
            pagination,
        )
        return envelope.data, pagination.start + pagination.max

    def get_user_role_profiles(self, pagination: PaginationParams) -> Tuple[List[UserRoleProfile], int]:
        """Return one page of user role profiles and the next start offset."""
        envelope = self._do_request(
            USER_ROLE_PROFILES_PATH,
            parse_list(UserRoleProfile.from_api),
            self._session_credentials(),
            pagination,
        )
        return envelope.data, pagination.start + pagination.max

    def get_user_role_profile(self, role_id: str) -> UserRoleProfile:
        """Return a single user role profile by id."""
        envelope = self._do_request(
            USER_ROLE_PROFILE_PATH,
            parse_object(UserRoleProfile.from_api),
            self._session_credentials(),
            SearchParams(id=role_id),
        )
        return envelope.data

    def get_user_role_permissions(self, role_id: str) -> Dict[str, bool]:
        """Return the permission name -> enabled mapping of a user role profile."""
        envelope = self._do_request(
            USER_ROLE_PERMISSIONS_PATH,
            parse_permissions,
            self._session_credentials(),
            SearchParams(id=role_id),
        )
        return envelope.data

    # ─────────────────────────────────────────────────────────────────────
    # Request plumbing
    # ─────────────────────────────────────────────────────────────────────

    def _do_request(
        self,
        path: str,
        parse: Callable[[Any], Any],
        *options: Optional[RequestOption],
    ) -> Envelope[Any]:
        """Execute a form-encoded POST and decode the typed envelope.

        Args:
            path: API endpoint path (e.g., "/List/User.json")
            parse: Converts ``response_data`` into the typed payload
            *options: Request options applied in order (``None`` is skipped)

        Returns:
            Envelope whose data went through ``parse``

        Raises:
            TransportError: The HTTP call failed
            HTTPStatusError: HTTP status >= 300
            DecodeError: Body is not a well-formed envelope
            APIError: Envelope reports failure
        """
        body: Dict[str, str] = {}
        for option in options:
            if option is not None:
                option.apply(body)

        url = f"{self.base_url}{path}"
        try:
            resp = self.http.post(
                url,
                data=encode_values(body),
                headers={"content-type": FORM_CONTENT_TYPE},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"{url}: {exc}") from exc

        logger.debug(f"POST {path} -> {resp.status_code}")
        self._handle_error(resp, url)

        try:
            envelope = Envelope.from_api(resp.json())
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"{url}: {exc}") from exc

        if is_invalid_response(envelope):
            raise APIError(envelope.status, envelope.message, url)

        try:
            return envelope.with_data(parse)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise DecodeError(f"{url}: unexpected response_data: {exc}") from exc

    def _handle_error(self, resp: requests.Response, url: str) -> None:
        """Raise HTTPStatusError for any non-2xx status, before decoding."""
        if resp.status_code >= 300:
            raise HTTPStatusError(resp.status_code, url)
