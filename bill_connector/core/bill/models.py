"""Bill.com API entities and the response envelope.

Wire names follow the Bill.com v2 API (camelCase inside ``response_data``);
each entity exposes ``from_api`` to build itself from one decoded record.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, List, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Session:
    """Logged-in organization context returned by ``BillClient.login``."""
    session_id: str
    organization_id: str


@dataclass(frozen=True)
class LoginData:
    session_id: str
    org_id: str

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "LoginData":
        return cls(session_id=raw.get("sessionId") or "", org_id=raw.get("orgId") or "")


@dataclass(frozen=True)
class SessionDetails:
    org_id: str
    user_id: str

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "SessionDetails":
        return cls(org_id=raw.get("organizationId") or "", user_id=raw.get("userId") or "")


@dataclass(frozen=True)
class Organization:
    id: str
    name: str

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Organization":
        return cls(id=raw.get("orgId") or "", name=raw.get("orgName") or "")


@dataclass(frozen=True)
class User:
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    name: str = ""
    is_active: bool = False
    role_id: str = ""

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "User":
        return cls(
            id=raw.get("id") or "",
            first_name=raw.get("firstName") or "",
            last_name=raw.get("lastName") or "",
            email=raw.get("email") or "",
            name=raw.get("name") or "",
            is_active=bool(raw.get("isActive", False)),
            role_id=raw.get("profileId") or "",
        )


@dataclass(frozen=True)
class UserRoleProfile:
    id: str
    name: str = ""
    type: str = ""
    description: str = ""

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "UserRoleProfile":
        return cls(
            id=raw.get("id") or "",
            name=raw.get("name") or "",
            type=raw.get("type") or "",
            description=raw.get("description") or "",
        )


@dataclass(frozen=True)
class Envelope(Generic[T]):
    """Uniform Bill.com response wrapper.

    Attributes:
        status: ``response_status`` (0 = success, 1 = failure)
        message: ``response_message`` ("Success" / "Error")
        data: ``response_data``; raw on construction, typed after ``with_data``
    """
    status: int
    message: str
    data: T

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Envelope[Any]":
        """Build an envelope around the raw ``response_data`` payload.

        Raises:
            ValueError: If ``raw`` is not an envelope-shaped object
        """
        if not isinstance(raw, dict) or "response_status" not in raw:
            raise ValueError("response is not a Bill.com envelope")
        return cls(
            status=int(raw["response_status"]),
            message=raw.get("response_message") or "",
            data=raw.get("response_data"),
        )

    def with_data(self, parse: Callable[[Any], Any]) -> "Envelope[Any]":
        """Return a copy whose payload went through ``parse``."""
        return Envelope(status=self.status, message=self.message, data=parse(self.data))


def is_invalid_response(envelope: Envelope[Any]) -> bool:
    """Return True when the envelope reports a semantic failure."""
    return envelope.status == 1 or envelope.message == "Error"


# ─────────────────────────────────────────────────────────────────────────────
# Payload parsers (response_data -> typed value)
# ─────────────────────────────────────────────────────────────────────────────

def parse_list(item_parser: Callable[[Dict[str, Any]], T]) -> Callable[[Any], List[T]]:
    """Build a parser for list payloads; ``null`` is treated as an empty list."""

    def _parse(data: Any) -> List[T]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise ValueError(f"expected a list payload, got {type(data).__name__}")
        return [item_parser(item) for item in data]

    return _parse


def parse_object(item_parser: Callable[[Dict[str, Any]], T]) -> Callable[[Any], T]:
    """Build a parser for single-object payloads."""

    def _parse(data: Any) -> T:
        if not isinstance(data, dict):
            raise ValueError(f"expected an object payload, got {type(data).__name__}")
        return item_parser(data)

    return _parse


def parse_permissions(data: Any) -> Dict[str, bool]:
    """Parse a permission-name -> enabled mapping; non-boolean values count as disabled."""
    if not isinstance(data, dict):
        raise ValueError(f"expected an object payload, got {type(data).__name__}")
    return {str(name): value is True for name, value in data.items()}
