"""Composable request options for Bill.com form bodies.

Every Bill.com call is a form-encoded POST. Options know how to write
themselves into the shared body; the client folds them left to right.
Pagination and search parameters both live inside the nested ``data``
field, itself url-encoded.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol
from urllib.parse import parse_qsl, urlencode


def encode_values(values: Dict[str, str]) -> str:
    """Url-encode a flat mapping with keys in sorted order."""
    return urlencode(sorted(values.items()))


class RequestOption(Protocol):
    """Anything that can write itself into a request body."""

    def apply(self, body: Dict[str, str]) -> None:
        ...


@dataclass
class Credentials:
    """Bill.com credentials; session fields are updated after login."""
    username: str = ""
    password: str = field(default="", repr=False)
    organization_id: str = ""
    developer_key: str = field(default="", repr=False)
    session_id: str = field(default="", repr=False)

    def apply(self, body: Dict[str, str]) -> None:
        """Add the non-empty credential fields to the request body."""
        if self.username:
            body["userName"] = self.username
        if self.password:
            body["password"] = self.password
        if self.organization_id:
            body["orgId"] = self.organization_id
        if self.developer_key:
            body["devKey"] = self.developer_key
        if self.session_id:
            body["sessionId"] = self.session_id


@dataclass(frozen=True)
class PaginationParams:
    """Offset pagination; ``start + max`` is the next page's start."""
    max: int = 0
    start: int = 0

    def apply(self, body: Dict[str, str]) -> None:
        data: Dict[str, str] = {}
        if self.max != 0:
            data["max"] = str(self.max)
        if self.start != 0:
            data["start"] = str(self.start)
        body["data"] = encode_values(data)


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class Sort:
    field: str
    asc: bool = True


@dataclass(frozen=True)
class SearchParams:
    """Search parameters for read/list calls.

    Only ``id`` is put on the wire. ``filters`` and ``sort`` are carried
    for callers but the Bill.com encoding for them is not settled.
    """
    id: str = ""
    filters: List[Filter] = field(default_factory=list)
    sort: List[Sort] = field(default_factory=list)
    nested: bool = False
    show_audit: bool = False

    def apply(self, body: Dict[str, str]) -> None:
        """Merge ``id`` into the ``data`` field, creating it if needed."""
        if not self.id:
            return
        data = dict(parse_qsl(body.get("data", ""), keep_blank_values=True))
        data["id"] = self.id
        body["data"] = encode_values(data)
