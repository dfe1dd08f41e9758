"""Opaque page tokens passed between successive syncer calls.

A token is a JSON-encoded stack of page states (a "bag"). The Bill.com
syncers only keep an integer offset in the current state's ``token``.

Wire format:
    {"states": [{"token": "", "type": "user", "id": ""}],
     "current_state": {"token": "50", "type": "user", "id": ""}}

An empty bag encodes to the empty string, which tells the driver that the
resource has no further pages.
"""
from __future__ import annotations
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .bill.exceptions import ParseError


@dataclass
class Token:
    """Page token handed to a syncer by the sync driver."""
    size: int = 0
    token: str = ""


@dataclass
class PageState:
    token: str = ""
    resource_type_id: str = ""
    resource_id: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"token": self.token, "type": self.resource_type_id, "id": self.resource_id}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PageState":
        if not isinstance(raw, dict):
            raise ParseError(f"invalid page state: {raw!r}")
        return cls(
            token=str(raw.get("token") or ""),
            resource_type_id=str(raw.get("type") or ""),
            resource_id=str(raw.get("id") or ""),
        )


class Bag:
    """Stack of page states with a distinguished current state."""

    def __init__(self) -> None:
        self.states: List[PageState] = []
        self.current_state: Optional[PageState] = None

    def push(self, state: PageState) -> None:
        if self.current_state is not None:
            self.states.append(self.current_state)
        self.current_state = state

    def pop(self) -> Optional[PageState]:
        if self.current_state is None:
            return None
        popped = self.current_state
        self.current_state = self.states.pop() if self.states else None
        return popped

    def current(self) -> Optional[PageState]:
        return self.current_state

    def next(self, page_token: str) -> None:
        """Replace the current state's token; an empty token drops the state."""
        state = self.pop()
        if state is None:
            raise ParseError("no active page state")
        if page_token:
            state.token = page_token
            self.push(state)

    def next_token(self, page_token: str) -> str:
        self.next(page_token)
        return self.marshal()

    def page_token(self) -> str:
        return self.current_state.token if self.current_state else ""

    def marshal(self) -> str:
        if self.current_state is None:
            return ""
        return json.dumps({
            "states": [state.to_dict() for state in self.states],
            "current_state": self.current_state.to_dict(),
        })

    def unmarshal(self, text: str) -> None:
        """Load the bag from its encoded form; an empty string resets it.

        Raises:
            ParseError: If ``text`` is not a valid encoded bag
        """
        self.states = []
        self.current_state = None
        if not text:
            return
        try:
            raw = json.loads(text)
        except ValueError as exc:
            raise ParseError(f"invalid page token: {exc}") from exc
        if not isinstance(raw, dict) or not isinstance(raw.get("states", []), list):
            raise ParseError(f"invalid page token: {text!r}")
        self.states = [PageState.from_dict(item) for item in raw.get("states") or []]
        current = raw.get("current_state")
        self.current_state = PageState.from_dict(current) if current is not None else None


def parse_page_token(text: str, resource_type_id: str, resource_id: str = "") -> Bag:
    """Decode a page token, seeding an initial state for ``resource_type_id`` if empty."""
    bag = Bag()
    bag.unmarshal(text)
    if bag.current() is None:
        bag.push(PageState(resource_type_id=resource_type_id, resource_id=resource_id))
    return bag


def handle_page_token(token: Optional[Token], resource_type_id: str) -> Tuple[Bag, int]:
    """Return the decoded bag and the integer offset it carries.

    A missing or empty token means offset 0.

    Raises:
        ParseError: If the token is malformed or its page token is not an integer
    """
    bag = parse_page_token(token.token if token else "", resource_type_id)
    page = bag.page_token()
    if not page:
        return bag, 0
    try:
        offset = int(page)
    except ValueError as exc:
        raise ParseError(f"invalid page offset: {page!r}") from exc
    if offset < 0:
        raise ParseError(f"invalid page offset: {page!r}")
    return bag, offset


def next_page_token(bag: Bag, next_offset: int, item_count: int) -> str:
    """Encode the next offset, or drop the current state when the fetched page was empty."""
    if item_count == 0:
        return bag.next_token("")
    return bag.next_token(str(next_offset))
