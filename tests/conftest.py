"""Pytest shared fixtures for Bill.com connector tests."""
import json
import os
import pathlib
import sys
from types import SimpleNamespace
from typing import Any, Dict, List
from urllib.parse import parse_qsl

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from bill_connector.core.bill import BillClient, Credentials


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_real_http(monkeypatch):
    """Prevent unit tests from reaching Bill.com through a real requests.Session."""

    def _fail(self, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP POST in unit test: {url}")

    monkeypatch.setattr(requests.Session, "post", _fail)


@pytest.fixture(autouse=True)
def _isolate_bill_env(monkeypatch):
    """Drop BATON_BILL_* variables inherited from the developer's shell."""
    for name in list(os.environ):
        if name.startswith("BATON_BILL_"):
            monkeypatch.delenv(name, raising=False)


# ─────────────────────────────────────────────────────────────────────────────
# Fake HTTP transport
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    """Minimal requests.Response stand-in; a str payload is decoded lazily."""

    def __init__(self, payload: Any, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code
        self.text = payload if isinstance(payload, str) else json.dumps(payload)
        self.json_calls = 0

    def json(self):
        self.json_calls += 1
        if isinstance(self._payload, str):
            return json.loads(self._payload)
        return self._payload


def envelope(data: Any, status: int = 0, message: str = "Success") -> Dict[str, Any]:
    return {"response_status": status, "response_message": message, "response_data": data}


def form_data(call: SimpleNamespace) -> Dict[str, str]:
    """Decode the nested url-encoded ``data`` field of a recorded call."""
    return dict(parse_qsl(call.form.get("data", "")))


class FakeHttp:
    """Stands in for requests.Session.

    Responses are registered per endpoint path. Each entry is a StubResponse,
    an exception to raise, or a callable receiving the recorded call. Entries
    are consumed in order; the last one keeps answering.
    """

    def __init__(self):
        self.routes: Dict[str, List[Any]] = {}
        self.calls: List[SimpleNamespace] = []

    def add(self, path: str, *responses: Any) -> "FakeHttp":
        self.routes.setdefault(path, []).extend(responses)
        return self

    def post(self, url, data=None, headers=None, timeout=None):
        path = next((p for p in self.routes if url.endswith(p)), None)
        call = SimpleNamespace(
            url=url,
            path=path,
            body=data,
            form=dict(parse_qsl(data or "", keep_blank_values=True)),
            headers=headers or {},
            timeout=timeout,
        )
        self.calls.append(call)

        if path is None:
            raise RuntimeError(f"Unexpected HTTP POST in unit test: {url}")

        queue = self.routes[path]
        entry = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(entry, BaseException):
            raise entry
        if callable(entry):
            return entry(call)
        return entry


@pytest.fixture()
def fake_http():
    return FakeHttp()


@pytest.fixture()
def make_client(fake_http):
    """Build a BillClient on the fake transport; pass session_id to start logged in."""

    def _make(session_id: str = "", organization_id: str = "") -> BillClient:
        credentials = Credentials(
            username="u",
            password="p",
            developer_key="k",
            organization_id=organization_id,
            session_id=session_id,
        )
        return BillClient(credentials, http_session=fake_http, base_url="https://bill.test/api/v2")

    return _make
