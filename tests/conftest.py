"""Shared fakes: an in-memory session backend and a scripted requests session."""
import json

import pytest

from kiosk.cookie_store import CookieStore
from kiosk.session import SessionApplier


SAMPLE_COOKIES = [
    {
        "domain": ".example.com",
        "name": "SID",
        "value": "abc123",
        "path": "/",
        "secure": True,
        "httpOnly": True,
        "sameSite": "no_restriction",
        "expirationDate": 1893456000,   # 2030-01-01
    },
    {
        "domain": "accounts.example.com",
        "name": "LSID",
        "value": "xyz",
        "sameSite": "lax",
        "expirationDate": 1861920000,   # 2029-01-01
    },
    {
        "domain": "example.com",
        "name": "pref",
        "value": "dark",
    },
]


class FakeBackend:
    def __init__(self, fail_names=(), fail_steps=()):
        self.cookies = {}
        self.calls = []
        self.fail_names = set(fail_names)
        self.fail_steps = set(fail_steps)

    def set_cookie(self, record, url):
        self.calls.append(("set_cookie", record.name, url))
        if record.name in self.fail_names:
            raise RuntimeError("rejected by engine")
        self.cookies[(record.domain, record.name)] = record

    def clear_storage(self):
        self.calls.append(("clear_storage",))
        if "clear_storage" in self.fail_steps:
            raise RuntimeError("storage locked")
        self.cookies.clear()

    def clear_http_cache(self):
        self.calls.append(("clear_http_cache",))
        if "clear_http_cache" in self.fail_steps:
            raise RuntimeError("cache busy")


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is not None:
            self.text = text
        else:
            self.text = "" if payload is None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            return json.loads(self.text)
        return self._payload


class FakeHttpSession:
    """Stands in for requests.Session; answers from a queue and records calls."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append({
            "method": method,
            "url": url,
            "params": params,
            "json": json,
            "headers": headers,
            "timeout": timeout,
        })
        item = self.responses.pop(0) if self.responses else FakeResponse(200, [])
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def cookie_text():
    return json.dumps(SAMPLE_COOKIES)


@pytest.fixture
def store(tmp_path):
    return CookieStore(tmp_path / ".kiosk" / "cookies.json")


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def navigations():
    return []


@pytest.fixture
def applier(backend, store, navigations):
    return SessionApplier(backend, store, navigations.append)
