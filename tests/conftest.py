"""
Pytest configuration and fixtures.
"""

import json
import os
from collections import defaultdict, deque
from urllib.parse import urlsplit

import pytest
import requests

API_BASE_URL = "http://api.test"


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Setup test environment variables."""

    test_env = {
        "AUTH_TEMPLATE_API_BASE_URL": API_BASE_URL,
        "AUTH_TEMPLATE_REQUEST_TIMEOUT": "5",
        "AUTH_TEMPLATE_SERVER_PALETTES": "true",
    }

    for key, value in test_env.items():
        os.environ[key] = value

    yield

    for key in test_env:
        os.environ.pop(key, None)


def make_response(status_code, payload=None, url=f"{API_BASE_URL}/"):
    """Build a ``requests.Response`` with a JSON body."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.encoding = "utf-8"
    response.headers["Content-Type"] = "application/json"
    response._content = json.dumps(payload).encode() if payload is not None else b""
    return response


class FakeSession:
    """
    Stand-in for ``requests.Session``.

    Responses are queued per (method, path) and served in order. A queued
    exception is raised instead of returned.
    """

    def __init__(self):
        self._routes = defaultdict(deque)
        self.calls = []
        self.closed = False

    def add(self, method, path, *responses):
        self._routes[(method.upper(), path)].extend(responses)

    def count(self, method, path):
        return sum(1 for call in self.calls if call[0] == method.upper() and call[1] == path)

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append((method.upper(), path, json))

        queue = self._routes.get((method.upper(), path))
        if not queue:
            raise AssertionError(f"Unexpected request: {method} {path}")

        item = queue.popleft()
        if isinstance(item, Exception):
            raise item

        item.url = url
        return item

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def api_client(fake_session):
    from auth_template.api.http_client import ApiClient

    return ApiClient(API_BASE_URL, session=fake_session, timeout=5)


@pytest.fixture
def user_payload():
    return {
        "id": "6f1c3c1e-6a8e-4d1a-9a43-0b3f1f0d2a11",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "email_confirmed": True,
        "created_at": "2026-01-20T08:25:39Z",
        "updated_at": "2026-01-24T02:32:20Z",
    }


@pytest.fixture
def seed_colors():
    return {
        "background_seed_hex": "#a9b1d6",
        "text_seed_hex": "#1a1b26",
        "primary_seed_hex": "#9ece6a",
        "secondary_seed_hex": "#7aa2f7",
        "green_seed_hex": "#73daca",
        "red_seed_hex": "#f7768e",
        "yellow_seed_hex": "#e0af68",
        "blue_seed_hex": "#7dcfff",
        "magenta_seed_hex": "#bb9af7",
        "cyan_seed_hex": "#2ac3de",
    }


@pytest.fixture
def response_factory():
    return make_response
