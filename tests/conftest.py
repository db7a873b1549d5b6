"""
Pytest fixtures for proxy tests

Upstream APIs are replaced by a FakeUpstream patched over requests.request.
"""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import json
from typing import Any, Dict, NamedTuple, Optional
from unittest.mock import patch

import pytest
import requests

from notion_toggl_proxy import config


NOTION = config.NOTION_API_BASE
TOGGL = config.TOGGL_API_BASE


def make_response(
    status: int = 200,
    payload: Any = None,
    text: Optional[str] = None,
    content_type: Optional[str] = None,
) -> requests.Response:
    """Build a real requests.Response carrying JSON, plain text or nothing."""
    resp = requests.Response()
    resp.status_code = status
    resp.encoding = "utf-8"
    if payload is not None:
        resp._content = json.dumps(payload).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    elif text is not None:
        resp._content = text.encode("utf-8")
        resp.headers["Content-Type"] = "text/plain; charset=utf-8"
    else:
        resp._content = b""
    if content_type:
        resp.headers["Content-Type"] = content_type
    return resp


class Call(NamedTuple):
    method: str
    url: str
    headers: Dict[str, str]
    body: Any


class FakeUpstream:
    """Routes (method, url) to a canned response, an exception, or a callable taking the JSON body."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, url, response):
        self.routes[(method, url)] = response

    def __call__(self, method, url, headers=None, json=None, timeout=None):
        self.calls.append(Call(method, url, dict(headers or {}), json))
        handler = self.routes.get((method, url))
        if handler is None:
            return make_response(404, {"message": "not found"})
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(json)
        return handler

    def calls_to(self, method, url):
        return [c for c in self.calls if c.method == method and c.url == url]


@pytest.fixture
def upstream():
    fake = FakeUpstream()
    with patch("notion_toggl_proxy.upstream.requests.request", side_effect=fake):
        yield fake


@pytest.fixture
def client():
    from main import app

    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c
