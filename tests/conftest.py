"""Test configuration ensuring local package import when editable install not active.

If users invoke `pytest` outside the project's virtualenv, we still add the project
root to sys.path so `import tasktrack_app` works. Also provides a fake HTTP
session so RedmineAPI can be exercised without a tracker.
"""

from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tasktrack_app.core.redmine_client import RedmineAPI  # noqa: E402

SERVER = "https://redmine.example/"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, reason="OK"):
        self.status_code = status_code
        self.reason = reason
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Routes GETs by endpoint path; a route is a payload, a FakeResponse or a callable."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []
        self._lock = threading.Lock()

    def get(self, url, params=None, headers=None, timeout=None):
        endpoint = url[len(SERVER) :]
        with self._lock:
            self.calls.append((endpoint, dict(params or {}), dict(headers or {})))
        route = self.routes.get(endpoint)
        if route is None:
            return FakeResponse(404, {"errors": ["Not found"]}, reason="Not Found")
        result = route(dict(params or {})) if callable(route) else route
        if isinstance(result, FakeResponse):
            return result
        return FakeResponse(200, result)

    def endpoints(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def make_api():
    def _make(routes, **kwargs):
        session = FakeSession(routes)
        return RedmineAPI(SERVER, "secret-key", session=session, **kwargs), session

    return _make
