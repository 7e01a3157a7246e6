"""Shared test fixtures for chouseisan tests."""

from __future__ import annotations

import io
import json
import os
import tempfile
import threading
from contextlib import contextmanager, redirect_stdout
from typing import Any, Dict, List, Optional

import requests


class FakeResponse:
    """Fake HTTP response for mocking requests."""

    def __init__(self, body: Any = None, status: int = 200, bad_json: bool = False):
        self.status_code = status
        self._body = body
        self._bad_json = bad_json
        self.text = "not json" if bad_json else json.dumps(body)

    def json(self) -> Any:
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._body


class FakeSession:
    """Fake HTTP session serving per-year holiday payloads.

    `routes` maps a year to a FakeResponse or an exception to raise.
    Unrouted years answer with an empty holiday list.
    """

    def __init__(self, routes: Optional[Dict[int, Any]] = None, delay: float = 0.0):
        self.routes = dict(routes or {})
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def get(self, url: str, timeout=None, **kwargs) -> FakeResponse:
        with self._lock:
            self.calls.append({"url": url, "timeout": timeout})
        if self.delay:
            threading.Event().wait(self.delay)
        year = int(url.rstrip("/").rsplit("/", 1)[-1])
        route = self.routes.get(year)
        if isinstance(route, BaseException):
            raise route
        if route is None:
            return FakeResponse({"holidays": []})
        return route

    def urls(self) -> List[str]:
        return [c["url"] for c in self.calls]


def holidays_body(*dates: str) -> Dict[str, Any]:
    """holidays-jp style payload for the given ISO dates."""
    return {"holidays": [{"date": d, "name": "祝日"} for d in dates]}


def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")


def make_request_data(**overrides) -> Dict[str, Any]:
    """A complete timed request record, camelCase like the side panel."""
    data: Dict[str, Any] = {
        "eventTitle": "Team sync",
        "memo": "",
        "startDate": "2024-01-05",
        "endDate": "2024-01-05",
        "startTime": "10:00",
        "endTime": "12:00",
        "duration": "60",
        "fullDay": False,
        "excludeHolidays": False,
        "overwrite": False,
    }
    data.update(overrides)
    return data


# -----------------------------------------------------------------------------
# YAML and output helpers
# -----------------------------------------------------------------------------


def write_yaml(data: Any, dir: Optional[str] = None, filename: str = "request.yaml") -> str:
    """Write data to a temporary YAML file, return the path."""
    import yaml

    td = dir or tempfile.mkdtemp()
    p = os.path.join(td, filename)
    with open(p, "w", encoding="utf-8") as fh:
        yaml.safe_dump(data, fh, sort_keys=False, allow_unicode=True)
    return p


@contextmanager
def capture_stdout():
    """Context manager that captures stdout and yields a StringIO buffer."""
    buf = io.StringIO()
    with redirect_stdout(buf):
        yield buf


class TempDirMixin:
    """Mixin providing a temporary directory that's cleaned up after each test."""

    tmpdir: str

    def setUp(self):
        super().setUp()
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        import shutil
        shutil.rmtree(self.tmpdir, ignore_errors=True)
        super().tearDown()
