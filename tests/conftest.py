"""Shared test fixtures."""
import json
from datetime import datetime
from urllib.parse import urlsplit

import pytest
import requests

from counsel_booking.circuit_breaker import CircuitBreaker
from counsel_booking.http_client import BackendClient, create_http_session

BASE_URL = "http://backend.test/api/"


def build_response(status_code: int = 200, body=None, text: str = None) -> requests.Response:
    """Real requests.Response carrying a JSON (or text) body."""
    response = requests.Response()
    response.status_code = status_code
    if body is not None:
        response._content = json.dumps(body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    elif text is not None:
        response._content = text.encode("utf-8")
        response.headers["Content-Type"] = "text/plain"
    else:
        response._content = b""
    response.encoding = "utf-8"
    return response


class FakeBackend:
    """
    Side effect for a patched requests.Session.request.

    Routes are keyed by (METHOD, path relative to the API root). A route value
    is a Response, an exception instance, or a list consumed one per call.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method: str, path: str, outcome):
        self.routes[(method.upper(), path)] = outcome
        return self

    def calls_to(self, method: str, path: str):
        return [c for c in self.calls if c["method"] == method.upper() and c["path"] == path]

    def __call__(self, method, url, **kwargs):
        path = urlsplit(url).path[len(urlsplit(BASE_URL).path):]
        self.calls.append({"method": method.upper(), "path": path, **kwargs})

        outcome = self.routes.get((method.upper(), path))
        if outcome is None:
            return build_response(404, {"message": f"No route for {method} {path}"})
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def backend(monkeypatch):
    """Fake backend wired into every requests.Session."""
    fake = FakeBackend()
    monkeypatch.setattr(requests.Session, "request", lambda self, method, url, **kw: fake(method, url, **kw))
    return fake


@pytest.fixture
def client():
    """Backend client with no backoff waits and a fresh circuit breaker."""
    return BackendClient(
        base_url=BASE_URL,
        token="test-token",
        session=create_http_session(),
        backoff_multiplier=0,
        circuit_breaker=CircuitBreaker(failure_threshold=5, reset_timeout=60),
    )


@pytest.fixture
def now() -> datetime:
    """Reference wall-clock time: 2024-01-01 10:00."""
    return datetime(2024, 1, 1, 10, 0)


@pytest.fixture
def raw_schedule():
    """Factory for backend schedule JSON."""
    def _create(
        id=1,
        date="2024-01-02",
        slot_id=7,
        consultant_id=5,
        booked_status=1,
        start="09:00:00",
        end="10:00:00",
    ):
        raw = {
            "id": id,
            "date": date,
            "recurrence": None,
            "bookedStatus": booked_status,
            "slotId": slot_id,
            "consultantId": consultant_id,
        }
        if start is not None or end is not None:
            raw["slot"] = {"slotStart": start, "slotEnd": end}
        return raw
    return _create


@pytest.fixture
def entry(raw_schedule):
    """Factory for parsed ScheduleEntry records."""
    from counsel_booking.models import ScheduleEntry

    def _create(**kwargs):
        return ScheduleEntry.from_api(raw_schedule(**kwargs))
    return _create
