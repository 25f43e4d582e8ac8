"""Pytest configuration and fixtures for commsdigest tests."""

import json
from collections.abc import Callable
from unittest.mock import AsyncMock

import httpx
import pytest
import structlog

from commsdigest.adapters.attrove import AttroveAdapter
from commsdigest.models import Event, MeetingRecord, QueryResponse, SearchResult

ATTROVE_ENV = [
    "ATTROVE_SECRET_KEY",
    "ATTROVE_USER_TOKEN",
    "ATTROVE_USER_ID",
    "ATTROVE_CLIENT_ID",
    "ATTROVE_CLIENT_SECRET",
    "ATTROVE_QUERY_TIMEOUT",
    "RESEND_API_KEY",
    "SEND_TO",
    "DEMO_MODE",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configuration done by CLI tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove any real credentials from the environment."""
    for name in ATTROVE_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def mock_settings(clean_env):
    """Mock settings for testing."""
    clean_env.setenv("ATTROVE_SECRET_KEY", "sk_test_secret")
    clean_env.setenv("ATTROVE_USER_TOKEN", "sk_test_token")
    clean_env.setenv("ATTROVE_USER_ID", "00000000-0000-0000-0000-000000000000")
    return clean_env


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """Build an Event with naive local timestamps."""

    def _make(title: str = "Standup", start: str = "2026-01-05T09:30:00", **fields) -> Event:
        return Event.model_validate({"title": title, "start_time": start, **fields})

    return _make


@pytest.fixture
def make_meeting() -> Callable[..., MeetingRecord]:
    def _make(title: str, emails: list[str], **fields) -> MeetingRecord:
        return MeetingRecord.model_validate(
            {
                "title": title,
                "start_time": "2026-01-02T15:00:00",
                "attendees": [{"email": e} for e in emails],
                **fields,
            }
        )

    return _make


@pytest.fixture
def fake_attrove() -> AsyncMock:
    """An AttroveAdapter double with empty but successful responses."""
    attrove = AsyncMock(spec=AttroveAdapter)
    attrove.list_events.return_value = []
    attrove.search.return_value = SearchResult()
    attrove.query.return_value = QueryResponse(answer="Nothing new.")
    attrove.list_meetings.return_value = []
    attrove.list_integrations.return_value = []
    return attrove


class RecordingTransport(httpx.MockTransport):
    """Mock transport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    def json_body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def transport_factory() -> Callable[..., RecordingTransport]:
    return RecordingTransport
