"""Records returned by the Attrove API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """Base for API records; unknown fields are dropped."""

    model_config = ConfigDict(extra="ignore")


class Attendee(Record):
    """A meeting participant. At least one of name or email is usually set."""

    name: str | None = None
    email: str | None = None

    @property
    def display_name(self) -> str | None:
        return self.name or self.email or None


class Event(Record):
    """Calendar entry.

    ``attendees`` is kept as delivered: the API sends a list, a JSON-encoded
    string, or nothing. Use ``normalize.to_attendees`` to read it.
    """

    id: str | None = None
    title: str = ""
    start_time: datetime
    end_time: datetime | None = None
    description: str | None = None
    attendees: Any = None


class MeetingRecord(Record):
    """A past meeting, used to surface history with the same people."""

    id: str | None = None
    title: str = ""
    start_time: datetime
    end_time: datetime | None = None
    attendees: Any = None
    short_summary: str | None = None
    action_items: Any = None


class Conversation(Record):
    """A conversation grouping messages by thread."""

    conversation_name: str | None = None
    threads: dict[str, list[Any]] = Field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.conversation_name or "Unnamed thread"

    @property
    def message_count(self) -> int:
        return sum(len(messages) for messages in self.threads.values())


class SearchResult(Record):
    """Search hits keyed by conversation id, in the order returned."""

    conversations: dict[str, Conversation] = Field(default_factory=dict)


class QueryResponse(Record):
    """A synthesized answer and the messages it was built from."""

    answer: str = ""
    used_message_ids: list[str] = Field(default_factory=list)


class Integration(Record):
    """A connected source such as gmail or slack."""

    id: str | None = None
    provider: str
    name: str | None = None


class ProvisionedUser(Record):
    """A user created with partner credentials."""

    id: str
    api_key: str


class ConnectToken(Record):
    """Short-lived token for the integration connect page."""

    token: str
    expires_at: str
