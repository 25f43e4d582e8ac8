"""Meeting prep: a brief for each upcoming meeting from email, chat and calendar."""

from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

import structlog

from commsdigest.adapters.attrove import AttroveAdapter
from commsdigest.aggregators.correlate import RELATED_MEETINGS_SHOWN, find_related
from commsdigest.aggregators.daily import format_time
from commsdigest.aggregators.fetch import describe_failure
from commsdigest.aggregators.normalize import attendee_names, to_attendees
from commsdigest.models import Event, MeetingRecord

logger = structlog.get_logger()

BRIEF_RULE = "─" * 60
PAST_MEETINGS_LIMIT = 5


def format_short_date(moment: datetime) -> str:
    """e.g. "Jan 5"."""
    local = moment.astimezone()
    return f"{local:%b} {local.day}"


def build_prompt(event: Event, names: Sequence[str]) -> str:
    """Question asked to prepare for a meeting."""
    if names:
        return (
            f'What do I need to know before my meeting "{event.title}" with '
            f"{', '.join(names)}? Include any recent email threads, Slack messages, "
            "open action items, or decisions involving these people."
        )
    return (
        f'What do I need to know before my meeting "{event.title}"? Include any '
        "recent context, action items, or decisions related to this topic."
    )


@dataclass
class MeetingBrief:
    """Everything gathered for one upcoming meeting."""

    event: Event
    attendee_names: list[str] = field(default_factory=list)
    related: list[MeetingRecord] = field(default_factory=list)
    answer: str = ""

    def render(self) -> str:
        lines = [BRIEF_RULE, f"Meeting: {self.event.title}"]

        when = format_time(self.event.start_time)
        if self.event.end_time:
            when = f"{when} - {format_time(self.event.end_time)}"
        lines.append(f"Time:    {when}")
        if self.attendee_names:
            lines.append(f"With:    {', '.join(self.attendee_names)}")
        lines.append("")

        if self.related:
            lines.append("Previous meetings with these people:")
            for meeting in self.related[:RELATED_MEETINGS_SHOWN]:
                lines.append(f"  - {meeting.title} ({format_short_date(meeting.start_time)})")
                if meeting.short_summary:
                    lines.append(f"    {meeting.short_summary}")
            lines.append("")

        lines.append("Prep Brief:")
        lines.append(self.answer)
        lines.append("")
        return "\n".join(lines)


@dataclass
class PrepFailure:
    """A meeting whose brief could not be prepared."""

    event: Event
    reason: Exception

    def render(self) -> str:
        return f'Failed to prep "{self.event.title}": {describe_failure(self.reason)}'


class MeetingPrepAggregator:
    """Prepares briefs for upcoming meetings.

    Briefs are built one meeting at a time so a failure on one meeting never
    affects the others.
    """

    def __init__(self, attrove: AttroveAdapter, log: Any = None) -> None:
        self.attrove = attrove
        self.log = log or logger

    async def __aenter__(self) -> "MeetingPrepAggregator":
        await self.attrove.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.attrove.disconnect()

    async def list_upcoming(self, today: date | None = None) -> list[Event]:
        """Events from today through tomorrow."""
        today = today or date.today()
        return await self.attrove.list_events(
            today,
            today + timedelta(days=1),
            expand=["attendees", "description"],
        )

    async def prepare_brief(self, event: Event) -> MeetingBrief:
        """Build one brief: attendees, related past meetings and an AI answer."""
        attendees = to_attendees(event.attendees, log=self.log)
        names = attendee_names(attendees)

        past = await self.attrove.list_meetings(
            expand=["short_summary", "action_items"],
            limit=PAST_MEETINGS_LIMIT,
        )
        related = find_related([event], past, log=self.log)

        response = await self.attrove.query(build_prompt(event, names), include_sources=True)

        return MeetingBrief(
            event=event,
            attendee_names=names,
            related=related,
            answer=response.answer,
        )

    async def prepare_all(
        self, events: Sequence[Event]
    ) -> AsyncIterator[MeetingBrief | PrepFailure]:
        """Yield a brief or a failure for every event, in order."""
        for event in events:
            try:
                yield await self.prepare_brief(event)
            except Exception as e:
                yield PrepFailure(event=event, reason=e)
