"""Daily rundown: today's calendar, recent threads and an AI digest."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

import structlog

from commsdigest.adapters.attrove import AttroveAdapter
from commsdigest.aggregators.fetch import (
    Outcome,
    RemoteQuery,
    TotalFailureError,
    all_failed,
    failures,
    settle_all,
)
from commsdigest.aggregators.normalize import attendee_names, to_attendees
from commsdigest.config.settings import AttroveSettings
from commsdigest.models import Event, QueryResponse, SearchResult

logger = structlog.get_logger()

SEARCH_QUERY = "action items OR decisions OR follow up OR deadline"

DIGEST_PROMPT = """Generate a concise daily digest for today. Include:
1. Open action items that need attention
2. Key decisions made in the last 24 hours
3. Important threads or conversations to follow up on
4. A 2-3 sentence summary of recent communications

Format as a structured digest with clear sections."""

TITLE_RULE = "=" * 50
SECTION_RULE = "-" * 30
LOAD_FAILED = "  (failed to load — see error above)"
GENERATE_FAILED = "  (failed to generate — see error above)"

ATTENDEES_SHOWN = 3
THREADS_SHOWN = 5


def format_date_label(day: date) -> str:
    """e.g. "Monday, January 5"."""
    return f"{day:%A, %B} {day.day}"


def format_time(moment: datetime) -> str:
    """Local wall-clock time, e.g. "09:30 AM"."""
    return moment.astimezone().strftime("%I:%M %p")


def _section(lines: list[str], header: str) -> None:
    lines.append(f"\n{header}")
    lines.append(SECTION_RULE)


def assemble_rundown(
    date_label: str,
    events: Outcome,
    search: Outcome,
    digest: Outcome,
    log: Any = None,
) -> str:
    """Assemble the rundown text from settled outcomes.

    Sections always come in the same order (title, Calendar, Recent Threads,
    Digest). A failed source gets a placeholder line and never stops the
    remaining sections from being built. Events and conversations are listed
    in the order the API returned them.

    Args:
        date_label: Human-readable date for the title
        events: Outcome holding a list of Event
        search: Outcome holding a SearchResult
        digest: Outcome holding a QueryResponse
        log: Diagnostic sink for malformed attendee fields
    """
    lines = [f"Daily Rundown - {date_label}", TITLE_RULE]

    # Calendar section
    if events.ok:
        event_list: list[Event] = events.value
        _section(lines, f"Calendar ({len(event_list)} events)")
        if not event_list:
            lines.append("  No meetings today.")
        for event in event_list:
            names = attendee_names(to_attendees(event.attendees, log=log), ATTENDEES_SHOWN)
            lines.append(f"  {format_time(event.start_time)}  {event.title}")
            if names:
                lines.append(f"         with {', '.join(names)}")
    else:
        _section(lines, "Calendar")
        lines.append(LOAD_FAILED)

    # Recent threads section
    if search.ok:
        result: SearchResult = search.value
        _section(lines, f"Recent Threads ({len(result.conversations)} active)")
        for conversation in list(result.conversations.values())[:THREADS_SHOWN]:
            lines.append(
                f"  - {conversation.display_name} ({conversation.message_count} messages)"
            )
    else:
        _section(lines, "Recent Threads")
        lines.append(LOAD_FAILED)

    # AI digest section
    _section(lines, "Digest")
    if digest.ok:
        response: QueryResponse = digest.value
        lines.append(response.answer)
    else:
        lines.append(GENERATE_FAILED)

    return "\n".join(lines)


@dataclass
class RundownResult:
    """An assembled rundown and the outcomes it was built from."""

    date_label: str
    report: str
    outcomes: list[Outcome] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(failures(self.outcomes))

    @property
    def subject(self) -> str:
        return f"Daily Rundown - {self.date_label}"


class DailyRundownAggregator:
    """Aggregates calendar, search and query results for the daily rundown.

    Combines:
    - Today's calendar events (with attendees)
    - Threads with action items or decisions since yesterday
    - An AI-written digest of recent communications
    """

    def __init__(
        self,
        attrove: AttroveAdapter,
        log: Any = None,
        timeout: float | None = None,
    ) -> None:
        self.attrove = attrove
        self.log = log or logger
        self.timeout = timeout

    async def __aenter__(self) -> "DailyRundownAggregator":
        await self.attrove.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.attrove.disconnect()

    def queries(self, today: date) -> list[RemoteQuery[Any]]:
        """The three independent calls behind a rundown, in section order."""
        yesterday = today - timedelta(days=1)
        return [
            RemoteQuery(
                "fetch calendar events",
                lambda: self.attrove.list_events(today, today, expand=["attendees"]),
            ),
            RemoteQuery(
                "search recent threads",
                lambda: self.attrove.search(
                    SEARCH_QUERY, after_date=yesterday, include_body_text=True
                ),
            ),
            RemoteQuery(
                "generate AI digest",
                lambda: self.attrove.query(DIGEST_PROMPT, include_sources=True),
            ),
        ]

    async def get_rundown(self, today: date | None = None) -> RundownResult:
        """Fetch every source concurrently and assemble the rundown.

        Returns:
            The report; ``failure_count`` says how many sources were missing.

        Raises:
            TotalFailureError: No source could be fetched.
        """
        today = today or date.today()
        date_label = format_date_label(today)

        outcomes = await settle_all(self.queries(today), log=self.log, timeout=self.timeout)
        if all_failed(outcomes):
            raise TotalFailureError(failures(outcomes))

        events, search, digest = outcomes
        report = assemble_rundown(date_label, events, search, digest, log=self.log)
        self.log.info("Assembled rundown", date=today.isoformat(), failed=len(failures(outcomes)))
        return RundownResult(date_label=date_label, report=report, outcomes=outcomes)


# Convenience function
async def get_daily_rundown(
    settings: AttroveSettings,
    today: date | None = None,
) -> RundownResult:
    """Build today's rundown with the configured credentials."""
    attrove = AttroveAdapter.from_settings(settings, prefer="secret_key")
    async with DailyRundownAggregator(attrove, timeout=settings.query_timeout) as agg:
        return await agg.get_rundown(today)
