"""Correlation of current meetings with past ones through shared attendees."""

from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

import structlog

from commsdigest.aggregators.normalize import to_attendees

logger = structlog.get_logger()

T = TypeVar("T")

# Related meetings shown per brief
RELATED_MEETINGS_SHOWN = 3


def attendee_emails(records: Iterable[Any], log: Any = None) -> set[str]:
    """Non-empty attendee emails across records with an ``attendees`` field."""
    emails = set()
    for record in records:
        for attendee in to_attendees(getattr(record, "attendees", None), log=log):
            if attendee.email:
                emails.add(attendee.email)
    return emails


def find_related(
    current: Iterable[Any],
    historical: Sequence[T],
    log: Any = None,
) -> list[T]:
    """Historical records sharing at least one attendee email with current ones.

    Emails are compared exactly (case-sensitive); names are ignored. Records
    without an emailed attendee never match. The result keeps the order of
    ``historical`` and is not capped; callers trim it for display.

    Args:
        current: Records being prepared for, e.g. upcoming events
        historical: Candidate records, e.g. past meetings
        log: Diagnostic sink for malformed attendee fields
    """
    log = log or logger

    wanted = attendee_emails(current, log=log)
    if not wanted:
        return []

    related = []
    for record in historical:
        if attendee_emails([record], log=log) & wanted:
            related.append(record)

    log.debug("Correlated records", candidates=len(historical), related=len(related))
    return related
