"""Normalization of list fields that arrive in inconsistent shapes.

Attendee and participant fields may come back from the API as a list, as the
JSON-encoded text of a list, or not at all. Everything here degrades to an
empty list with a warning instead of raising.
"""

import json
from typing import Any

import structlog
from pydantic import ValidationError

from commsdigest.models import Attendee

logger = structlog.get_logger()

# Raw values are cut to this many characters in warnings
PREVIEW_CHARS = 100


def to_list(value: Any, log: Any = None) -> list[Any]:
    """Coerce a list, a JSON-encoded list, or nothing into a list.

    A list is returned as-is, so normalizing twice is a no-op.

    Args:
        value: Field value as delivered by the API
        log: Diagnostic sink (defaults to this module's logger)

    Returns:
        The list, or an empty list when the value cannot be read as one.
    """
    log = log or logger

    if isinstance(value, list):
        return value

    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except (ValueError, RecursionError) as e:
            log.warning(
                "Failed to parse array field",
                raw_value=value[:PREVIEW_CHARS],
                error=str(e),
            )
            return []

        if not isinstance(parsed, list):
            log.warning(
                "Expected array field",
                got=type(parsed).__name__,
                raw_value=value[:PREVIEW_CHARS],
            )
            return []
        return parsed

    return []


def to_attendees(value: Any, log: Any = None) -> list[Attendee]:
    """Normalize an attendee field into Attendee records.

    Entries that are not objects are skipped with a warning.
    """
    log = log or logger

    attendees = []
    for item in to_list(value, log=log):
        if isinstance(item, Attendee):
            attendees.append(item)
        elif isinstance(item, dict):
            try:
                attendees.append(Attendee.model_validate(item))
            except ValidationError as e:
                log.warning("Skipping malformed attendee", error=str(e))
        else:
            log.warning("Skipping malformed attendee", got=type(item).__name__)
    return attendees


def attendee_names(attendees: list[Attendee], limit: int | None = None) -> list[str]:
    """Display names (name, else email) of attendees that have one."""
    names = [a.display_name for a in attendees if a.display_name]
    return names[:limit] if limit is not None else names
