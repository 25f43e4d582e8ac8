"""Aggregators that combine Attrove sources into reports."""

from commsdigest.aggregators.correlate import find_related
from commsdigest.aggregators.daily import (
    DailyRundownAggregator,
    RundownResult,
    assemble_rundown,
    get_daily_rundown,
)
from commsdigest.aggregators.fetch import (
    Failed,
    RemoteQuery,
    Succeeded,
    TotalFailureError,
    all_failed,
    settle_all,
)
from commsdigest.aggregators.meeting_prep import MeetingBrief, MeetingPrepAggregator, PrepFailure
from commsdigest.aggregators.normalize import to_attendees, to_list
from commsdigest.aggregators.search import ask

__all__ = [
    "DailyRundownAggregator",
    "MeetingPrepAggregator",
    "MeetingBrief",
    "PrepFailure",
    "RundownResult",
    "RemoteQuery",
    "Succeeded",
    "Failed",
    "TotalFailureError",
    "all_failed",
    "settle_all",
    "assemble_rundown",
    "find_related",
    "to_list",
    "to_attendees",
    "ask",
    "get_daily_rundown",
]
