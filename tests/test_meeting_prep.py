"""Tests for meeting prep briefs."""

from datetime import date

from structlog.testing import capture_logs

from commsdigest.aggregators.meeting_prep import (
    BRIEF_RULE,
    MeetingBrief,
    MeetingPrepAggregator,
    PrepFailure,
    build_prompt,
)
from commsdigest.models import QueryResponse


async def test_list_upcoming_covers_today_and_tomorrow(fake_attrove):
    await MeetingPrepAggregator(fake_attrove).list_upcoming(date(2026, 1, 5))

    fake_attrove.list_events.assert_awaited_once_with(
        date(2026, 1, 5), date(2026, 1, 6), expand=["attendees", "description"]
    )


async def test_brief_includes_related_meetings(fake_attrove, make_event, make_meeting):
    event = make_event(
        "Roadmap",
        attendees='[{"name": "Ana", "email": "ana@example.com"}, {"email": "bo@example.com"}]',
    )
    related = make_meeting("Kickoff", ["ana@example.com"], short_summary="Agreed on scope.")
    unrelated = make_meeting("Hiring", ["zed@example.com"])
    fake_attrove.list_meetings.return_value = [unrelated, related]
    fake_attrove.query.return_value = QueryResponse(answer="Bring the Q1 numbers.")

    brief = await MeetingPrepAggregator(fake_attrove).prepare_brief(event)

    assert brief.attendee_names == ["Ana", "bo@example.com"]
    assert brief.related == [related]
    assert brief.answer == "Bring the Q1 numbers."
    fake_attrove.list_meetings.assert_awaited_once_with(
        expand=["short_summary", "action_items"], limit=5
    )
    prompt = fake_attrove.query.await_args.args[0]
    assert 'meeting "Roadmap" with Ana, bo@example.com?' in prompt


def test_prompt_without_attendees(make_event):
    prompt = build_prompt(make_event("Deep work"), [])

    assert prompt.startswith('What do I need to know before my meeting "Deep work"?')
    assert "related to this topic" in prompt


def test_render_brief(make_event, make_meeting):
    event = make_event("Roadmap", "2026-01-05T09:00:00", end_time="2026-01-05T09:30:00")
    meetings = [
        make_meeting(f"Sync {i}", ["ana@example.com"], short_summary="Notes." if i == 0 else None)
        for i in range(4)
    ]

    text = MeetingBrief(
        event=event, attendee_names=["Ana"], related=meetings, answer="Be ready."
    ).render()
    lines = text.split("\n")

    assert lines[0] == BRIEF_RULE
    assert "Meeting: Roadmap" in lines
    assert "Time:    09:00 AM - 09:30 AM" in lines
    assert "With:    Ana" in lines
    assert "  - Sync 0 (Jan 2)" in lines
    assert "    Notes." in lines
    assert "  - Sync 3 (Jan 2)" not in lines
    assert lines[lines.index("Prep Brief:") + 1] == "Be ready."


async def test_one_failure_does_not_stop_the_others(fake_attrove, make_event):
    events = [make_event("First"), make_event("Second"), make_event("Third")]
    fake_attrove.query.side_effect = [
        QueryResponse(answer="one"),
        RuntimeError("query failed"),
        QueryResponse(answer="three"),
    ]

    aggregator = MeetingPrepAggregator(fake_attrove)
    results = [item async for item in aggregator.prepare_all(events)]

    assert [type(r) for r in results] == [MeetingBrief, PrepFailure, MeetingBrief]
    assert results[1].render() == 'Failed to prep "Second": query failed'
    assert results[2].answer == "three"


async def test_failed_brief_is_reported_once(fake_attrove, make_event):
    fake_attrove.query.side_effect = RuntimeError("query failed")

    with capture_logs() as logs:
        results = [item async for item in MeetingPrepAggregator(fake_attrove).prepare_all([make_event()])]

    assert isinstance(results[0], PrepFailure)
    assert logs == []
