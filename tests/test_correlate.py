"""Tests for matching upcoming meetings with past ones."""

import json

from commsdigest.aggregators.correlate import attendee_emails, find_related


def test_disjoint_emails_give_no_matches(make_event, make_meeting):
    event = make_event(attendees=[{"email": "ana@example.com"}])
    past = [make_meeting("Retro", ["bo@example.com"]), make_meeting("1:1", ["cy@example.com"])]

    assert find_related([event], past) == []


def test_single_shared_email_matches_once(make_event, make_meeting):
    event = make_event(attendees=[{"email": "ana@example.com"}, {"email": "bo@example.com"}])
    shared = make_meeting("Planning", ["ana@example.com", "bo@example.com"])
    past = [make_meeting("Retro", ["zed@example.com"]), shared]

    assert find_related([event], past) == [shared]


def test_result_keeps_historical_order(make_event, make_meeting):
    event = make_event(attendees=[{"email": "ana@example.com"}])
    first = make_meeting("First", ["ana@example.com"])
    other = make_meeting("Other", ["bo@example.com"])
    second = make_meeting("Second", ["x@example.com", "ana@example.com"])
    third = make_meeting("Third", ["ana@example.com"])

    assert find_related([event], [first, other, second, third]) == [first, second, third]


def test_names_are_not_used_for_matching(make_event, make_meeting):
    event = make_event(attendees=[{"name": "Ana"}])
    past = [make_meeting("Sync", [], attendees=[{"name": "Ana"}])]

    assert find_related([event], past) == []


def test_email_match_is_case_sensitive(make_event, make_meeting):
    event = make_event(attendees=[{"email": "Ana@Example.com"}])

    assert find_related([event], [make_meeting("Sync", ["ana@example.com"])]) == []


def test_empty_emails_never_match(make_event, make_meeting):
    event = make_event(attendees=[{"name": "Ana", "email": ""}])
    past = [make_meeting("Sync", [""])]

    assert find_related([event], past) == []


def test_json_string_attendees_are_normalized(make_event, make_meeting):
    event = make_event(attendees=json.dumps([{"email": "ana@example.com"}]))
    past = [make_meeting("Sync", [], attendees=json.dumps([{"email": "ana@example.com"}]))]

    assert find_related([event], past) == past


def test_full_subset_is_returned_uncapped(make_event, make_meeting):
    event = make_event(attendees=[{"email": "ana@example.com"}])
    past = [make_meeting(f"Sync {i}", ["ana@example.com"]) for i in range(5)]

    assert len(find_related([event], past)) == 5


def test_attendee_emails_skips_missing(make_event):
    events = [
        make_event(attendees=[{"name": "Ana"}, {"email": "bo@example.com"}]),
        make_event(attendees=None),
    ]

    assert attendee_emails(events) == {"bo@example.com"}
