"""Tests for concurrent fetching with partial failures."""

import asyncio

import pytest
from structlog.testing import capture_logs

from commsdigest.aggregators.fetch import (
    Failed,
    QueryTimeoutError,
    RemoteQuery,
    Succeeded,
    all_failed,
    describe_failure,
    failures,
    settle_all,
)
from commsdigest.logging_config import configure_logging


async def _value(value, delay=0.0):
    await asyncio.sleep(delay)
    return value


async def _boom(message="boom"):
    raise RuntimeError(message)


async def test_middle_failure_keeps_order_and_length():
    queries = [
        RemoteQuery("first", lambda: _value(1)),
        RemoteQuery("second", lambda: _boom()),
        RemoteQuery("third", lambda: _value(3)),
    ]

    outcomes = await settle_all(queries)

    assert len(outcomes) == 3
    assert isinstance(outcomes[0], Succeeded) and outcomes[0].value == 1
    assert isinstance(outcomes[1], Failed) and str(outcomes[1].reason) == "boom"
    assert isinstance(outcomes[2], Succeeded) and outcomes[2].value == 3
    assert [o.label for o in outcomes] == ["first", "second", "third"]
    assert not all_failed(outcomes)


async def test_all_failing_is_total_failure():
    queries = [RemoteQuery(f"q{i}", lambda: _boom()) for i in range(3)]

    outcomes = await settle_all(queries)

    assert len(outcomes) == 3
    assert all_failed(outcomes)
    assert len(failures(outcomes)) == 3


async def test_order_follows_input_not_completion():
    queries = [
        RemoteQuery("slow", lambda: _value("slow", 0.05)),
        RemoteQuery("fast", lambda: _value("fast")),
    ]

    outcomes = await settle_all(queries)

    assert [o.value for o in outcomes] == ["slow", "fast"]


async def test_all_queries_start_before_any_settles():
    started = []
    release = asyncio.Event()

    async def tracked(name):
        started.append(name)
        await release.wait()
        return name

    async def fail_after_start():
        started.append("failing")
        raise RuntimeError("nope")

    async def release_soon():
        await asyncio.sleep(0)
        release.set()

    queries = [
        RemoteQuery("failing", fail_after_start),
        RemoteQuery("a", lambda: tracked("a")),
        RemoteQuery("b", lambda: tracked("b")),
    ]

    releaser = asyncio.create_task(release_soon())
    outcomes = await settle_all(queries)
    await releaser

    assert sorted(started) == ["a", "b", "failing"]
    assert [o.ok for o in outcomes] == [False, True, True]


async def test_each_factory_called_once():
    calls = []

    async def counted():
        calls.append(1)
        return "ok"

    await settle_all([RemoteQuery("once", counted)])

    assert calls == [1]


async def test_failures_are_logged_in_input_order():
    queries = [
        RemoteQuery("fetch calendar events", lambda: _boom("calendar down")),
        RemoteQuery("search recent threads", lambda: _value([])),
        RemoteQuery("generate AI digest", lambda: _boom("digest down")),
    ]

    with capture_logs() as logs:
        await settle_all(queries)

    assert [(e["query"], e["error"]) for e in logs] == [
        ("fetch calendar events", "calendar down"),
        ("generate AI digest", "digest down"),
    ]
    assert all(e["log_level"] == "error" for e in logs)


async def test_timeout_is_classified_separately():
    queries = [
        RemoteQuery("hangs", lambda: _value("late", 1.0)),
        RemoteQuery("rejects", lambda: _boom()),
    ]

    outcomes = await settle_all(queries, timeout=0.01)

    assert outcomes[0].timed_out
    assert isinstance(outcomes[0].reason, QueryTimeoutError)
    assert not outcomes[1].timed_out


def test_empty_batch_is_not_total_failure():
    assert not all_failed([])


@pytest.mark.parametrize(
    "reason, expected",
    [(RuntimeError("bad gateway"), "bad gateway"), (RuntimeError(), "RuntimeError")],
)
def test_describe_failure(reason, expected):
    assert describe_failure(reason) == expected


async def test_failures_still_shown_at_error_log_level(capsys):
    configure_logging("ERROR")

    await settle_all([RemoteQuery("generate AI digest", lambda: _boom("digest down"))])

    err = capsys.readouterr().err
    assert "Query failed" in err
    assert "digest down" in err
