"""Concurrent fetching that tolerates individual failures.

Every query is started before any result is looked at, all of them are
awaited, and each settles into a ``Succeeded`` or ``Failed`` outcome in the
order the queries were given.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True)
class RemoteQuery(Generic[T]):
    """A labelled remote call. ``factory`` is invoked exactly once."""

    label: str
    factory: Callable[[], Awaitable[T]]


@dataclass(frozen=True)
class Succeeded(Generic[T]):
    label: str
    value: T
    ok = True


@dataclass(frozen=True)
class Failed:
    label: str
    reason: BaseException
    ok = False

    @property
    def timed_out(self) -> bool:
        return isinstance(self.reason, QueryTimeoutError)


Outcome = Succeeded[Any] | Failed


class QueryTimeoutError(Exception):
    """A query did not settle within its time budget."""

    def __init__(self, label: str, timeout: float) -> None:
        self.label = label
        self.timeout = timeout
        super().__init__(f"timed out after {timeout:g}s")


class TotalFailureError(Exception):
    """Every query of a batch failed."""

    def __init__(self, outcomes: Sequence[Failed]) -> None:
        self.outcomes = list(outcomes)
        super().__init__("All API calls failed. Check your credentials and try again.")


def describe_failure(reason: BaseException) -> str:
    """Human-readable failure reason: the message, else the exception type."""
    return str(reason) or type(reason).__name__


async def _settle(query: RemoteQuery[Any], timeout: float | None) -> Outcome:
    try:
        if timeout is None:
            value = await query.factory()
        else:
            try:
                value = await asyncio.wait_for(query.factory(), timeout)
            except asyncio.TimeoutError:
                return Failed(query.label, QueryTimeoutError(query.label, timeout))
    except Exception as e:
        return Failed(query.label, e)
    return Succeeded(query.label, value)


async def settle_all(
    queries: Sequence[RemoteQuery[Any]],
    log: Any = None,
    timeout: float | None = None,
) -> list[Outcome]:
    """Run queries concurrently and settle every one of them.

    Args:
        queries: Labelled calls to run
        log: Diagnostic sink; one error per failed query, in input order
        timeout: Per-query limit in seconds (None waits indefinitely)

    Returns:
        One outcome per query, in the same order as ``queries``.
    """
    log = log or logger

    outcomes = list(await asyncio.gather(*(_settle(q, timeout) for q in queries)))

    for outcome in outcomes:
        if isinstance(outcome, Failed):
            log.error(
                "Query failed",
                query=outcome.label,
                error=describe_failure(outcome.reason),
                timed_out=outcome.timed_out,
            )

    return outcomes


def all_failed(outcomes: Sequence[Outcome]) -> bool:
    """True when there was at least one outcome and none succeeded."""
    return bool(outcomes) and all(not o.ok for o in outcomes)


def failures(outcomes: Sequence[Outcome]) -> list[Failed]:
    return [o for o in outcomes if isinstance(o, Failed)]
