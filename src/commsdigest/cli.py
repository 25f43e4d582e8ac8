"""commsdigest Command Line Interface."""

import asyncio
from collections.abc import Coroutine
from typing import Any

import typer

from commsdigest.adapters.attrove import AttroveAdapter
from commsdigest.adapters.resend import ResendAdapter
from commsdigest.aggregators.daily import get_daily_rundown
from commsdigest.aggregators.meeting_prep import MeetingPrepAggregator, PrepFailure
from commsdigest.config.settings import ConfigurationError, Settings, load_settings
from commsdigest.logging_config import configure_logging
from commsdigest.reporting import (
    ExitCode,
    ReportEmitter,
    report_configuration_error,
    report_error,
    wait_for_enter,
)

app = typer.Typer(
    name="commsdigest",
    help="Digests, meeting prep and answers from your email, Slack and calendar",
    no_args_is_help=True,
)

SECRET_KEY_NOTE = (
    "Note: ATTROVE_SECRET_KEY is the sk_ per-user key, not your partner client_id/client_secret."
)
USER_TOKEN_NOTE = "Note: ATTROVE_USER_TOKEN is the sk_ user token, not your attrove_ API key."


def _run(coro: Coroutine[Any, Any, ExitCode], emitter: ReportEmitter, credential: str) -> None:
    """Run a command coroutine and exit with its status.

    Errors that escape the command are reported with a remediation hint.
    """
    try:
        code = asyncio.run(coro)
    except Exception as e:
        report_error(emitter, e, credential)
        raise typer.Exit(ExitCode.FATAL) from e
    raise typer.Exit(code)


def _load_settings(emitter: ReportEmitter) -> Settings:
    """Read settings, exiting with a configuration error on bad values."""
    try:
        return load_settings()
    except ConfigurationError as e:
        report_configuration_error(emitter, e)
        raise typer.Exit(ExitCode.FATAL) from e


@app.callback()
def main(
    log_level: str = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING or ERROR (default: LOG_LEVEL)"
    ),
):
    """Configure logging before any command runs."""
    configure_logging(log_level or _load_settings(ReportEmitter()).log_level)


@app.command()
def rundown(
    send: bool = typer.Option(False, "--send", help="Also email the rundown via Resend"),
):
    """Print today's rundown: calendar, recent threads and an AI digest."""
    emitter = ReportEmitter()
    settings = _load_settings(emitter)

    try:
        settings.attrove.require_user(prefer="secret_key")
    except ConfigurationError as e:
        report_configuration_error(emitter, e, SECRET_KEY_NOTE)
        raise typer.Exit(ExitCode.FATAL)

    async def build() -> ExitCode:
        result = await get_daily_rundown(settings.attrove)
        emitter.emit(result.report)

        if send:
            try:
                settings.resend.require()
            except ConfigurationError:
                emitter.error("\nSet RESEND_API_KEY and SEND_TO in .env to send via email.")
                return ExitCode.FATAL

            delivered = await emitter.deliver(
                ResendAdapter.from_settings(settings.resend),
                sender=settings.resend.from_address,
                to=settings.resend.send_to,
                subject=result.subject,
                text=result.report,
            )
            if not delivered:
                return ExitCode.FATAL

        return ExitCode.PARTIAL if result.failure_count else ExitCode.OK

    _run(build(), emitter, credential="ATTROVE_SECRET_KEY")


@app.command()
def prep(
    pause: bool = typer.Option(
        True, "--pause/--no-pause", help="Wait for Enter before preparing briefs"
    ),
):
    """Prepare a brief for each meeting today and tomorrow."""
    emitter = ReportEmitter()
    settings = _load_settings(emitter)

    try:
        settings.attrove.require_user()
    except ConfigurationError as e:
        report_configuration_error(emitter, e, USER_TOKEN_NOTE)
        raise typer.Exit(ExitCode.FATAL)

    async def prepare() -> ExitCode:
        failures = 0
        async with MeetingPrepAggregator(AttroveAdapter.from_settings(settings.attrove)) as agg:
            events = await agg.list_upcoming()
            if not events:
                emitter.emit("No upcoming meetings in the next 24 hours.")
                return ExitCode.OK

            emitter.emit(f"Found {len(events)} upcoming meeting(s).\n")
            if pause:
                wait_for_enter("Press Enter to prepare briefs...")

            async for item in agg.prepare_all(events):
                if isinstance(item, PrepFailure):
                    failures += 1
                    emitter.error(item.render())
                    emitter.emit("")
                else:
                    emitter.emit(item.render())

        if failures:
            emitter.error(f"\n{failures} meeting(s) could not be prepped. See errors above.")
            return ExitCode.PARTIAL
        return ExitCode.OK

    _run(prepare(), emitter, credential="ATTROVE_USER_TOKEN")


@app.command()
def ask(
    query: list[str] = typer.Argument(
        None, help="Question to ask (default: important updates this week)"
    ),
):
    """Ask your comms anything."""
    from commsdigest.aggregators.search import ask as ask_question

    emitter = ReportEmitter()
    settings = _load_settings(emitter)

    try:
        settings.attrove.require_user()
    except ConfigurationError as e:
        report_configuration_error(emitter, e, USER_TOKEN_NOTE)
        raise typer.Exit(ExitCode.FATAL)

    async def answer() -> ExitCode:
        async with AttroveAdapter.from_settings(settings.attrove) as attrove:
            emitter.emit(await ask_question(attrove, " ".join(query or [])))
        return ExitCode.OK

    _run(answer(), emitter, credential="ATTROVE_USER_TOKEN")


@app.command()
def quickstart(
    demo: bool = typer.Option(False, "--demo", help="Show sample output without credentials"),
):
    """Provision a user, connect an integration and run a first query."""
    from commsdigest.quickstart import run_demo, run_quickstart

    emitter = ReportEmitter()
    settings = _load_settings(emitter)

    if demo or settings.demo_mode:
        asyncio.run(run_demo(emitter))
        return

    try:
        settings.attrove.require_partner()
    except ConfigurationError as e:
        report_configuration_error(
            emitter,
            e,
            "Get your credentials at: https://connect.attrove.com/settings/api-keys\n"
            "Or run with --demo to see example output.",
        )
        raise typer.Exit(ExitCode.FATAL)

    async def walkthrough() -> ExitCode:
        await run_quickstart(settings.attrove, emitter, wait=wait_for_enter)
        return ExitCode.OK

    _run(walkthrough(), emitter, credential="ATTROVE_CLIENT_ID and ATTROVE_CLIENT_SECRET")


@app.command()
def version():
    """Show commsdigest version."""
    from commsdigest import __version__

    ReportEmitter().emit(f"commsdigest v{__version__}")


if __name__ == "__main__":
    app()
