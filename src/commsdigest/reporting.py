"""Report output, delivery and error reporting for the command line."""

import sys
from enum import IntEnum

import structlog
from rich.console import Console

from commsdigest.adapters.base import (
    AdapterError,
    ApiError,
    AuthenticationError,
    RateLimitError,
)
from commsdigest.adapters.resend import ResendAdapter
from commsdigest.aggregators.fetch import TotalFailureError
from commsdigest.config.settings import ConfigurationError

logger = structlog.get_logger()

# Used when a rate-limited response carries no Retry-After
DEFAULT_RETRY_AFTER = 60


class ExitCode(IntEnum):
    """Process exit statuses."""

    OK = 0
    FATAL = 1
    PARTIAL = 2


class ReportEmitter:
    """Prints reports to stdout and optionally delivers them by email.

    Reports are printed verbatim: no console markup, highlighting or wrapping.
    """

    def __init__(self, console: Console | None = None, err_console: Console | None = None) -> None:
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)

    def emit(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)

    def error(self, text: str) -> None:
        self.err_console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)

    async def deliver(
        self,
        delivery: ResendAdapter,
        sender: str,
        to: str,
        subject: str,
        text: str,
    ) -> bool:
        """Send an already-printed report.

        A failure is reported on stderr; the printed report is left as is.

        Returns:
            True if the report was accepted for delivery.
        """
        try:
            async with delivery:
                await delivery.send(sender=sender, to=to, subject=subject, text=text)
        except AdapterError as e:
            self.error(f"\nFailed to send email: {e.message}")
            self.error("The digest was printed above. Check your RESEND_API_KEY and SEND_TO.")
            return False

        self.emit(f"\nSent to {to}")
        return True


def report_configuration_error(emitter: ReportEmitter, error: ConfigurationError, note: str = "") -> None:
    """Explain which variables are missing and where to set them."""
    emitter.error(str(error))
    emitter.error("Copy .env.example to .env and add your credentials.")
    if note:
        emitter.error(note)


def report_error(emitter: ReportEmitter, error: BaseException, credential: str) -> None:
    """Print an error with a remediation hint matched to its type.

    Args:
        emitter: Where to print
        error: The exception that ended the run
        credential: Variable to check when authentication fails
    """
    if isinstance(error, AuthenticationError):
        emitter.error(f"Authentication Error: {error.message}")
        emitter.error(f"  Check your {credential}")
    elif isinstance(error, RateLimitError):
        emitter.error(f"Rate Limited: {error.message}")
        wait = DEFAULT_RETRY_AFTER if error.retry_after is None else error.retry_after
        emitter.error(f"  Please wait {wait} seconds before retrying")
    elif isinstance(error, ApiError):
        emitter.error(f"API Error [{error.code}]: {error.message}")
        if error.status:
            emitter.error(f"  HTTP Status: {error.status}")
    elif isinstance(error, TotalFailureError):
        emitter.error(f"\n{error}")
    else:
        emitter.error(f"Error: {error}")

    logger.debug("Run failed", error_type=type(error).__name__)


def wait_for_enter(prompt: str = "", console: Console | None = None) -> None:
    """Block until the operator presses Enter; returns at once without a TTY."""
    if not sys.stdin.isatty():
        return
    (console or Console()).input(prompt, markup=False)
