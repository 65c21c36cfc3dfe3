"""Console helpers used across the codebase."""
import contextlib
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.status import Status

CONSOLE = Console(stderr=True)


def log(message: str):
    """Prints a message with contextual information (i.e. timestamp).

    Arguments:
        message: informational message to print.
    """
    CONSOLE.log(escape(message))


def success(message: str):
    """Logs a message about an operation completed successfully."""
    CONSOLE.log(f"[green]{escape(message)}[/]")


def warning(message: str):
    """Logs a message about something that needs attention."""
    CONSOLE.log(f"[yellow]{escape(message)}[/]")


def error(message: str):
    """Logs a message about a failed operation."""
    CONSOLE.log(f"[bold red]ERROR[/] [red]{escape(message)}[/]")


_WAITING: List[str] = []
_SPINNER: Optional[Status] = None


@contextlib.contextmanager
def print_waiting(message: str, sep: str = " → "):
    """Shows a spinner while the context runs.

    Nested calls share one spinner, whose text is every pending message
    joined with `sep`. The text goes back to the outer messages when an
    inner context exits.
    """
    global _SPINNER  # pylint: disable=global-statement

    _WAITING.append(message)

    try:
        if _SPINNER is not None:
            _SPINNER.update(escape(sep.join(_WAITING)))
            yield
            return

        with CONSOLE.status(escape(message)) as spinner:
            _SPINNER = spinner

            try:
                yield

            finally:
                _SPINNER = None

    finally:
        _WAITING.pop()

        if _SPINNER is not None:
            _SPINNER.update(escape(sep.join(_WAITING)))
