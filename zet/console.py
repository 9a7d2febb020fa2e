"""
Zet console (user-facing output helpers and logging setup)

- info(message): green line on stdout.
- error(message): red line on stderr.
- warning(message): yellow line on stderr.
- line(message): plain line on stdout.

Everything goes through rich consoles, which honour NO_COLOR and drop styling
when the stream is not a terminal. Messages are printed verbatim: no markup
and no highlighting are applied to user text.

configure_logging(level) routes the package loggers ("zet.*") to stderr
through rich's RichHandler; the bootstrap calls it when ZET_DEBUG is set.
"""
import logging

from rich.console import Console
from rich.logging import RichHandler

from .utils import palette

stdout = Console()
stderr = Console(stderr=True)


def _emit(console, message, style, /):
    styles = palette({
        "info": "green",
        "error": "red",
        "warning": "yellow",
        "line": "",
    })
    console.print(str(message), style=styles[style], markup=False, highlight=False, emoji=False, soft_wrap=True)


def info(message=""):
    _emit(stdout, message, "info")


def error(message=""):
    _emit(stderr, message, "error")


def warning(message=""):
    _emit(stderr, message, "warning")


def line(message=""):
    _emit(stdout, message, "line")


def configure_logging(level=logging.DEBUG):
    """
    Send "zet" log records to stderr through a RichHandler.

    Calling it again replaces the handler installed by a previous call
    instead of stacking a second one.
    """
    logger = logging.getLogger("zet")
    for handler in logger.handlers[:]:
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=stderr, show_path=False, markup=False, rich_tracebacks=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = (
    "info",
    "error",
    "warning",
    "line",
    "configure_logging",
)
