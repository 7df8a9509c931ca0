import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from utils.config import Settings


class CenteredFormatter(logging.Formatter):
    longest_name_length = 14  # grows with the longest logger name seen

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )

        width = CenteredFormatter.longest_name_length
        record.name = record.name.center(width)
        return super().format(record)


_console: Console | None = None


def _log_console() -> Console | None:
    """
    The TUI owns the terminal, so Settings.log_file lets the log go to a file.
    Every logger shares one console on that file.
    None means RichHandler's default stderr console.
    """
    global _console
    log_file = Settings.from_env().log_file
    if not log_file:
        return None
    if _console is None:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        _console = Console(file=open(log_file, "a", encoding="utf-8"), width=120)
    return _console


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.
    """
    if name is None:
        name = "shopfront"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if os.getenv("DEBUG") else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        formatter = CenteredFormatter("[%(name)s]  %(message)s")

        handler = RichHandler(
            console=_log_console(),
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized.")

    return logger
