"""Logging setup for applications embedding defi-intel."""

import logging

from rich.console import Console
from rich.logging import RichHandler

NOISY_LOGGERS = ("web3", "httpx", "httpcore", "urllib3")


def setup_logging(level: str | int = "INFO", *, console: Console | None = None) -> None:
    """
    Route logging through a rich handler.

    Third-party HTTP/RPC loggers are held at WARNING unless ``level`` is DEBUG.

    Parameters
    ----------
    level : str | int
        Root log level name or number
    console : Console | None
        Console to write to (defaults to stderr)

    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    logging.basicConfig(
        level=level,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )

    noisy_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(noisy_level)
