"""Tests for logging setup."""

import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from defi_intel.logger import NOISY_LOGGERS, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    level = root.level
    noisy = {name: logging.getLogger(name).level for name in NOISY_LOGGERS}
    yield
    for handler in root.handlers[:]:
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    root.setLevel(level)
    for name, noisy_level in noisy.items():
        logging.getLogger(name).setLevel(noisy_level)


def test_setup_logging_installs_rich_handler():
    """Test records are rendered by rich and third-party loggers are quieted."""
    buffer = io.StringIO()
    setup_logging("info", console=Console(file=buffer, width=200))

    root = logging.getLogger()
    assert root.level == logging.INFO
    assert [type(handler) for handler in root.handlers] == [RichHandler]
    assert all(logging.getLogger(name).level == logging.WARNING for name in NOISY_LOGGERS)

    logging.getLogger("defi_intel.test").info("scan finished")
    assert "scan finished" in buffer.getvalue()


def test_debug_level_unmutes_third_party_loggers():
    setup_logging(logging.DEBUG, console=Console(file=io.StringIO()))

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG


def test_unknown_level_name_defaults_to_info():
    setup_logging("chatty", console=Console(file=io.StringIO()))

    assert logging.getLogger().level == logging.INFO
