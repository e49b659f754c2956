"""Pytest configuration and fixtures for oscmds tests."""

import io
import sys
import tempfile
from pathlib import Path

import pytest

from oscmds.core.log import ConsoleSink, setup_logger
from oscmds.core.runner import Runner


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    """Console-only logger at debug level for the whole session."""
    test_log_root = Path(tempfile.gettempdir()) / "oscmds-tests"
    setup_logger(
        log_root=test_log_root,
        run_name="test",
        console=ConsoleSink(level="debug"),
    )


@pytest.fixture(autouse=True)
def plain_argv(monkeypatch):
    """Keep pytest's own arguments away from --include parsing."""
    monkeypatch.setattr(sys, "argv", ["oscmds"])


@pytest.fixture
def sink():
    """In-memory command log."""
    return io.StringIO()


class RefusingFirstWrite(io.StringIO):
    """Sink that fails the first write and accepts the rest."""

    def __init__(self):
        super().__init__()
        self.refused = False

    def write(self, s):
        if not self.refused:
            self.refused = True
            raise OSError("No space left on device")
        return super().write(s)


@pytest.fixture
def refusing_sink():
    """Command log that refuses the prompt line."""
    return RefusingFirstWrite()


@pytest.fixture
def runner():
    """Runner with default settings (bash, no redaction rules)."""
    return Runner()
