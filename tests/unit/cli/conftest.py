"""CLI test fixtures."""

import io

import pytest
from rich.console import Console as RichConsole

from simcal.cli.commands import BaseCommand
from simcal.cli.console import Console


class RecordingConsole(Console):
    """Console writing to in-memory buffers."""

    def __init__(self):
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        super().__init__(
            stdout=RichConsole(file=self.stdout, width=120, color_system=None),
            stderr=RichConsole(file=self.stderr, width=120, color_system=None),
        )

    @property
    def output(self) -> str:
        return self.stdout.getvalue()

    @property
    def errors(self) -> str:
        return self.stderr.getvalue()


@pytest.fixture
def recording_console():
    """Route command output to a RecordingConsole for the duration of a test."""
    previous = BaseCommand._console
    console = RecordingConsole()
    BaseCommand.set_console(console)
    yield console
    BaseCommand.set_console(previous)
