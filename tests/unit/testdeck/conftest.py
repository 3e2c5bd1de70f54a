"""Fixtures wiring the in-memory collaborators from fakes.py."""
import os

import pytest

from fakes import FakeEngine, FakeReporter
from testdeck.utils.console import StdinLines


@pytest.fixture
def call_log():
    return []


@pytest.fixture
def engine(call_log):
    return FakeEngine(log=call_log)


@pytest.fixture
def reporter(call_log):
    return FakeReporter(log=call_log)


@pytest.fixture
def pipe_stdin():
    """A StdinLines reading from a pipe, plus a function that types a line into it."""
    read_fd, write_fd = os.pipe()

    def type_line(text: str = ""):
        os.write(write_fd, (text + "\n").encode())

    yield StdinLines(fd=read_fd), type_line
    os.close(read_fd)
    os.close(write_fd)


@pytest.fixture
def printed_lines():
    return []
