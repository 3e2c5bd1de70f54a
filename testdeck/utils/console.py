# testdeck/utils/console.py
# Console helpers: cancelable stdin line reads and user-facing text formatting.

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import sys
import textwrap
from collections import deque
from typing import IO, Deque, Optional, Sequence

from testdeck.utils.async_helpers import CancelableOperation

logger = logging.getLogger(__name__)

_BOLD = "\u001b[1m"
_YELLOW = "\u001b[33m"
_NO_COLOR = "\u001b[0m"


class StdinLines:
    """
    Line reader over a file descriptor (stdin by default).

    Reads are driven by the event loop's reader callbacks rather than a
    blocking thread, so a pending `next_line()` can be canceled outright.
    Lines read past the one requested are buffered for the next call.
    """

    def __init__(self, fd: Optional[int] = None, encoding: str = "utf-8"):
        self._fd = sys.stdin.fileno() if fd is None else fd
        self._encoding = encoding
        self._buffer = b""
        self._lines: Deque[str] = deque()
        self._waiter: Optional[asyncio.Future] = None
        self._eof = False

    @property
    def reading(self) -> bool:
        return self._waiter is not None and not self._waiter.done()

    def next_line(self) -> CancelableOperation:
        """
        Return a cancelable operation resolving to the next line, or None at EOF.

        A line that was read but then discarded by a cancel goes back to the
        front of the buffer.
        """
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()

        if self._lines:
            waiter.set_result(self._lines.popleft())
            return CancelableOperation(waiter, on_discard=self._unread)
        if self._eof:
            waiter.set_result(None)
            return CancelableOperation(waiter)
        if self.reading:
            raise RuntimeError("next_line() called while a read is already pending")

        loop.add_reader(self._fd, self._on_readable)
        self._waiter = waiter
        return CancelableOperation(waiter, on_cancel=self._stop_reading, on_discard=self._unread)

    def _unread(self, line: Optional[str]) -> None:
        if line is not None:
            self._lines.appendleft(line)

    def _stop_reading(self) -> None:
        try:
            asyncio.get_running_loop().remove_reader(self._fd)
        except RuntimeError:
            pass
        self._waiter = None

    def _on_readable(self) -> None:
        chunk = os.read(self._fd, 4096)
        if not chunk:
            logger.debug("[Console] stdin reached EOF")
            self._eof = True
            waiter = self._waiter
            self._stop_reading()
            if waiter is not None and not waiter.done():
                waiter.set_result(None)
            return

        self._buffer += chunk
        *complete, self._buffer = self._buffer.split(b"\n")
        for raw in complete:
            self._lines.append(raw.rstrip(b"\r").decode(self._encoding, errors="replace"))

        if self._lines and self._waiter is not None:
            waiter = self._waiter
            self._stop_reading()
            if not waiter.done():
                waiter.set_result(self._lines.popleft())


_stdin_lines: Optional[StdinLines] = None


def stdin_lines() -> StdinLines:
    """Process-wide stdin reader, shared by every pause."""
    global _stdin_lines
    if _stdin_lines is None:
        _stdin_lines = StdinLines()
    return _stdin_lines


def word_wrap(text: str, width: Optional[int] = None) -> str:
    """Wrap each paragraph of `text` to the terminal width."""
    width = width or shutil.get_terminal_size((80, 24)).columns
    return "\n".join(textwrap.fill(line, width=width) if line else line for line in text.split("\n"))


def to_sentence(items: Sequence[str], conjunction: str = "and") -> str:
    """Join `items` as an English list: "a", "a and b", "a, b, and c"."""
    items = list(items)
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} {conjunction} {items[1]}"
    return f"{', '.join(items[:-1])}, {conjunction} {items[-1]}"


def bold(text: str, color: bool) -> str:
    return f"{_BOLD}{text}{_NO_COLOR}" if color else text


def warn(message: str, color: bool = False, stream: Optional[IO[str]] = None) -> None:
    """Print a user-facing warning to stderr."""
    stream = stream or sys.stderr
    header = f"{_YELLOW}Warning:{_NO_COLOR}" if color else "Warning:"
    stream.write(f"{header} {message}\n")
    stream.flush()


__all__ = ["StdinLines", "stdin_lines", "word_wrap", "to_sentence", "bold", "warn"]
