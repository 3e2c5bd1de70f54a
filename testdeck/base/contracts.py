# testdeck/base/contracts.py
# Capability interfaces for the runner's collaborators.
#
# The runner never depends on concrete loader, engine or reporter classes;
# anything satisfying these protocols can be plugged in (including the
# in-memory fakes used by the test suite).

from __future__ import annotations

from typing import TYPE_CHECKING, AsyncIterator, Optional, Protocol, Sequence, Union

from testdeck.base.suite import LoadSuite, Suite, Test

if TYPE_CHECKING:
    from testdeck.utils.async_helpers import CancelableOperation

RunnerSuite = Union[LoadSuite, Suite]


class Loader(Protocol):
    def load_dir(self, path: str) -> AsyncIterator[LoadSuite]: ...

    def load_file(self, path: str) -> AsyncIterator[LoadSuite]: ...

    async def close(self) -> None: ...


class SuiteSink(Protocol):
    """Engine intake. Closing it tells the engine no more suites are coming."""

    def add(self, suite: RunnerSuite) -> None: ...

    def close(self) -> None: ...


class Engine(Protocol):
    @property
    def suite_sink(self) -> SuiteSink: ...

    @property
    def is_idle(self) -> bool: ...

    @property
    def passed(self) -> Sequence[Test]: ...

    @property
    def failed(self) -> Sequence[Test]: ...

    @property
    def skipped(self) -> Sequence[Test]: ...

    async def run(self) -> Optional[bool]:
        """Run every suite added to the sink; None if closed prematurely."""
        ...

    async def on_idle(self) -> None:
        """Resolve the next time the engine becomes idle."""
        ...

    async def close(self) -> None: ...


class Reporter(Protocol):
    """Progress reporter. pause()/resume() calls must nest."""

    def pause(self) -> None: ...

    def resume(self) -> None: ...


class Environment(Protocol):
    """Per-suite environment provided by the platform that loaded it."""

    def display_pause(self) -> "CancelableOperation":
        """
        Show the platform's pause UI and resolve when the user resumes.

        Platforms without a debugger raise NotImplementedError.
        """
        ...
