# testdeck/base/suite.py
# Suite data model: tests, loaded suites, and lazily-loaded suite descriptors.

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Iterable, Mapping, Optional, Tuple

from testdeck.base.platform import TestPlatform

if TYPE_CHECKING:
    from testdeck.base.contracts import Environment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Test:
    name: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    __test__ = False


@dataclass(frozen=True)
class SuiteMetadata:
    """Options the loader applies to every suite it produces."""

    # Paused suites must never time out while the user sits in a debugger.
    no_timeout: bool = False
    verbose_trace: bool = False


@dataclass(frozen=True)
class Suite:
    """A loaded group of tests plus the platform context they run in."""

    path: Optional[str] = None
    tests: Tuple[Test, ...] = ()
    platform: Optional[TestPlatform] = None
    environment: Optional["Environment"] = None

    def change(self, tests: Iterable[Test]) -> "Suite":
        return replace(self, tests=tuple(tests))

    def filter(self, predicate: Callable[[str], bool]) -> "Suite":
        return self.change(test for test in self.tests if predicate(test.name))


SuiteLoader = Callable[[], Awaitable[Optional[Suite]]]


class _LoadMemo:
    """Runs a suite loader at most once and remembers its outcome."""

    def __init__(self, loader: SuiteLoader):
        self._loader = loader
        self._task: Optional[asyncio.Task] = None

    def run(self) -> "asyncio.Task[Optional[Suite]]":
        if self._task is None:
            self._task = asyncio.ensure_future(self._loader())
        return self._task


class LoadSuite:
    """
    A named, lazily-evaluated unit of work that produces a Suite.

    Forcing a LoadSuite runs its loader once; later calls observe the same
    result. A failed load is reported through `load()` (which re-raises) and
    `load_error`; `suite()` returns None instead of raising so that one bad
    input never aborts the consumer of a suite stream.
    """

    def __init__(
        self,
        name: str,
        loader: SuiteLoader,
        platform: Optional[TestPlatform] = None,
    ):
        self.name = name
        self.platform = platform
        self._memo = _LoadMemo(loader)

    @classmethod
    def for_error(cls, name: str, error: BaseException, platform: Optional[TestPlatform] = None) -> "LoadSuite":
        async def _fail() -> Optional[Suite]:
            raise error

        return cls(name, _fail, platform=platform)

    @classmethod
    def for_suite(cls, suite: Suite, name: Optional[str] = None) -> "LoadSuite":
        async def _loaded() -> Optional[Suite]:
            return suite

        return cls(name or f"loading {suite.path}", _loaded, platform=suite.platform)

    async def load(self) -> Optional[Suite]:
        """Force the descriptor, raising the load failure if there was one."""
        return await asyncio.shield(self._memo.run())

    async def suite(self) -> Optional[Suite]:
        """Force the descriptor; None if loading failed or produced nothing."""
        try:
            return await self.load()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.debug(f"[LoadSuite] {self.name} failed to load: {exc}")
            return None

    @property
    def is_loaded(self) -> bool:
        task = self._memo._task
        return task is not None and task.done()

    @property
    def load_error(self) -> Optional[BaseException]:
        task = self._memo._task
        if task is None or not task.done() or task.cancelled():
            return None
        return task.exception()

    def change_suite(self, change: Callable[[Suite], Optional[Suite]]) -> "LoadSuite":
        """
        Return a new descriptor whose forced suite is `change(suite)`.

        The original descriptor is untouched and both share one load.
        """
        parent = self

        async def _changed() -> Optional[Suite]:
            suite = await parent.load()
            if suite is None:
                return None
            return change(suite)

        return LoadSuite(self.name, _changed, platform=self.platform)

    def __repr__(self) -> str:
        return f"LoadSuite({self.name!r})"
