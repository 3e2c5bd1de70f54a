# testdeck/engine/runner.py
# Loads test suites and runs them: the orchestration core of the test runner.

from __future__ import annotations

import asyncio
import logging
import os
from enum import Enum
from typing import Any, AsyncIterator, Callable, Mapping, Optional

from testdeck.base.contracts import Engine, Loader, Reporter
from testdeck.base.suite import LoadSuite, SuiteMetadata
from testdeck.config import RunnerConfig
from testdeck.engine.debug_pause import DebugPauseController, Printer
from testdeck.engine.suite_stream import SuiteStreamBuilder, describe_pattern
from testdeck.errors import AlreadyClosed, ErrorCode, NoTestsMatched, RunnerError
from testdeck.utils.async_helpers import create_safe_task, join_tasks
from testdeck.utils.console import StdinLines

logger = logging.getLogger(__name__)

LoaderFactory = Callable[..., Loader]
EngineFactory = Callable[..., Engine]
ReporterFactory = Callable[..., Reporter]


class RunnerState(Enum):
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class RunOutcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    CLOSED_EARLY = "closed-early"


class Runner:
    """
    Loads and runs tests based on a RunnerConfig.

    The runner owns a loader and an engine and passes suites from one to the
    other while a reporter prints progress. `run()` returns whether the tests
    passed; `close()` stops any further suites from running and may be called
    at any time, from any number of tasks.
    """

    def __init__(
        self,
        config: RunnerConfig,
        loader: Loader,
        engine: Engine,
        reporter: Reporter,
        printer: Optional[Printer] = None,
        stdin: Optional[StdinLines] = None,
    ):
        self.config = config
        self.loader = loader
        self.engine = engine
        self.reporter = reporter
        self.print = printer or print
        self.state = RunnerState.OPEN
        self.outcome: Optional[RunOutcome] = None

        self._stdin = stdin
        self._suite_task: Optional[asyncio.Task] = None
        self._close_task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(
        cls,
        config: RunnerConfig,
        *,
        loader_factory: LoaderFactory,
        engine_factory: EngineFactory,
        reporter_factories: Mapping[str, ReporterFactory],
        **kwargs: Any,
    ) -> "Runner":
        """Build the loader, engine and reporter a config calls for, and wrap them in a Runner."""
        metadata = SuiteMetadata(no_timeout=config.pause_after_load, verbose_trace=config.verbose_trace)
        loader = loader_factory(config.platforms, metadata=metadata, color=config.color)
        engine = engine_factory(concurrency=config.concurrency)

        watch = reporter_factories.get(config.reporter)
        if watch is None:
            raise RunnerError(
                ErrorCode.CONFIG_INVALID,
                f'Unknown reporter "{config.reporter}".',
                details={"available": sorted(reporter_factories)},
            )
        reporter = watch(
            engine,
            color=config.color,
            verbose_trace=config.verbose_trace,
            print_path=len(config.paths) > 1 or os.path.isdir(config.paths[0]),
            print_platform=len(config.platforms) > 1,
        )
        return cls(config, loader, engine, reporter, **kwargs)

    @property
    def closed(self) -> bool:
        return self.state is not RunnerState.OPEN

    async def run(self) -> bool:
        """
        Start running tests and printing their progress.

        Returns whether the tests ran successfully. Returns False without
        raising if the runner was closed while running.

        Raises:
            AlreadyClosed: the runner has been closed.
            NoTestsMatched: a name pattern was set and no test matched it.
        """
        if self.closed:
            raise AlreadyClosed()
        if self._suite_task is not None:
            raise RuntimeError("run() may only be called once per Runner.")

        suites = SuiteStreamBuilder(self.loader, self.config.paths, self.config.pattern).build()

        if self.config.pause_after_load:
            success = await self._load_then_pause(suites)
        else:
            self._suite_task = asyncio.ensure_future(self._forward(suites))
            _, success = await join_tasks([self._suite_task, self.engine.run()], eager_error=True)

        if self.closed:
            logger.info("[Runner] Closed before the run completed")
            self.outcome = RunOutcome.CLOSED_EARLY
            return False

        if (
            not self.engine.passed
            and not self.engine.failed
            and not self.engine.skipped
            and self.config.pattern is not None
        ):
            self.outcome = RunOutcome.FAILURE
            raise NoTestsMatched(describe_pattern(self.config.pattern))

        # The engine returns None when it was closed prematurely.
        self.outcome = RunOutcome.SUCCESS if success is True else RunOutcome.FAILURE
        return success is True

    async def _forward(self, suites: AsyncIterator[LoadSuite]) -> None:
        async for load_suite in suites:
            self.engine.suite_sink.add(load_suite)
        self.engine.suite_sink.close()

    async def _load_then_pause(self, suites: AsyncIterator[LoadSuite]) -> Optional[bool]:
        controller = DebugPauseController(
            self.engine,
            self.reporter,
            platforms=self.config.platforms,
            color=self.config.color,
            printer=self.print,
            stdin=self._stdin,
            is_closed=lambda: self.closed,
        )
        controller.warn_unsupported_platforms()

        self._suite_task = asyncio.ensure_future(controller.pump(suites))
        _, success = await join_tasks([self._suite_task, self.engine.run()], eager_error=False)
        return success

    async def close(self) -> None:
        """
        Close the runner.

        This stops any future suites from running and waits for the ones
        already running, in case they have cleanup to do. Every caller waits
        for the same teardown; it only ever runs once.
        """
        if self._close_task is None:
            self.state = RunnerState.CLOSING
            self._close_task = create_safe_task(self._close(), name="runner-close")
        await asyncio.shield(self._close_task)

    async def _close(self) -> None:
        notice: Optional[asyncio.TimerHandle] = None
        if not self.engine.is_idle:
            # Printing eagerly looks odd when the tests then finish immediately.
            loop = asyncio.get_running_loop()
            notice = loop.call_later(self.config.close_notice_delay, self._print_close_notice)

        if self._suite_task is not None:
            self._suite_task.cancel()
        self._suite_task = None

        # The engine must close before the loader, or suites still loading
        # could be handed to a closed engine.
        try:
            await self.engine.close()
        except Exception:
            logger.exception("[Runner] Engine failed to close cleanly")

        if notice is not None:
            notice.cancel()

        try:
            await self.loader.close()
        except Exception:
            logger.exception("[Runner] Loader failed to close cleanly")

        self.state = RunnerState.CLOSED
        logger.debug("[Runner] Closed")

    def _print_close_notice(self) -> None:
        # Keep the reporter from writing over the notice.
        self.reporter.pause()
        try:
            self.print("Waiting for current test(s) to finish.")
            self.print("Press Control-C again to terminate immediately.")
        finally:
            self.reporter.resume()
