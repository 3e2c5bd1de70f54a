# testdeck/engine/debug_pause.py
# Sequential load-then-pause delivery of suites for interactive debugging.

from __future__ import annotations

import logging
from typing import AsyncIterator, Callable, List, Optional, Sequence

from testdeck.base.contracts import Engine, Reporter
from testdeck.base.platform import DEBUG_UNSUPPORTED_PLATFORMS, TestPlatform, debug_unsupported_names
from testdeck.base.suite import LoadSuite, Suite
from testdeck.utils.async_helpers import CancelableOperation, race
from testdeck.utils.console import StdinLines, bold, stdin_lines, to_sentence, warn, word_wrap

logger = logging.getLogger(__name__)

Printer = Callable[[str], None]


class DebugPauseController:
    """
    Feeds suites to the engine one at a time, pausing after each load.

    Between loading a suite and running it, the reporter is paused and the
    user gets a chance to attach a debugger on the suite's platform. The next
    suite is not handed to the engine until the engine is idle again, so
    execution is strictly sequential in this mode.
    """

    def __init__(
        self,
        engine: Engine,
        reporter: Reporter,
        platforms: Sequence[TestPlatform] = (),
        color: bool = False,
        printer: Optional[Printer] = None,
        stdin: Optional[StdinLines] = None,
        is_closed: Optional[Callable[[], bool]] = None,
    ):
        self.engine = engine
        self.reporter = reporter
        self.platforms = list(platforms)
        self.color = color
        self.print = printer or print
        self._stdin = stdin
        self._is_closed = is_closed or (lambda: False)

    def warn_unsupported_platforms(self) -> List[str]:
        names = debug_unsupported_names(self.platforms)
        if names:
            warn(word_wrap(f"Debugging is currently unsupported on {to_sentence(names)}."), color=self.color)
        return names

    async def pump(self, suites: AsyncIterator[LoadSuite]) -> None:
        try:
            async for load_suite in suites:
                # A suite with no body keeps the engine from running the real one
                # before the user has had a chance to pause.
                self.engine.suite_sink.add(load_suite.change_suite(lambda _: None))

                suite = await load_suite.suite()
                if suite is None:
                    logger.debug(f"[DebugPause] {load_suite.name} produced no suite; skipping")
                    continue

                await self.pause(suite)
                if self._is_closed():
                    return

                self.engine.suite_sink.add(suite)
                await self.engine.on_idle()
        finally:
            if hasattr(suites, "aclose"):
                await suites.aclose()
            # The engine only finishes once its intake is closed, including
            # when delivery fails. A closing runner shuts the engine itself.
            if not self._is_closed():
                self.engine.suite_sink.close()

    async def pause(self, suite: Suite) -> None:
        """Pause the reporter until the user resumes; no-op where debugging is unsupported."""
        if suite.platform is None:
            return
        if suite.platform in DEBUG_UNSUPPORTED_PLATFORMS:
            return

        try:
            self.reporter.pause()

            self.print("")
            self.print(word_wrap(
                f"{bold('The test runner is paused.', self.color)} Open the dev console in "
                f"{suite.platform} and set breakpoints. Once you're finished, "
                "return to this terminal and press Enter."))

            await race(await self._resume_signals(suite))
        finally:
            self.reporter.resume()

    async def _resume_signals(self, suite: Suite) -> List[CancelableOperation]:
        signals: List[CancelableOperation] = []
        if suite.environment is not None:
            try:
                signals.append(suite.environment.display_pause())
            except NotImplementedError as exc:
                logger.debug(f"[DebugPause] {suite.platform} cannot display a pause: {exc}")
        try:
            signals.append((self._stdin or stdin_lines()).next_line())
        except Exception:
            for signal in signals:
                await signal.cancel()
            raise
        return signals
