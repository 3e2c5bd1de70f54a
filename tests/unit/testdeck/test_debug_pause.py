"""
Unit tests for DebugPauseController.
Covers:
- Pause no-ops on unsupported platforms
- The resume-signal / console race and cleanup of the loser
- Strictly sequential suite delivery
"""
import asyncio

import pytest

from fakes import FakeEnvironment, load_suite_for, make_suite
from testdeck.base.platform import TestPlatform
from testdeck.base.suite import LoadSuite
from testdeck.engine.debug_pause import DebugPauseController
from testdeck.errors import PathNotFound
from testdeck.utils.async_helpers import CancelableOperation
from testdeck.utils.console import StdinLines


async def _stream(load_suites):
    for load_suite in load_suites:
        yield load_suite


@pytest.fixture
def printed():
    return []


@pytest.fixture
def controller(engine, reporter, pipe_stdin, printed):
    lines, _ = pipe_stdin
    return DebugPauseController(engine, reporter, platforms=[TestPlatform.CHROME], printer=printed.append, stdin=lines)


# ============================================================================
# pause()
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize("platform", [None, TestPlatform.VM, TestPlatform.PHANTOM_JS, TestPlatform.CONTENT_SHELL])
async def test_pause_is_noop_without_debugger(controller, reporter, printed, platform):
    env = FakeEnvironment()

    await controller.pause(make_suite("a_test.py", "a", platform=platform, environment=env))

    assert reporter.pauses == 0
    assert printed == []
    assert env.displayed == 0


@pytest.mark.asyncio
async def test_environment_resume_wins_and_console_read_is_canceled(controller, reporter, printed, pipe_stdin):
    lines, _ = pipe_stdin
    env = FakeEnvironment()
    asyncio.get_running_loop().call_later(0.01, env.resume.set)

    await asyncio.wait_for(
        controller.pause(make_suite("a_test.py", "a", platform=TestPlatform.CHROME, environment=env)), timeout=1)

    assert env.displayed == 1
    assert env.canceled == 0
    assert not lines.reading
    assert reporter.pauses == reporter.resumes == 1
    assert reporter.depth == 0
    message = " ".join(printed).replace("\n", " ")
    assert "The test runner is paused." in message
    assert "Open the dev console in Chrome" in message


@pytest.mark.asyncio
async def test_console_enter_wins_and_environment_is_canceled(controller, reporter, pipe_stdin):
    _, type_line = pipe_stdin
    env = FakeEnvironment()
    asyncio.get_running_loop().call_later(0.01, type_line)

    await asyncio.wait_for(
        controller.pause(make_suite("a_test.py", "a", platform=TestPlatform.FIREFOX, environment=env)), timeout=1)

    assert env.canceled == 1
    assert reporter.depth == 0


@pytest.mark.asyncio
async def test_unsupported_environment_falls_back_to_console(controller, reporter, pipe_stdin):
    _, type_line = pipe_stdin
    asyncio.get_running_loop().call_later(0.01, type_line)

    await asyncio.wait_for(
        controller.pause(make_suite("a_test.py", "a", platform=TestPlatform.SAFARI,
                                    environment=FakeEnvironment(supported=False))), timeout=1)

    assert reporter.pauses == reporter.resumes == 1


@pytest.mark.asyncio
async def test_reporter_resumes_when_pause_fails(controller, reporter, pipe_stdin):
    lines, _ = pipe_stdin

    class BrokenEnvironment:
        def display_pause(self):
            async def fail():
                raise ConnectionError("debugger went away")
            return CancelableOperation(fail())

    with pytest.raises(ConnectionError):
        await controller.pause(make_suite("a_test.py", "a", platform=TestPlatform.CHROME,
                                          environment=BrokenEnvironment()))

    assert reporter.depth == 0
    assert not lines.reading


# ============================================================================
# warn_unsupported_platforms()
# ============================================================================

def test_warns_once_for_all_unsupported_platforms(engine, reporter, capsys):
    controller = DebugPauseController(
        engine, reporter,
        platforms=[TestPlatform.VM, TestPlatform.CHROME, TestPlatform.PHANTOM_JS, TestPlatform.VM])

    assert controller.warn_unsupported_platforms() == ["the VM", "PhantomJS"]

    err = capsys.readouterr().err.replace("\n", " ")
    assert err.count("Warning:") == 1
    assert "Debugging is currently unsupported on the VM and PhantomJS." in err


def test_no_warning_when_all_platforms_support_debugging(engine, reporter, capsys):
    controller = DebugPauseController(engine, reporter, platforms=[TestPlatform.CHROME])

    assert controller.warn_unsupported_platforms() == []
    assert capsys.readouterr().err == ""


# ============================================================================
# pump()
# ============================================================================

@pytest.mark.asyncio
async def test_pump_submits_one_suite_at_a_time(controller):
    engine = controller.engine
    engine.suite_delay = 0.01
    load_suites = [load_suite_for(make_suite(f"{i}_test.py", "t")) for i in range(3)]

    await asyncio.wait_for(asyncio.gather(controller.pump(_stream(load_suites)), engine.run()), timeout=2)

    assert engine.events == [
        ("submit", "0_test.py"), ("finish", "0_test.py"),
        ("submit", "1_test.py"), ("finish", "1_test.py"),
        ("submit", "2_test.py"), ("finish", "2_test.py"),
    ]
    assert engine.suite_sink.closed
    assert len(engine.passed) == 3


@pytest.mark.asyncio
async def test_pump_adds_placeholder_before_loading(controller):
    engine = controller.engine
    load_suites = [load_suite_for(make_suite("a_test.py", "t"))]

    await asyncio.wait_for(asyncio.gather(controller.pump(_stream(load_suites)), engine.run()), timeout=2)

    placeholder, real = engine.suite_sink.added
    assert isinstance(placeholder, LoadSuite)
    assert placeholder.name == "loading a_test.py"
    assert await placeholder.suite() is None
    assert real.path == "a_test.py"


@pytest.mark.asyncio
async def test_pump_skips_suites_that_fail_to_load(controller):
    engine = controller.engine
    load_suites = [
        LoadSuite.for_error("loading gone", PathNotFound("gone")),
        load_suite_for(make_suite("a_test.py", "t")),
    ]

    await asyncio.wait_for(asyncio.gather(controller.pump(_stream(load_suites)), engine.run()), timeout=2)

    assert [e for e in engine.events if e[0] == "submit"] == [("submit", "a_test.py")]
    assert isinstance(engine.load_errors[0], PathNotFound)
    assert [t.name for t in engine.failed] == ["loading gone"]


@pytest.mark.asyncio
async def test_pump_pauses_before_submitting(controller, reporter, pipe_stdin):
    engine = controller.engine
    _, type_line = pipe_stdin
    env = FakeEnvironment()
    load_suites = [load_suite_for(make_suite("a_test.py", "t", platform=TestPlatform.CHROME, environment=env))]

    pumping = asyncio.ensure_future(asyncio.gather(controller.pump(_stream(load_suites)), engine.run()))
    await asyncio.sleep(0.02)

    assert reporter.depth == 1
    assert engine.events == []

    type_line()
    await asyncio.wait_for(pumping, timeout=2)

    assert engine.events == [("submit", "a_test.py"), ("finish", "a_test.py")]
    assert reporter.depth == 0


@pytest.mark.asyncio
async def test_pump_stops_once_closed(engine, reporter, pipe_stdin):
    lines, _ = pipe_stdin
    controller = DebugPauseController(engine, reporter, stdin=lines, is_closed=lambda: True)

    await controller.pump(_stream([load_suite_for(make_suite("a_test.py", "t"))]))

    assert [s for s in engine.suite_sink.added if not isinstance(s, LoadSuite)] == []
    assert not engine.suite_sink.closed


@pytest.mark.asyncio
async def test_pump_closes_intake_when_stream_fails(controller):
    engine = controller.engine

    async def broken():
        yield load_suite_for(make_suite("a_test.py", "t"))
        raise OSError("directory vanished")

    running = asyncio.ensure_future(engine.run())
    with pytest.raises(OSError, match="directory vanished"):
        await asyncio.wait_for(controller.pump(broken()), timeout=1)

    assert engine.suite_sink.closed
    assert await asyncio.wait_for(running, timeout=1) is True


@pytest.mark.asyncio
async def test_environment_signal_canceled_when_console_cannot_read(engine, reporter):
    class UnreadableStdin(StdinLines):
        def next_line(self):
            raise PermissionError("stdin cannot be polled")

    controller = DebugPauseController(engine, reporter, printer=lambda _: None, stdin=UnreadableStdin(fd=0))
    env = FakeEnvironment()

    with pytest.raises(PermissionError):
        await controller.pause(make_suite("a_test.py", "a", platform=TestPlatform.CHROME, environment=env))

    assert env.displayed == env.canceled == 1
    assert reporter.depth == 0
