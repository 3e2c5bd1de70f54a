# ============================================================================
# testdeck/__init__.py
# Package marker for the test runner orchestration core
# ============================================================================
#
# PURPOSE:
# Loads test suites from files and directories, hands them to an execution
# engine, and shuts everything down in order when the run ends or is
# interrupted.
#
# ENTRY POINT:
#   from testdeck import Runner, RunnerConfig
#
#   runner = Runner(RunnerConfig(paths=("test",)), loader, engine, reporter)
#   try:
#       success = await runner.run()
#   finally:
#       await runner.close()
#
# ============================================================================

from testdeck.config import RunnerConfig
from testdeck.engine.runner import RunOutcome, Runner
from testdeck.errors import AlreadyClosed, NoTestsMatched, PathNotFound, RunnerError

__all__ = [
    "Runner",
    "RunOutcome",
    "RunnerConfig",
    "RunnerError",
    "AlreadyClosed",
    "NoTestsMatched",
    "PathNotFound",
]
