# testdeck/errors.py
# Structured error taxonomy for the test runner.
#
# ERROR CODE FORMAT:
# - LOAD_XXX: Suite loading errors (carried per-suite, never fatal to discovery)
# - RUNNER_XXX: Orchestration errors raised to the caller of Runner.run()
# - CONFIG_XXX: Configuration errors
#
# USAGE:
#   from testdeck.errors import NoTestsMatched
#
#   raise NoTestsMatched('"foo"')

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    # Load Errors
    LOAD_PATH_NOT_FOUND = "LOAD_001"
    LOAD_FAILED = "LOAD_002"

    # Runner Errors
    RUNNER_NO_TESTS_MATCHED = "RUNNER_001"
    RUNNER_ALREADY_CLOSED = "RUNNER_002"

    # Config Errors
    CONFIG_INVALID = "CONFIG_001"


class RunnerError(Exception):
    """
    Base exception for the test runner with structured error information.

    Attributes:
        code: ErrorCode enum value (e.g., "RUNNER_001")
        message: Human-readable error message
        details: Optional dictionary with additional context
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class LoadError(RunnerError):
    """A suite at `path` could not be loaded."""

    def __init__(self, path: str, message: str, code: ErrorCode = ErrorCode.LOAD_FAILED):
        self.path = path
        super().__init__(code, f'Failed to load "{path}": {message}', details={"path": path})


class PathNotFound(LoadError):
    """An input path is neither a file nor a directory."""

    def __init__(self, path: str):
        super().__init__(path, "Does not exist.", code=ErrorCode.LOAD_PATH_NOT_FOUND)


class NoTestsMatched(RunnerError):
    """A completed run observed no tests while a name pattern was active."""

    def __init__(self, pattern_description: str):
        self.pattern_description = pattern_description
        super().__init__(
            ErrorCode.RUNNER_NO_TESTS_MATCHED,
            f"No tests match {pattern_description}.",
            details={"pattern": pattern_description},
        )


class AlreadyClosed(RunnerError):
    """run() was called on a runner that has been closed."""

    def __init__(self, message: str = "run() may not be called on a closed Runner."):
        super().__init__(ErrorCode.RUNNER_ALREADY_CLOSED, message)


__all__ = [
    "ErrorCode",
    "RunnerError",
    "LoadError",
    "PathNotFound",
    "NoTestsMatched",
    "AlreadyClosed",
]
