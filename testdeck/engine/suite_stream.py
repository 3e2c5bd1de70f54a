# testdeck/engine/suite_stream.py
# Turns input paths into one merged stream of lazily-loaded suites.

from __future__ import annotations

import logging
import os
from typing import AsyncIterator, Callable, Optional, Pattern, Sequence, Union

from testdeck.base.contracts import Loader
from testdeck.base.suite import LoadSuite, Suite
from testdeck.errors import PathNotFound
from testdeck.utils.async_helpers import merge_streams

logger = logging.getLogger(__name__)

NamePattern = Union[str, Pattern[str]]


def describe_pattern(pattern: NamePattern) -> str:
    """Render a name pattern the way user-facing messages quote it."""
    if isinstance(pattern, str):
        return f'"{pattern}"'
    return f'regular expression "{pattern.pattern}"'


def name_matcher(pattern: NamePattern) -> Callable[[str], bool]:
    if isinstance(pattern, str):
        return lambda name: pattern in name
    return lambda name: pattern.search(name) is not None


async def _single(load_suite: LoadSuite) -> AsyncIterator[LoadSuite]:
    yield load_suite


class SuiteStreamBuilder:
    """
    Builds the stream of LoadSuites for a list of paths.

    Each path contributes its own sub-stream; the sub-streams are merged as
    they become ready. A path that does not exist contributes one suite that
    fails to load with PathNotFound, so discovery of the other paths goes on.
    """

    def __init__(self, loader: Loader, paths: Sequence[str], pattern: Optional[NamePattern] = None):
        self.loader = loader
        self.paths = list(paths)
        self.pattern = pattern

    def _stream_for(self, path: str) -> AsyncIterator[LoadSuite]:
        if os.path.isdir(path):
            return self.loader.load_dir(path)
        if os.path.isfile(path):
            return self.loader.load_file(path)

        logger.debug(f"[SuiteStream] {path} does not exist")
        return _single(LoadSuite.for_error(f"loading {path}", PathNotFound(path)))

    def _filter(self, suite: Suite) -> Suite:
        if self.pattern is None:
            return suite
        return suite.filter(name_matcher(self.pattern))

    async def build(self) -> AsyncIterator[LoadSuite]:
        merged = merge_streams([self._stream_for(path) for path in self.paths])
        try:
            async for load_suite in merged:
                yield load_suite.change_suite(self._filter)
        finally:
            await merged.aclose()
