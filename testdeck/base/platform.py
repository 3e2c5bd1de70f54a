# testdeck/base/platform.py
# Execution platforms a suite can be loaded on.

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Iterable, List


class TestPlatform(Enum):
    VM = "vm"
    CHROME = "chrome"
    FIREFOX = "firefox"
    SAFARI = "safari"
    INTERNET_EXPLORER = "ie"
    PHANTOM_JS = "phantomjs"
    CONTENT_SHELL = "content-shell"

    # Keep pytest from collecting this enum as a test class.
    __test__ = False

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    def __str__(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    TestPlatform.VM: "VM",
    TestPlatform.CHROME: "Chrome",
    TestPlatform.FIREFOX: "Firefox",
    TestPlatform.SAFARI: "Safari",
    TestPlatform.INTERNET_EXPLORER: "Internet Explorer",
    TestPlatform.PHANTOM_JS: "PhantomJS",
    TestPlatform.CONTENT_SHELL: "Content Shell",
}

# Platforms where pausing for a debugger is not available, regardless of config.
DEBUG_UNSUPPORTED_PLATFORMS: FrozenSet[TestPlatform] = frozenset(
    {TestPlatform.VM, TestPlatform.PHANTOM_JS, TestPlatform.CONTENT_SHELL}
)


def debug_unsupported_names(platforms: Iterable[TestPlatform]) -> List[str]:
    """Human-readable names of the debug-unsupported platforms, deduplicated, in order."""
    names: List[str] = []
    seen = set()
    for platform in platforms:
        if platform not in DEBUG_UNSUPPORTED_PLATFORMS or platform in seen:
            continue
        seen.add(platform)
        names.append("the VM" if platform is TestPlatform.VM else platform.display_name)
    return names
