# testdeck/config.py
# Runner configuration snapshot and logging setup

from __future__ import annotations

import logging
import os
import re
from typing import Literal, Optional, Pattern, Tuple, Union

import psutil
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from testdeck.base.platform import TestPlatform

ReporterName = Literal["compact", "expanded"]


def _default_concurrency() -> int:
    return psutil.cpu_count(logical=True) or 1


class LogConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value!r}")
        return value


class RunnerConfig(BaseModel):
    """
    Immutable configuration for one Runner.

    `pattern` may be a plain string (substring match on test names) or a
    compiled regular expression (searched in test names).
    """

    model_config = ConfigDict(frozen=True)

    paths: Tuple[str, ...] = ("test",)
    pattern: Optional[Union[str, Pattern[str]]] = None
    pause_after_load: bool = False
    concurrency: int = Field(default_factory=_default_concurrency, ge=1)
    platforms: Tuple[TestPlatform, ...] = (TestPlatform.VM,)
    reporter: ReporterName = "compact"
    color: bool = False
    verbose_trace: bool = False
    close_notice_delay: float = Field(default=1.0, ge=0)
    log: LogConfig = Field(default_factory=LogConfig)

    @field_validator("paths")
    @classmethod
    def _at_least_one_path(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("at least one path is required")
        return value

    @model_validator(mode="before")
    @classmethod
    def _serialize_when_paused(cls, data):
        # Pausing for a debugger only makes sense one suite at a time.
        if isinstance(data, dict) and data.get("pause_after_load") is True:
            data = {**data, "concurrency": 1}
        return data

    @classmethod
    def from_env(cls) -> "RunnerConfig":
        values = {}

        paths = os.getenv("TESTDECK_PATHS")
        if paths:
            values["paths"] = tuple(p for p in paths.split(",") if p)

        pattern = os.getenv("TESTDECK_PATTERN")
        if pattern:
            regex = os.getenv("TESTDECK_PATTERN_REGEX", "false").lower() == "true"
            values["pattern"] = re.compile(pattern) if regex else pattern

        platforms = os.getenv("TESTDECK_PLATFORMS")
        if platforms:
            values["platforms"] = tuple(TestPlatform(p.strip()) for p in platforms.split(",") if p.strip())

        concurrency = os.getenv("TESTDECK_CONCURRENCY")
        if concurrency:
            values["concurrency"] = int(concurrency)

        return cls(
            pause_after_load=os.getenv("TESTDECK_PAUSE_AFTER_LOAD", "false").lower() == "true",
            reporter=os.getenv("TESTDECK_REPORTER", "compact"),
            color=os.getenv("TESTDECK_COLOR", "false").lower() == "true",
            verbose_trace=os.getenv("TESTDECK_VERBOSE_TRACE", "false").lower() == "true",
            close_notice_delay=float(os.getenv("TESTDECK_CLOSE_NOTICE_DELAY", "1.0")),
            log=LogConfig(level=os.getenv("TESTDECK_LOG_LEVEL", "INFO")),
            **values,
        )


_config: Optional[RunnerConfig] = None


def get_config() -> RunnerConfig:
    global _config
    if _config is None:
        _config = RunnerConfig.from_env()
    return _config


def set_config(config: RunnerConfig) -> None:
    global _config
    _config = config


def setup_logging(config: Optional[RunnerConfig] = None) -> None:
    cfg = config or get_config()
    logging.basicConfig(
        level=getattr(logging, cfg.log.level),
        format=cfg.log.format,
        handlers=[logging.StreamHandler()],
        force=True,
    )
