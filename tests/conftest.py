"""Pytest configuration for testdeck."""
import os


def pytest_configure():
    # Keep the environment-driven config deterministic across machines.
    os.environ.setdefault("TESTDECK_LOG_LEVEL", "DEBUG")
