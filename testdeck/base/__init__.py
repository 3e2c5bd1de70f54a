# testdeck/base/__init__.py
#
# PURPOSE:
# Foundational types the rest of the runner is built on.
#
# WHAT'S IN THIS MODULE:
# - platform.py: Execution platforms and which of them support debugging
# - suite.py: Tests, loaded suites, and lazily-loaded suite descriptors
# - contracts.py: Protocols for the loader, engine, reporter and environment
#
