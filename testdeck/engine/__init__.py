# testdeck/engine/__init__.py
#
# PURPOSE:
# Moves suites from the loader into the execution engine.
#
# MODULES IN THIS PACKAGE:
# - **suite_stream.py**: Merges per-path suite streams and applies the name pattern
# - **debug_pause.py**: One-suite-at-a-time delivery with a pause for debuggers
# - **runner.py**: The Runner: run modes, outcome, and ordered shutdown
#
# WORKFLOW:
# Paths → SuiteStreamBuilder → (DebugPauseController) → Engine → Reporter
#
