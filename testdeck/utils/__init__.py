# testdeck/utils/__init__.py
#
# PURPOSE:
# Shared helpers used across the runner.
#
# KEY MODULES:
# - **async_helpers.py**: Safe tasks, stream merging, eager joins, cancelable races
# - **console.py**: Cancelable stdin reads and console text formatting
#
