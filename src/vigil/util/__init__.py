"""
Utility functions and helpers for Vigil.

- **logger.py**: Centralized logging configuration with colored console output,
  rotating file handlers, and per-session log aggregation. Suppresses noise from
  Discord internals and aiosqlite. Uses prompt_toolkit for console output.

- **discord_utils.py**: Low-level Discord API helpers: permission checks,
  modlog channel lookup, bans, direct messages and view edits that report
  failure instead of raising.
"""
