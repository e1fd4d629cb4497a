"""
Discord integration for Vigil.

- **cogs/events_listener.py**: bot lifecycle (on_ready) and member join screening.
- **cogs/verification_listener.py**: the ``!verify`` prefix command.
"""
