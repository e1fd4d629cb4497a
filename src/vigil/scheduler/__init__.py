"""
Scheduled task execution for time-delayed moderation actions.

- **auto_ban_scheduler.py**: Delayed automatic bans of malicious bots. Uses a
  min-heap keyed by due time, executes each task exactly once, records a ban
  audit event and notifies one capable moderator by direct message.
"""
