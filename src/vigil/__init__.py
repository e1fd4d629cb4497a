"""
Vigil - Discord account screening and verification bot

Vigil screens accounts joining a server against deterministic suspicion
heuristics and gives moderators a rate-limited ``!verify`` command that opens
a timed ban/pardon decision.

Core Components:

- **Heuristics**: Account age, generic username, missing avatar and malicious
  bot checks producing an ordered list of reasons
- **Rate Limiter**: Fixed-window per-moderator verification quota with admin
  bypass
- **Verification Sessions**: Ban/pardon decision surfaces with authorization,
  exactly-once terminal transitions and a timeout
- **Auto-ban Scheduler**: Delayed automatic bans of malicious bots with a
  moderator direct message
- **Audit Trail**: SQLite persistence of verify/ban/suspect events plus modlog
  channel notifications

Usage:
    from vigil.main import main
    main()
"""
