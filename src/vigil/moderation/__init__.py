"""
Verification and screening logic for Vigil.

- **heuristics.py**: Deterministic suspicion checks (account age, generic
  username, missing avatar, malicious bot) returning reasons in a fixed order.

- **rate_limiter.py**: Fixed-window per-moderator verification quota with an
  unlimited bypass for configured administrators.

- **authorization.py**: Capability checks for the bot, the command invoker and
  whoever presses a decision control.

- **verification_session.py**: State machine for one ban/pardon decision.
  Exactly one terminal transition, timeout expiry and idempotent control
  disabling.

- **audit_sink.py**: Persists audit events to SQLite and posts them to the
  modlog channel.
"""
