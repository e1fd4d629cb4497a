"""
User interface components for Vigil.

- **verification_embed.py**: Embeds for verification results, audit log
  entries and auto-ban notices.

- **verification_view.py**: Ban/pardon button view attached to a verification
  result. Checks the presser's permissions before acting on the session.
"""
