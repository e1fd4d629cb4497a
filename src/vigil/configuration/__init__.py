"""
Configuration management for Vigil.

- **app_configuration.py**: File-locked YAML loader for ``config/app_config.yml``.
  Falls back gracefully on missing or malformed files.

- **verification_settings.py**: Frozen settings value (admins, authorized bots,
  quota limit and window, session timeout, auto-ban delay, modlog channel)
  injected into the verification core at startup.
"""
