from __future__ import annotations
from pathlib import Path
import fcntl
import os
from typing import Any, Dict
import yaml

from vigil.configuration.verification_settings import VerificationSettings
from vigil.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()


class AppConfig:
    """File-lock based accessor around the YAML-based application configuration.

    The class caches the contents of ``./config/app_config.yml`` and resolves
    the verification workflow settings through :class:`VerificationSettings`.
    Uses fcntl file locks so a concurrent editor never hands us a half-written
    file.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            logger.warning("[APP CONFIGURATION] Config %s is not a mapping; using defaults.", self.config_path)
            return {}
        return data

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def verification_settings(self) -> VerificationSettings:
        """Return the verification workflow settings as an immutable value.

        ``ADMIN_ID`` from the environment (usually loaded from ``.env``) is
        merged into the configured admin identities.
        """
        env_admin = os.getenv("ADMIN_ID", "").strip()
        extra_admins = [env_admin] if env_admin else []
        return VerificationSettings.from_mapping(self._data, extra_admins=extra_admins)


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
