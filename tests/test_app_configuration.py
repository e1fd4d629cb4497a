"""Tests for the YAML configuration loader and verification settings."""

from pathlib import Path

import pytest

from vigil.configuration.app_configuration import AppConfig
from vigil.configuration.verification_settings import (
    DEFAULT_AUTHORIZED_BOTS,
    DEFAULT_VERIFICATION_LIMIT,
    VerificationSettings,
)


def write_config(tmp_path, text):
    path = tmp_path / "app_config.yml"
    path.write_text(text, encoding="utf-8")
    return path


def test_loads_verification_settings(tmp_path, monkeypatch):
    monkeypatch.delenv("ADMIN_ID", raising=False)
    path = write_config(
        tmp_path,
        """
admins:
  - "123456789"
  - "Owner#0001"
authorized_bots:
  - "Webhook#0000"
  - "Helper#1111"
verification:
  command_prefix: "!check"
  limit: 3
  window_seconds: 1800
  session_timeout_seconds: 30
auto_ban:
  delay_seconds: 5
audit:
  database_path: "./var/audit.db"
  modlog_channel: "mod-log"
""",
    )

    settings = AppConfig(path).verification_settings

    assert settings.admin_identities == frozenset({"123456789", "Owner#0001"})
    assert settings.authorized_bots == frozenset({"Webhook#0000", "Helper#1111"})
    assert settings.command_prefix == "!check"
    assert settings.verification_limit == 3
    assert settings.verification_window_seconds == 1800
    assert settings.session_timeout_seconds == 30
    assert settings.auto_ban_delay_seconds == 5
    assert settings.modlog_channel == "mod-log"
    assert settings.audit_database_path == Path("./var/audit.db")


def test_missing_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("ADMIN_ID", raising=False)
    config = AppConfig(tmp_path / "missing.yml")

    assert config.reload() == {}
    assert config.verification_settings == VerificationSettings()


def test_non_mapping_document_is_ignored(tmp_path):
    config = AppConfig(write_config(tmp_path, "- just\n- a list\n"))

    assert config.reload() == {}
    assert config.verification_settings.verification_limit == VerificationSettings().verification_limit


def test_malformed_yaml_is_ignored(tmp_path):
    config = AppConfig(write_config(tmp_path, "verification: [unclosed\n"))

    assert config.reload() == {}
    assert config.verification_settings.verification_limit == VerificationSettings().verification_limit


def test_admin_id_from_environment_is_merged(tmp_path, monkeypatch):
    monkeypatch.setenv("ADMIN_ID", "999")
    config = AppConfig(write_config(tmp_path, "admins: ['1']\n"))

    assert config.verification_settings.admin_identities == frozenset({"1", "999"})


def test_reload_picks_up_changes(tmp_path):
    path = write_config(tmp_path, "verification:\n  limit: 2\n")
    config = AppConfig(path)
    assert config.verification_settings.verification_limit == 2

    path.write_text("verification:\n  limit: 8\n", encoding="utf-8")
    assert config.reload() == {"verification": {"limit": 8}}
    assert config.verification_settings.verification_limit == 8


@pytest.mark.parametrize("bad_value", [0, -1, "many", None])
def test_invalid_limit_falls_back_to_default(bad_value):
    settings = VerificationSettings.from_mapping({"verification": {"limit": bad_value}})

    assert settings.verification_limit == DEFAULT_VERIFICATION_LIMIT


def test_authorized_bots_default_when_absent_but_empty_list_is_respected():
    assert VerificationSettings.from_mapping({}).authorized_bots == frozenset(DEFAULT_AUTHORIZED_BOTS)
    assert VerificationSettings.from_mapping({"authorized_bots": []}).authorized_bots == frozenset()


def test_numeric_admin_ids_are_normalised_to_strings():
    settings = VerificationSettings.from_mapping({"admins": [123, " 456 "]})

    assert settings.admin_identities == frozenset({"123", "456"})


def test_bundled_config_parses(monkeypatch):
    monkeypatch.delenv("ADMIN_ID", raising=False)
    bundled = Path(__file__).resolve().parents[1] / "config" / "app_config.yml"

    settings = AppConfig(bundled).verification_settings

    assert settings == VerificationSettings()
