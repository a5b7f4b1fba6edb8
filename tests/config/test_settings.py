"""
Tests for user settings in ~/.openblockrc.
"""

import json
import stat
import sys

import pytest

from openblock_cli.config.settings import (
    DEFAULT_DEV_SERVICE_PORT,
    DEFAULT_SERVICE_HOST,
    DEFAULT_SERVICE_PORT,
    delete_setting,
    get_setting,
    list_settings,
    load_service_settings,
    read_settings,
    set_setting,
)
from openblock_cli.core.exceptions import SettingsError


class TestReadWrite:
    def test_missing_file_is_empty(self, isolated_home):
        assert read_settings() == {}

    def test_set_and_get(self, isolated_home):
        set_setting("registry", "https://registry.example.com/packages.json")

        assert get_setting("registry") == "https://registry.example.com/packages.json"
        assert (isolated_home / ".openblockrc").exists()

    def test_unknown_key_rejected(self, isolated_home):
        with pytest.raises(SettingsError, match="Unknown configuration key"):
            set_setting("colour", "blue")

    def test_get_unset_returns_none(self, isolated_home):
        assert get_setting("github-token") is None

    def test_delete(self, isolated_home):
        set_setting("registry", "https://r.example.com")
        set_setting("github-token", "ghp_secret")

        delete_setting("registry")

        assert list_settings() == {"github-token": "ghp_secret"}

    def test_delete_unset_is_noop(self, isolated_home):
        delete_setting("registry")
        assert not (isolated_home / ".openblockrc").exists()

    def test_reads_legacy_json_file(self, isolated_home):
        (isolated_home / ".openblockrc").write_text(
            json.dumps({"github-token": "ghp_abc", "registry": "https://r"})
        )

        assert list_settings() == {"github-token": "ghp_abc", "registry": "https://r"}

    def test_invalid_file(self, isolated_home):
        (isolated_home / ".openblockrc").write_text("- just\n- a list\n")

        with pytest.raises(SettingsError, match="must contain a mapping"):
            read_settings()

    def test_malformed_yaml(self, isolated_home):
        (isolated_home / ".openblockrc").write_text("key: [unclosed\n")

        with pytest.raises(SettingsError, match="Invalid settings"):
            read_settings()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_file_is_private(self, isolated_home):
        set_setting("github-token", "ghp_secret")

        mode = (isolated_home / ".openblockrc").stat().st_mode
        assert stat.S_IMODE(mode) == 0o600

    def test_explicit_settings_file(self, tmp_path):
        settings_file = tmp_path / "custom-rc"
        set_setting("registry", "https://r", settings_file=settings_file)

        assert read_settings(settings_file) == {"registry": "https://r"}


class TestServiceSettings:
    def test_defaults(self, isolated_home):
        settings = load_service_settings()

        assert settings.host == DEFAULT_SERVICE_HOST
        assert settings.port == DEFAULT_SERVICE_PORT
        assert settings.dev_port == DEFAULT_DEV_SERVICE_PORT
        assert settings.registry_url is None

    def test_from_file(self, isolated_home):
        set_setting("service-host", "127.0.0.1")
        set_setting("service-port", "30111")
        set_setting("registry", "https://r")

        settings = load_service_settings()

        assert settings.host == "127.0.0.1"
        assert settings.port == 30111
        assert settings.registry_url == "https://r"

    def test_environment_overrides_file(self, isolated_home, monkeypatch):
        set_setting("registry", "https://from-file")
        monkeypatch.setenv("OPENBLOCK_REGISTRY", "https://from-env")
        monkeypatch.setenv("OPENBLOCK_SERVICE_HOST", "service.local")

        settings = load_service_settings()

        assert settings.registry_url == "https://from-env"
        assert settings.host == "service.local"

    def test_invalid_port(self, isolated_home):
        set_setting("dev-service-port", "not-a-port")

        with pytest.raises(SettingsError, match="Invalid service port"):
            load_service_settings()
