"""
tests/test_settings_store.py
Tests for core/settings_store.py and core/plugin.py (settings lifecycle).
"""

import os

import pytest
import yaml

from adapters.memos.config import DEFAULT_SETTINGS
from adapters.memos.errors import ConfigurationError
from core.plugin import MemosSyncPlugin
from core.settings_store import SettingsStore


class TestSettingsStore:

    def test_missing_file_gives_defaults(self, tmp_path):
        store = SettingsStore(str(tmp_path / "nope" / "memos.yaml"))
        assert not store.exists()
        assert store.load() == DEFAULT_SETTINGS

    def test_load_merges_over_defaults(self, tmp_workdir):
        settings = SettingsStore().load()
        assert settings.api_url == "https://memos.test/api/v1"
        assert settings.sync_limit == 50
        assert settings.request_timeout == DEFAULT_SETTINGS.request_timeout

    def test_save_writes_every_field(self, tmp_path):
        path = tmp_path / "config" / "memos.yaml"
        store = SettingsStore(str(path))
        store.save(DEFAULT_SETTINGS)

        data = yaml.safe_load(path.read_text())
        assert data == DEFAULT_SETTINGS.to_dict()
        assert not os.path.exists(str(path) + ".tmp")

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "memos.yaml"
        path.write_text("")
        assert SettingsStore(str(path)).load() == DEFAULT_SETTINGS

    def test_invalid_yaml_is_configuration_error(self, tmp_path):
        path = tmp_path / "memos.yaml"
        path.write_text("api_url: [unclosed\n")
        with pytest.raises(ConfigurationError):
            SettingsStore(str(path)).load()

    def test_non_mapping_is_configuration_error(self, tmp_path):
        path = tmp_path / "memos.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            SettingsStore(str(path)).load()


class TestPluginSettings:

    def test_on_load_reads_store(self, tmp_workdir):
        plugin = MemosSyncPlugin()
        plugin.on_load()
        assert plugin.settings.sync_directory == "vault/memos"

    def test_update_settings_persists(self, tmp_workdir):
        plugin = MemosSyncPlugin()
        plugin.on_load()
        plugin.update_settings(sync_limit=7)

        reloaded = MemosSyncPlugin()
        reloaded.on_load()
        assert reloaded.settings.sync_limit == 7
        assert reloaded.settings.api_url == "https://memos.test/api/v1"

    def test_unknown_keys_dropped_on_save(self, tmp_workdir):
        with open("config/memos.yaml", "a") as f:
            f.write("legacy_option: true\n")

        plugin = MemosSyncPlugin()
        plugin.on_load()
        plugin.save_settings()

        data = yaml.safe_load(open("config/memos.yaml"))
        assert "legacy_option" not in data

    def test_create_service_uses_settings(self, tmp_workdir):
        plugin = MemosSyncPlugin()
        plugin.on_load()
        service = plugin.create_service()

        assert service.api_url == "https://memos.test/api/v1"
        assert service.access_token == "test-token"
        assert service.sync_limit == 50
