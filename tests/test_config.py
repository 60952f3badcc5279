# SPDX-License-Identifier: MIT
"""Tests for configuration loading."""

import pytest

from tf_registry import ConfigError, RegistryConfig

ENV_VARS = [
    "DATA_DIR",
    "TF_REGISTRY_HOST",
    "TF_REGISTRY_PORT",
    "TF_REGISTRY_MAX_UPLOAD_SIZE",
    "TF_REGISTRY_KEEP_ALIVE",
    "TF_REGISTRY_DEBUG",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestFromEnv:
    def test_defaults(self):
        config = RegistryConfig.from_env()

        assert config.storage.data_dir == "/.privateterraformregistry/data"
        assert config.storage.max_upload_size == 32 * 1024 * 1024
        assert config.storage.snapshot_name == "data.json"
        assert config.server.host == "0.0.0.0"
        assert config.server.port == 8080
        assert config.modules_path == "/terraform/modules/v1/"
        assert config.debug is False

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("DATA_DIR", "/srv/registry")
        monkeypatch.setenv("TF_REGISTRY_PORT", "9090")
        monkeypatch.setenv("TF_REGISTRY_MAX_UPLOAD_SIZE", "1024")
        monkeypatch.setenv("TF_REGISTRY_KEEP_ALIVE", "30")
        monkeypatch.setenv("TF_REGISTRY_DEBUG", "true")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        config = RegistryConfig.from_env()

        assert config.storage.data_dir == "/srv/registry"
        assert config.server.port == 9090
        assert config.storage.max_upload_size == 1024
        assert config.server.timeout_keep_alive == 30
        assert config.debug is True
        assert config.log_level == "DEBUG"

    def test_empty_data_dir_uses_default(self, monkeypatch):
        monkeypatch.setenv("DATA_DIR", "")
        assert RegistryConfig.from_env().storage.data_dir == "/.privateterraformregistry/data"

    @pytest.mark.parametrize("value", ["abc", "0", "-5"])
    def test_invalid_port(self, monkeypatch, value):
        monkeypatch.setenv("TF_REGISTRY_PORT", value)
        with pytest.raises(ConfigError, match="TF_REGISTRY_PORT"):
            RegistryConfig.from_env()

    def test_instances_do_not_share_state(self):
        a = RegistryConfig()
        b = RegistryConfig()
        a.storage.data_dir = "/tmp/a"
        assert b.storage.data_dir == "/.privateterraformregistry/data"
