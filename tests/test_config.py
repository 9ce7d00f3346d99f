"""Tests for configuration loading."""

import pytest
import yaml

from localhands.config import ConfigurationError, configuration, get_config, get_environment, load_config, reset_config


class TestConfiguration:
    """Test YAML + environment configuration."""

    @pytest.fixture
    def config_dir(self, tmp_path, monkeypatch):
        """Point the loader at a temporary project root with a clean environment."""
        for key in ("APP_ENV", "LOCALHANDS_API_BASE_URL", "LOCALHANDS_API_TOKEN"):
            monkeypatch.delenv(key, raising=False)
        monkeypatch.setattr(configuration, "_get_project_root", lambda: tmp_path)
        reset_config()
        yield tmp_path
        reset_config()

    def write(self, directory, filename, content):
        with open(directory / filename, "w") as f:
            yaml.dump(content, f)

    def test_defaults(self, config_dir):
        self.write(config_dir, "config.yaml", {"api": {"base_url": "http://localhost:3000"}})

        config = load_config()

        assert config.api.base_url == "http://localhost:3000"
        assert config.api.timeout_seconds == 10.0
        assert config.api.token is None
        assert config.database.path == "localhands.db"
        assert config.sync.fallback_id_modulus == 1_000_000
        assert config.sync.propagation_concurrency == 4
        assert config.sync.initial_sync_on_startup is True
        assert config.logging.level == "INFO"

    def test_app_env_selects_file(self, config_dir, monkeypatch):
        self.write(config_dir, "config.yaml", {"api": {"base_url": "http://default"}})
        self.write(config_dir, "config_test.yaml", {"api": {"base_url": "http://test"}, "logging": {"level": "debug"}})
        monkeypatch.setenv("APP_ENV", "test")

        config = load_config()

        assert config.api.base_url == "http://test"
        assert config.logging.level == "DEBUG"
        assert get_environment() == "test"

    def test_environment_overrides(self, config_dir, monkeypatch):
        self.write(config_dir, "config.yaml", {"api": {"base_url": "http://localhost:3000"}})
        monkeypatch.setenv("LOCALHANDS_API_BASE_URL", "https://catalog.example.com")
        monkeypatch.setenv("LOCALHANDS_API_TOKEN", "secret-token")

        config = load_config()

        assert config.api.base_url == "https://catalog.example.com"
        assert config.api.token == "secret-token"

    def test_missing_file_raises(self, config_dir):
        with pytest.raises(ConfigurationError):
            load_config()

    def test_missing_base_url_raises(self, config_dir):
        self.write(config_dir, "config.yaml", {"database": {"path": "x.db"}})

        with pytest.raises(ConfigurationError):
            load_config()

    @pytest.mark.parametrize("value", [0, -5, "abc"])
    def test_invalid_numbers_raise(self, config_dir, value):
        self.write(
            config_dir,
            "config.yaml",
            {"api": {"base_url": "http://x"}, "sync": {"propagation_concurrency": value}},
        )

        with pytest.raises(ConfigurationError):
            load_config()

    def test_get_config_is_cached(self, config_dir):
        self.write(config_dir, "config.yaml", {"api": {"base_url": "http://first"}})
        first = get_config()

        self.write(config_dir, "config.yaml", {"api": {"base_url": "http://second"}})
        assert get_config() is first

        reset_config()
        assert get_config().api.base_url == "http://second"

    def test_default_environment(self, config_dir):
        assert get_environment() == "default"
