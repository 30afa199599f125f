"""Basic tests for bibfiles-mcp configuration."""

from pathlib import Path

import pytest
from bibfiles_mcp.config import (
    Config,
    ConfigManager,
    FilePreferences,
    XmpPreferences,
    detect_config_path,
)


class TestConfig:
    """Tests for configuration models."""

    def test_default_config(self):
        """Test that default config is valid."""
        config = Config()
        assert config.files.file_directories == []
        assert config.files.file_name_pattern == "[bibtexkey]"
        assert config.files.replace_existing is False
        assert config.xmp.use_privacy_filter is False
        assert config.xmp.privacy_filter == []

    def test_file_preferences_expand_home(self):
        prefs = FilePreferences(file_directories=["~/papers", "/srv/lit"])
        assert prefs.directories == [Path.home() / "papers", Path("/srv/lit")]

    def test_xmp_preferences(self):
        prefs = XmpPreferences(use_privacy_filter=True, privacy_filter=["abstract"])
        assert prefs.privacy_filter == ["abstract"]


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_config_manager_init(self):
        manager = ConfigManager()
        assert manager._config is None

    def test_load_default_config(self, tmp_path: Path):
        """Test loading default config when no file exists."""
        manager = ConfigManager(config_path=tmp_path / "missing.yaml")
        config = manager.load()
        assert isinstance(config, Config)
        assert config.files.file_directories == []

    def test_load_from_yaml(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "files:\n"
            "  file_directories:\n"
            "    - /srv/lit\n"
            "  file_name_pattern: '[auth][year]'\n"
            "xmp:\n"
            "  use_privacy_filter: true\n"
            "  privacy_filter: [abstract]\n"
        )
        config = ConfigManager(config_path=config_path).load()
        assert config.files.file_directories == ["/srv/lit"]
        assert config.files.file_name_pattern == "[auth][year]"
        assert config.xmp.use_privacy_filter is True

    def test_empty_yaml_gives_defaults(self, tmp_path: Path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("")
        assert ConfigManager(config_path=config_path).load() == Config()

    def test_save_and_reload(self, tmp_path: Path):
        config_path = tmp_path / "nested" / "config.yaml"
        manager = ConfigManager(config_path=config_path)
        config = Config(files=FilePreferences(file_directories=["/a"], replace_existing=True))
        manager.save(config)

        assert config_path.exists()
        reloaded = ConfigManager(config_path=config_path).load()
        assert reloaded.files.file_directories == ["/a"]
        assert reloaded.files.replace_existing is True

    def test_load_is_cached(self, tmp_path: Path):
        manager = ConfigManager(config_path=tmp_path / "config.yaml")
        assert manager.load() is manager.config


class TestDetectConfigPath:
    def test_env_override(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("BIBFILES_CONFIG", str(tmp_path / "custom.yaml"))
        assert detect_config_path() == tmp_path / "custom.yaml"

    def test_default_location(self, monkeypatch):
        monkeypatch.delenv("BIBFILES_CONFIG", raising=False)
        assert detect_config_path() == Path.home() / ".bibfiles" / "config.yaml"
