"""
Configuration management for bibfiles-mcp.

Handles:
- Config file location (BIBFILES_CONFIG override or ~/.bibfiles/config.yaml)
- Config file loading and saving as YAML
- Linked-file and XMP preferences
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


DEFAULT_FILE_NAME_PATTERN = "[bibtexkey]"


class FilePreferences(BaseModel):
    """Where linked files live and how they are named."""
    file_directories: list[str] = Field(default_factory=list)
    file_name_pattern: str = DEFAULT_FILE_NAME_PATTERN
    replace_existing: bool = False

    @property
    def directories(self) -> list[Path]:
        """File directories with ``~`` expanded."""
        return [Path(d).expanduser() for d in self.file_directories]


class XmpPreferences(BaseModel):
    """XMP import settings."""
    use_privacy_filter: bool = False
    privacy_filter: list[str] = Field(
        default_factory=list,
        description="Field names dropped from every imported entry when the filter is on.",
    )


class Config(BaseModel):
    """Main configuration model."""
    files: FilePreferences = Field(default_factory=FilePreferences)
    xmp: XmpPreferences = Field(default_factory=XmpPreferences)


class ConfigManager:
    """Manages configuration loading and access."""

    def __init__(self, config_path: Optional[Path] = None):
        self._config: Optional[Config] = None
        self._config_path = config_path

    @property
    def config_path(self) -> Path:
        """Get the config file path."""
        if self._config_path is None:
            self._config_path = detect_config_path()
        return self._config_path

    def load(self) -> Config:
        """Load configuration from file, or return defaults."""
        if self._config is not None:
            return self._config

        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
            self._config = Config(**data)
        else:
            self._config = Config()

        return self._config

    def save(self, config: Config) -> None:
        """Save configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, 'w') as f:
            yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)

        self._config = config

    @property
    def config(self) -> Config:
        """Get the current configuration (loads if needed)."""
        return self.load()


def detect_config_path() -> Path:
    """
    Determine where the config file lives.

    Checks the BIBFILES_CONFIG environment variable first, then falls back
    to ~/.bibfiles/config.yaml.
    """
    env_path = os.environ.get("BIBFILES_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".bibfiles" / "config.yaml"


# Global config manager instance
config_manager = ConfigManager()
