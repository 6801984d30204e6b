"""Configuration management for the jira-automated CLI."""

import os
from pathlib import Path
from typing import Any, Optional

import yaml

ENV_PREFIX = "JIRA_AUTOMATED_"
DEFAULT_OUTPUT_FORMAT = "table"


class Config:
    """CLI configuration manager."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_path: Path to config file (defaults to ~/.jira-automated/config.yaml)
        """
        if config_path is None:
            config_path = Path.home() / ".jira-automated" / "config.yaml"
        self.config_path = config_path
        self._config: dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration from file."""
        if self.config_path.exists():
            with open(self.config_path, encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
        else:
            self._config = {}

    def save(self) -> None:
        """Save configuration to file.

        The file can hold the JIRA password, so it is kept readable by the
        owner only.
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            yaml.dump(self._config, f, default_flow_style=False)
        self.config_path.chmod(0o600)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        # Environment variables win over the config file
        env_value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
        if env_value is not None:
            return env_value

        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self._config[key] = value
        self.save()

    def delete(self, key: str) -> None:
        """Delete configuration value.

        Args:
            key: Configuration key
        """
        if key in self._config:
            del self._config[key]
            self.save()

    def all(self) -> dict[str, Any]:
        """Get all configuration values from the file.

        Returns:
            dict: All configuration
        """
        return self._config.copy()

    @property
    def url(self) -> Optional[str]:
        """Get JIRA server URL."""
        return self.get("url")

    @property
    def username(self) -> Optional[str]:
        """Get JIRA username."""
        return self.get("username")

    @property
    def password(self) -> Optional[str]:
        """Get JIRA password or API token."""
        return self.get("password")

    @property
    def output_format(self) -> str:
        """Get output format (table, json, yaml)."""
        return self.get("output_format", DEFAULT_OUTPUT_FORMAT)

    @property
    def page_size(self) -> int:
        """Get search page size."""
        value = self.get("page_size", 100)
        try:
            size = int(value)
        except (TypeError, ValueError):
            return 100
        return size if size > 0 else 100
