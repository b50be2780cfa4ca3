"""
Configuration loader for crxq_catalog.

This module handles loading configuration from configuration files and
environment variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .models import CatalogSettings


class ConfigLoader:
    """Configuration loader with support for multiple sources."""

    # Environment variable -> nested config key path
    ENV_MAPPINGS: Dict[str, Tuple[str, ...]] = {
        # Storage
        "STORAGE_ENDPOINT": ("storage", "endpoint"),
        "STORAGE_BUCKET": ("storage", "bucket"),
        "STORAGE_CREDENTIAL": ("storage", "credential"),
        "CATALOG_TABLE": ("storage", "catalog_table"),
        # Loader
        "STRATEGIES": ("loader", "strategies"),
        "LOAD_TIMEOUT": ("loader", "load_timeout"),
        # Traversal
        "TRAVERSAL_WORKERS": ("traversal", "max_workers"),
        "TRAVERSAL_PAGE_SIZE": ("traversal", "page_size"),
        # Retry
        "MAX_RETRIES": ("retry", "max_attempts"),
        # HTTP
        "VERIFY_SSL": ("http", "verify_ssl"),
        "TOTAL_TIMEOUT": ("http", "total_timeout"),
        # Logging
        "LOG_LEVEL": ("logging", "level"),
        "LOG_FILE": ("logging", "file_path"),
        "LOG_FORMAT": ("logging", "format"),
    }

    def __init__(self, env_prefix: str = "CRXQ_") -> None:
        """Initialize configuration loader."""
        self.config_paths = [
            Path("crxq_catalog.yaml"),
            Path("crxq_catalog.yml"),
            Path("crxq_catalog.json"),
            Path("config/crxq_catalog.yaml"),
            Path("config/crxq_catalog.yml"),
            Path("config/crxq_catalog.json"),
            Path.home() / ".crxq_catalog" / "config.yaml",
            Path.home() / ".crxq_catalog" / "config.yml",
            Path.home() / ".crxq_catalog" / "config.json",
        ]

        # Environment variable prefix
        self.env_prefix = env_prefix

    def load_config(
        self,
        config_file: Optional[Union[str, Path]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> CatalogSettings:
        """
        Load configuration from all available sources.

        Environment variables override file values.

        Args:
            config_file: Specific config file to load
            environ: Environment mapping (defaults to ``os.environ``)

        Returns:
            CatalogSettings instance with merged configuration

        Raises:
            ConfigurationError: If a file cannot be parsed or values are invalid
        """
        config_data: Dict[str, Any] = {}

        file_config = self._load_from_file(config_file)
        if file_config:
            config_data.update(file_config)

        env_config = self._load_from_environment(environ)
        if env_config:
            config_data = self._deep_merge(config_data, env_config)

        try:
            return CatalogSettings(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def _load_from_file(
        self, config_file: Optional[Union[str, Path]] = None
    ) -> Optional[Dict[str, Any]]:
        """Load configuration from file."""
        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ConfigurationError(f"Config file not found: {config_path}")
            return self._parse_config_file(config_path)

        for config_path in self.config_paths:
            if config_path.exists():
                return self._parse_config_file(config_path)

        return None

    def _parse_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Parse configuration file based on extension."""
        suffix = config_path.suffix.lower()
        if suffix not in (".yaml", ".yml", ".json"):
            raise ConfigurationError(
                f"Unsupported config file format: {config_path.suffix}"
            )
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                if suffix == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to parse config file {config_path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")
        return data

    def _load_from_environment(
        self, environ: Optional[Mapping[str, str]] = None
    ) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        environ = os.environ if environ is None else environ
        config: Dict[str, Any] = {}

        for suffix, config_path in self.ENV_MAPPINGS.items():
            value = environ.get(f"{self.env_prefix}{suffix}")
            if value is None or value == "":
                continue

            # Values stay strings; pydantic coerces them to the field types
            current = config
            for key in config_path[:-1]:
                current = current.setdefault(key, {})
            current[config_path[-1]] = value

        return config

    def _deep_merge(
        self, base: Dict[str, Any], override: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def save_config(
        self,
        config: CatalogSettings,
        config_file: Union[str, Path],
        include_secrets: bool = False,
    ) -> None:
        """Save configuration to file; the credential is written only on request."""
        config_path = Path(config_file)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        config_data = config.model_dump(mode="json")
        credential = config.storage.credential
        if include_secrets and credential is not None:
            config_data["storage"]["credential"] = credential.get_secret_value()
        else:
            config_data["storage"].pop("credential", None)

        with open(config_path, "w", encoding="utf-8") as f:
            suffix = config_path.suffix.lower()
            if suffix in (".yaml", ".yml"):
                yaml.safe_dump(config_data, f, default_flow_style=False, indent=2)
            elif suffix == ".json":
                json.dump(config_data, f, indent=2, default=str)
            else:
                raise ConfigurationError(
                    f"Unsupported config file format: {config_path.suffix}"
                )


def load_settings(config_file: Optional[Union[str, Path]] = None) -> CatalogSettings:
    """Load settings from the default sources."""
    return ConfigLoader().load_config(config_file)
