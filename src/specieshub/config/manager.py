"""Configuration loading and saving."""

import logging
import shutil
from typing import Any

import yaml
from pydantic import ValidationError

from specieshub.config.models import DEFAULT_SESSION_SECRET, SpeciesHubConfig
from specieshub.system.path_resolver import PathResolver

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration loading, saving, and validation."""

    CURRENT_VERSION = "1.0.0"

    def __init__(self, path_resolver: PathResolver | None = None):
        """Initialize ConfigManager.

        Args:
            path_resolver: Optional PathResolver instance. If None, creates a new one.
        """
        self.path_resolver = path_resolver or PathResolver()
        self.config_path = self.path_resolver.get_specieshub_config_path()

    def load(self) -> SpeciesHubConfig:
        """Load configuration with defaults and validation.

        Returns:
            SpeciesHubConfig: Loaded and validated configuration

        Raises:
            ValueError: If the file content does not validate
        """
        self._ensure_config_exists()

        raw_config = self._read_yaml()
        config = self._create_config_object(raw_config)

        if config.session.secret_key == DEFAULT_SESSION_SECRET:
            logger.warning(
                "Using the default session secret; set session.secret_key in %s", self.config_path
            )
        return config

    def save(self, config: SpeciesHubConfig) -> None:
        """Save configuration to file with backup.

        Args:
            config: Configuration to save

        Raises:
            PermissionError: If config file cannot be written
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            backup_path = self.config_path.with_suffix(".yaml.backup")
            try:
                shutil.copy2(self.config_path, backup_path)
            except PermissionError:
                logger.warning("Could not create backup at %s", backup_path)

        config_yaml = yaml.dump(
            self._config_to_dict(config), default_flow_style=False, sort_keys=False
        )
        self.config_path.write_text(config_yaml)
        logger.info("Configuration saved successfully to %s", self.config_path)

    def reload(self) -> SpeciesHubConfig:
        """Reload configuration from disk."""
        return self.load()

    def _ensure_config_exists(self) -> None:
        """Ensure config file exists, create from defaults if needed."""
        if self.config_path.exists():
            return

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        defaults = self._config_to_dict(SpeciesHubConfig(config_version=self.CURRENT_VERSION))
        self.config_path.write_text(
            yaml.dump(defaults, default_flow_style=False, sort_keys=False)
        )
        logger.info("Created default configuration at %s", self.config_path)

    def _read_yaml(self) -> dict[str, Any]:
        """Read YAML config file.

        Returns:
            dict: Raw configuration dictionary
        """
        config_text = self.config_path.read_text()
        return yaml.safe_load(config_text) or {}

    def _create_config_object(self, raw_config: dict[str, Any]) -> SpeciesHubConfig:
        """Create SpeciesHubConfig object from dictionary.

        Unknown top-level keys are dropped with a warning so that an old file
        does not prevent start-up.
        """
        expected_fields = set(SpeciesHubConfig.model_fields.keys())
        unexpected_fields = set(raw_config.keys()) - expected_fields
        if unexpected_fields:
            logger.warning("Ignoring unexpected config fields: %s", sorted(unexpected_fields))

        filtered_config = {k: v for k, v in raw_config.items() if k in expected_fields}
        try:
            return SpeciesHubConfig(**filtered_config)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            ]
            raise ValueError(f"Configuration validation failed: {', '.join(errors)}") from e

    def _config_to_dict(self, config: SpeciesHubConfig) -> dict[str, Any]:
        """Convert SpeciesHubConfig to dictionary for serialization."""
        return config.model_dump()
