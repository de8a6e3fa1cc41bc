"""Configuration loading and saving."""

import logging
import shutil
from typing import Any

import yaml
from pydantic import ValidationError

from taxonpreview.config.models import PreviewConfig
from taxonpreview.system.path_resolver import PathResolver

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
        self.config_path = self.path_resolver.get_config_path()

    def load(self) -> PreviewConfig:
        """Load configuration, creating a default file when none exists.

        Returns:
            PreviewConfig: Loaded and validated configuration

        Raises:
            ValueError: If the file content does not validate
        """
        self._ensure_config_exists()
        raw_config = self._read_yaml()
        raw_config.setdefault("config_version", self.CURRENT_VERSION)
        return self._create_config_object(raw_config)

    def save(self, config: PreviewConfig) -> None:
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

        config_yaml = yaml.dump(config.model_dump(), default_flow_style=False, sort_keys=False)
        self.config_path.write_text(config_yaml)
        logger.info("Configuration saved successfully to %s", self.config_path)

    def reload(self) -> PreviewConfig:
        """Reload configuration from disk."""
        return self.load()

    def _ensure_config_exists(self) -> None:
        """Write the default configuration if the config file is missing."""
        if self.config_path.exists():
            return

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        defaults = PreviewConfig().model_dump()
        self.config_path.write_text(
            yaml.dump(defaults, default_flow_style=False, sort_keys=False)
        )
        logger.info("Created default configuration at %s", self.config_path)

    def _read_yaml(self) -> dict[str, Any]:
        """Read YAML config file.

        Returns:
            dict: Raw configuration dictionary
        """
        raw = yaml.safe_load(self.config_path.read_text()) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Configuration file {self.config_path} must contain a mapping")
        return raw

    def _create_config_object(self, raw_config: dict[str, Any]) -> PreviewConfig:
        """Create PreviewConfig object from dictionary.

        Args:
            raw_config: Configuration dictionary

        Returns:
            PreviewConfig: Typed configuration object
        """
        expected_fields = set(PreviewConfig.model_fields.keys())
        unexpected_fields = set(raw_config.keys()) - expected_fields
        if unexpected_fields:
            logger.warning("Ignoring unknown config fields: %s", sorted(unexpected_fields))

        filtered_config = {k: v for k, v in raw_config.items() if k in expected_fields}
        try:
            return PreviewConfig(**filtered_config)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            raise ValueError(f"Configuration validation failed: {', '.join(errors)}") from e
