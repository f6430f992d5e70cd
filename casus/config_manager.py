"""
Simple configuration management for Casus.

Settings live in a JSON file and are read with dot-separated key paths,
e.g. ``get("connections.snap_radius")``.
"""

import json
import os
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'config', 'default_config.json')


class ConfigManager:
    """Simple configuration manager for editor settings."""

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or DEFAULT_CONFIG_FILE
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file."""
        try:
            if os.path.exists(self.config_file):
                with open(self.config_file, 'r') as f:
                    self._config = json.load(f)
                logger.info(f"Configuration loaded from {self.config_file}")
            else:
                logger.warning(f"Configuration file {self.config_file} not found, using defaults")
                self._config = self._get_default_config()
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading configuration: {e}")
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        from config.connection_constants import BUMP_DELAY_MS, SNAP_RADIUS

        return {
            "connections": {
                "snap_radius": SNAP_RADIUS,
                "bump_delay_ms": BUMP_DELAY_MS
            },
            "layout": {
                "rtl": False
            },
            "logging": {
                "level": "INFO",
                "log_to_file": True,
                "log_file": "casus.log"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Path to the configuration key (e.g., "connections.snap_radius")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self._config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def set(self, key_path: str, value: Any) -> bool:
        """
        Set configuration value using dot notation.

        Args:
            key_path: Path to the configuration key
            value: Value to set

        Returns:
            True if successful, False if a parent key holds a non-dict value
        """
        keys = key_path.split('.')
        config_ref = self._config

        # Navigate to the parent of the target key
        for key in keys[:-1]:
            if key not in config_ref:
                config_ref[key] = {}
            config_ref = config_ref[key]
            if not isinstance(config_ref, dict):
                logger.error(f"Error setting config key {key_path}: {key} is not a section")
                return False

        config_ref[keys[-1]] = value
        return True

    def save(self) -> bool:
        """Save current configuration to file."""
        try:
            directory = os.path.dirname(self.config_file)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(self.config_file, 'w') as f:
                json.dump(self._config, f, indent=2)

            logger.info(f"Configuration saved to {self.config_file}")
            return True

        except OSError as e:
            logger.error(f"Error saving configuration: {e}")
            return False

    def apply_to_workspace(self, workspace: Any) -> None:
        """Apply configuration settings to a live workspace."""
        workspace.snap_radius = self.get("connections.snap_radius", 15)
        workspace.rtl = self.get("layout.rtl", False)
        workspace.bump_scheduler.delay_ms = self.get("connections.bump_delay_ms", 250)
        logger.info("Configuration applied to workspace")

    def validate_config(self) -> tuple[bool, list[str]]:
        """Validate current configuration."""
        errors = []

        snap_radius = self.get("connections.snap_radius")
        if snap_radius is not None and snap_radius <= 0:
            errors.append("Connection snap_radius must be positive")

        bump_delay = self.get("connections.bump_delay_ms")
        if bump_delay is not None and bump_delay < 0:
            errors.append("Connection bump_delay_ms cannot be negative")

        rtl = self.get("layout.rtl")
        if rtl is not None and not isinstance(rtl, bool):
            errors.append("Layout rtl must be true or false")

        return len(errors) == 0, errors

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration as dictionary."""
        return self._config.copy()

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults."""
        self._config = self._get_default_config()
        logger.info("Configuration reset to defaults")


# Global configuration instance for easy access
_global_config: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Get global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = ConfigManager()
    return _global_config


def reload_config(config_file: Optional[str] = None) -> ConfigManager:
    """Reload configuration from file."""
    global _global_config
    _global_config = ConfigManager(config_file)
    return _global_config
