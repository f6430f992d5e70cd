"""
Logging setup for Casus.

Handlers, formatters and per-module levels come from config/logging.json.
The root level and the optional log file come from the ``logging`` section
of the editor configuration, so one settings file controls both.
"""

import logging
import logging.config
import json
import os
import sys
from typing import Any, Dict, Optional

from casus.config_manager import ConfigManager, get_config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# The spatial index logs every insert at debug level during drags
QUIET_LOGGERS = [
    'casus.core.connection_index',
    'casus_ui.interactions',
]


def setup_logging(config_path: Optional[str] = None,
                  config: Optional[ConfigManager] = None) -> None:
    """
    Configure logging from a JSON dictConfig file plus the editor settings.

    Args:
        config_path: Path to logging config JSON file.
                    Defaults to 'config/logging.json' relative to project root.
        config: Editor configuration supplying ``logging.level``,
                ``logging.log_to_file`` and ``logging.log_file``.
                Defaults to the global configuration.
    """
    config = config or get_config()
    if config_path is None:
        package_dir = os.path.dirname(os.path.abspath(__file__))
        project_root = os.path.dirname(package_dir)
        config_path = os.path.join(project_root, 'config', 'logging.json')

    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                dict_config = json.load(f)
            logging.config.dictConfig(_apply_settings(dict_config, config))
            return
        except (json.JSONDecodeError, ValueError, KeyError) as e:
            print(f"Warning: Failed to load logging config from {config_path}: {e}")
            print("Falling back to default logging configuration.")

    _setup_default_logging(config)


def _level(config: ConfigManager) -> str:
    level = str(config.get("logging.level", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        logging.getLogger(__name__).warning(f"Unknown log level {level}, using INFO")
        return "INFO"
    return level


def _apply_settings(dict_config: Dict[str, Any], config: ConfigManager) -> Dict[str, Any]:
    """Overlay the configured root level and log file onto a dictConfig."""
    root = dict_config.setdefault("root", {})
    root["level"] = _level(config)
    if config.get("logging.log_to_file", False):
        handlers = dict_config.setdefault("handlers", {})
        formatter = next(iter(dict_config.get("formatters", {})), None)
        file_handler = {
            "class": "logging.FileHandler",
            "filename": config.get("logging.log_file", "casus.log"),
        }
        if formatter is not None:
            file_handler["formatter"] = formatter
        handlers["file"] = file_handler
        root_handlers = root.setdefault("handlers", [])
        if "file" not in root_handlers:
            root_handlers.append("file")
    return dict_config


def _setup_default_logging(config: ConfigManager) -> None:
    """Setup default logging configuration if config file is unavailable."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if config.get("logging.log_to_file", False):
        handlers.append(logging.FileHandler(config.get("logging.log_file", "casus.log")))
    logging.basicConfig(level=_level(config), format=LOG_FORMAT, handlers=handlers, force=True)

    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name, typically __name__ from the calling module.

    Returns:
        Configured logger instance.
    """
    return logging.getLogger(name)
