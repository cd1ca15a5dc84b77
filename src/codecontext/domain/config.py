from __future__ import annotations

"""
Configuration Domain Management.

Dict-based run configuration with defaults and an optional JSON file of
user preferences ('~/.codecontext/config.json'). Command line overrides
are merged on top by the CLI.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from codecontext.core.pipeline.components.filters import (
    default_exclude_patterns,
    default_extensions,
)
from codecontext.domain.constants import (
    CURRENT_CONFIG_VERSION,
    DEFAULT_MODEL_KEY,
    DEFAULT_OUTPUT_DIR_NAME,
)
from codecontext.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"

# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------

def get_default_config() -> Dict[str, Any]:
    """
    Generate the default run configuration.

    Returns:
        Dict[str, Any]: Default values for every supported key.
    """
    return {
        # IO Paths
        "input_path": os.getcwd(),
        "output_dir_name": DEFAULT_OUTPUT_DIR_NAME,

        # Rewriting
        "remove_comments": False,
        "remove_bodies": False,

        # Output Mode
        "dry_run": False,
        "single_file": False,
        "show_stats": True,

        # Filtering
        "extensions": default_extensions(),
        "exclude_patterns": default_exclude_patterns(),
        "respect_gitignore": False,

        # Token Estimation
        "count_tokens": False,
        "target_model": DEFAULT_MODEL_KEY,
    }


def get_config_file_path() -> str:
    """Default location of the user configuration file."""
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load user preferences merged over the defaults.

    A missing file yields the defaults. An unreadable or malformed file is
    logged and also yields the defaults; validation of individual values
    is left to validate_config().

    Args:
        path: Explicit JSON file; None selects '~/.codecontext/config.json'.

    Returns:
        Dict[str, Any]: Configuration dictionary.
    """
    config = get_default_config()
    config_path = path or get_config_file_path()

    if not os.path.exists(config_path):
        logger.debug(f"Config file not found at '{config_path}'. Using defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config '{config_path}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning(f"Ignoring config '{config_path}': top level must be an object.")
        return config

    version = data.pop("version", CURRENT_CONFIG_VERSION)
    if version != CURRENT_CONFIG_VERSION:
        logger.info(f"Config version {version} differs from {CURRENT_CONFIG_VERSION}; merging known keys.")

    for key, value in data.items():
        if key in config:
            config[key] = value
        else:
            logger.warning(f"Ignoring unknown config key '{key}' in '{config_path}'")
    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> str:
    """
    Persist a configuration dictionary as JSON.

    Args:
        config: Values to store; 'input_path' is not persisted.
        path: Target file; None selects the default location.

    Returns:
        str: Path written.

    Raises:
        OSError: If the file cannot be written.
    """
    config_path = path or get_config_file_path()
    payload = {k: v for k, v in config.items() if k != "input_path"}
    payload["version"] = CURRENT_CONFIG_VERSION

    parent = os.path.dirname(os.path.abspath(config_path))
    os.makedirs(parent, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=4)

    logger.debug(f"Configuration saved to {config_path}")
    return config_path
