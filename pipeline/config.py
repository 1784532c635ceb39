"""
Location and loading of the JSON data files under config/.

The directory can be moved with AQI_CONFIG_DIR.
"""

import json
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "config")


def config_path(filename: str) -> str:
    return os.path.join(os.environ.get("AQI_CONFIG_DIR", DEFAULT_CONFIG_DIR), filename)


def load_json_config(filename: str, required: bool = True, default: Any = None) -> Any:
    """
    Load a JSON file from the config directory.

    Raises:
        FileNotFoundError: If the file is missing and required is True.
        Optional files that are missing return ``default``.
    """
    path = config_path(filename)
    if not os.path.exists(path):
        if required:
            raise FileNotFoundError(f"CRITICAL: {filename} not found at {path}.")
        logger.warning("%s not found at %s, using empty defaults", filename, path)
        return default

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    logger.info("Config loaded from %s", path)
    return data
