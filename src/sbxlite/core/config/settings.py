"""
Centralized configuration for sbxlite.

Manages a `config.json` file in `~/.sbxlite/` (or `$SBXLITE_HOME`).
- If the file doesn't exist, it's created with default values.
- If the file exists, it's loaded.
- If the file is missing keys, they are added with default values and the file is updated.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, FrozenSet, Tuple

from rich.theme import Theme

from .exceptions import SbxError

logger = logging.getLogger(__name__)

# --- Default Values Definition ---

_DEFAULT_CONFIG_VALUES: Dict[str, Any] = {
    "CLIENT_INFO_PATH": "/etc/sing-box/client-info.txt",
    "CONFIG_PATH": "/etc/sing-box/config.json",
    "ENGINE_BINARY": "/usr/local/bin/sing-box",
    "RELEASES_API_URL": "https://api.github.com/repos/SagerNet/sing-box/releases",
}


def _config_dir() -> Path:
    if env_home := os.environ.get("SBXLITE_HOME"):
        return Path(env_home)
    return Path.home() / ".sbxlite"


# --- Configuration Loading and Initialization ---


def _initialize_config() -> Dict[str, Any]:
    """
    Loads configuration from the JSON file, creating or updating it as needed.

    A home directory that cannot be written to is not fatal: the defaults are
    used for the session.
    """
    config_file_path = _config_dir() / "config.json"

    try:
        config_file_path.parent.mkdir(parents=True, exist_ok=True)
        if not config_file_path.is_file():
            with config_file_path.open("w", encoding="utf-8") as f:
                json.dump(_DEFAULT_CONFIG_VALUES, f, ensure_ascii=False, indent=4)
            return dict(_DEFAULT_CONFIG_VALUES)
    except OSError as e:
        logger.debug("Settings directory unavailable (%s), using defaults", e)
        return dict(_DEFAULT_CONFIG_VALUES)

    try:
        with config_file_path.open("r", encoding="utf-8") as f:
            loaded_config = json.load(f)
    except json.JSONDecodeError as e:
        raise SbxError(
            f"Configuration file at '{config_file_path}' is corrupted. "
            "Please fix or delete it. Error: " + str(e)
        ) from e

    if not isinstance(loaded_config, dict):
        raise SbxError(f"Configuration file at '{config_file_path}' must hold a JSON object.")

    # Back-fill keys added in newer releases
    updated = False
    for key, value in _DEFAULT_CONFIG_VALUES.items():
        if key not in loaded_config:
            loaded_config[key] = value
            updated = True

    if updated:
        try:
            with config_file_path.open("w", encoding="utf-8") as f:
                json.dump(loaded_config, f, ensure_ascii=False, indent=4)
        except OSError as e:
            logger.debug("Could not update '%s': %s", config_file_path, e)

    return loaded_config


# Initialize config on module import
_config = _initialize_config()


# --- Public Configuration Variables ---

# Client info keys accepted by the loader (closed set)
CLIENT_INFO_KEYS: Tuple[str, ...] = (
    "DOMAIN",
    "UUID",
    "PUBLIC_KEY",
    "SHORT_ID",
    "SNI",
    "REALITY_PORT",
)
ALLOWED_CLIENT_INFO_KEYS: FrozenSet[str] = frozenset(CLIENT_INFO_KEYS)
CLIENT_INFO_FILE_MODE: int = 0o600

# Defaults applied before building client share links
REALITY_PORT_DEFAULT: str = "443"
SNI_DEFAULT: str = "www.microsoft.com"
REALITY_FLOW_VISION: str = "xtls-rprx-vision"
REALITY_FINGERPRINT_DEFAULT: str = "chrome"

# Engine version thresholds
MIN_ENGINE_VERSION: str = "1.8.0"  # Reality support
RECOMMENDED_ENGINE_VERSION: str = "1.12.0"  # Modern config format
MODERN_CONFIG_VERSION: str = "1.12.0"

DNS_STRATEGIES: Tuple[str, ...] = ("prefer_ipv4", "prefer_ipv6", "ipv4_only", "ipv6_only")

RELEASE_LOOKUP_TIMEOUT: float = 30.0

STATUS_STYLES: Dict[str, str] = {
    "UNKNOWN": "dim",
    "UNSUPPORTED": "bold red",
    "SUPPORTED": "yellow",
    "RECOMMENDED": "bold green",
}

DEFAULT_RICH_THEME = Theme(
    {
        "accent": "#B7B098",
        "accent.secondary": "#8C9DB5",
        "info": "#D6D3C1",
        "muted": "#4A546D",
        "success": "bold green",
        "warning": "yellow",
        "danger": "bold red",
    }
)

# Settings loaded from config.json
DEFAULT_CLIENT_INFO_PATH: str = _config["CLIENT_INFO_PATH"]
DEFAULT_CONFIG_PATH: str = _config["CONFIG_PATH"]
DEFAULT_ENGINE_BINARY: str = _config["ENGINE_BINARY"]
DEFAULT_RELEASES_API_URL: str = _config["RELEASES_API_URL"]
