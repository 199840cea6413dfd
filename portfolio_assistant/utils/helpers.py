"""
Helper utilities for the assistant.

Provides common functions used across components:
- Settings loading (TOML, merged over defaults)
- Default translation collaborator
"""

from pathlib import Path
from typing import Any, Dict, Optional

import toml
from loguru import logger

SETTINGS_PATH = Path.home() / ".config" / "portfolio-assistant" / "settings.toml"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "search": {
        "debounce_ms": 300,
        "merge_admin_results": False,
    },
    "holdings": {
        "range": "max",
        "fuzzy_threshold": 50,
    },
    "navigation": {
        "wrap": False,
    },
}


def identity_translate(key: str) -> str:
    """Translation stand-in: returns the key unchanged."""
    return key


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load assistant settings from a TOML file.

    Args:
        path: Settings file; defaults to ~/.config/portfolio-assistant/settings.toml

    Returns:
        Dictionary containing settings with defaults applied

    Example settings structure:
        {
            "search": {
                "debounce_ms": 300,
                "merge_admin_results": False
            },
            "holdings": {
                "range": "max",
                "fuzzy_threshold": 50
            },
            "navigation": {
                "wrap": False
            }
        }
    """
    settings_path = Path(path) if path is not None else SETTINGS_PATH

    if not settings_path.exists():
        logger.debug(f"Settings file not found at {settings_path}, using defaults")
        return _deep_merge(DEFAULT_SETTINGS, {})

    try:
        loaded = toml.load(settings_path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}; using defaults")
        return _deep_merge(DEFAULT_SETTINGS, {})

    return _deep_merge(DEFAULT_SETTINGS, loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence); base is not mutated
    """
    result = {}
    for key, value in base.items():
        result[key] = _deep_merge(value, {}) if isinstance(value, dict) else value

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
