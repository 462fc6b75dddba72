"""
Settings for Station Directory

Settings live in station_directory_settings.json (override the path with
the STATION_DIRECTORY_SETTINGS environment variable). Missing keys fall
back to DEFAULT_SETTINGS, so a missing file means "run with defaults".

Example:
    {
        "database": {"file": "stations.db"},
        "api": {"host": "0.0.0.0", "port": 5000, "debug": false},
        "rate_limits": {"feedback_window_minutes": 60, "interaction_cooldown_seconds": 10},
        "quality": {"enabled": true, "recalculate_hour": 3, "recalculate_minute": 0},
        "logging": {"file": "station_directory.log", "console_level": "INFO", "file_level": "ERROR"}
    }
"""

import os
import copy
import json
import logging

logger = logging.getLogger(__name__)

SETTINGS_FILE = 'station_directory_settings.json'
SETTINGS_ENV_VAR = 'STATION_DIRECTORY_SETTINGS'

DEFAULT_SETTINGS = {
    'database': {
        'file': 'stations.db',
    },
    'api': {
        'host': '0.0.0.0',
        'port': 5000,
        'debug': False,
    },
    'rate_limits': {
        'feedback_window_minutes': 60,
        'interaction_cooldown_seconds': 10,
        'prune_interval_minutes': 10,
    },
    'quality': {
        'enabled': True,
        'recalculate_hour': 3,
        'recalculate_minute': 0,
    },
    'logging': {
        'file': 'station_directory.log',
        'max_bytes': 10485760,
        'backup_count': 5,
        'console_level': 'INFO',
        'file_level': 'ERROR',
    },
}


def get_settings_path():
    """Get the settings file path (environment override or default)"""
    return os.environ.get(SETTINGS_ENV_VAR, SETTINGS_FILE)


def _merge(defaults, overrides):
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(path=None):
    """Load settings merged over the defaults

    Args:
        path: Settings file path (default: get_settings_path())

    Returns:
        Settings dict (defaults if the file is missing or unreadable)
    """
    settings_file = path or get_settings_path()

    if not os.path.exists(settings_file):
        logger.debug(f"No settings file at {settings_file}, using defaults")
        return copy.deepcopy(DEFAULT_SETTINGS)

    try:
        with open(settings_file, 'r') as f:
            overrides = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Error loading settings from {settings_file}: {e}")
        return copy.deepcopy(DEFAULT_SETTINGS)

    if not isinstance(overrides, dict):
        logger.error(f"Settings file {settings_file} must contain a JSON object, using defaults")
        return copy.deepcopy(DEFAULT_SETTINGS)

    return _merge(DEFAULT_SETTINGS, overrides)


def save_settings(settings_dict, path=None):
    """Save settings to disk

    Returns:
        True if saved successfully, False otherwise
    """
    settings_file = path or get_settings_path()

    try:
        with open(settings_file, 'w') as f:
            json.dump(settings_dict, f, indent=2)
        logger.info(f"Settings saved to {settings_file}")
        return True
    except OSError as e:
        logger.error(f"Error saving settings: {e}")
        return False


def get_setting(settings, dotted_key, default=None):
    """Look up a nested setting by dotted key

    Example:
        get_setting(settings, 'rate_limits.feedback_window_minutes', 60)
    """
    value = settings or {}
    for part in dotted_key.split('.'):
        if not isinstance(value, dict) or part not in value:
            return default
        value = value[part]
    return value
