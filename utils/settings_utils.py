"""
Utility module for managing application settings.

Settings are seeded from DEFAULT_SETTINGS, overridden by FLEET_<NAME>
environment variables, and can be changed at runtime through update_setting.
Values keep the type of their default so numeric settings stay numeric.
"""

import logging
import math
import os
import threading
from config import DEFAULT_SETTINGS

_settings = {}
_lock = threading.Lock()

# Smallest accepted value of numeric settings; the poll interval must also be non-zero
_MINIMUMS = {
    'refresh_interval_seconds': 0,
    'stop_speed_threshold': 0,
    'inspection_warning_days': 0,
    'simplify_min_samples': 1,
    'simplify_target_points': 1,
    'max_routing_waypoints': 2,
    'notification_history_size': 1,
}

def _check_range(setting_name, value):
    if not math.isfinite(value):
        raise ValueError(f"{setting_name} must be a finite number, got {value}")
    minimum = _MINIMUMS.get(setting_name)
    if minimum is None:
        return
    if value < minimum or (setting_name == 'refresh_interval_seconds' and value == 0):
        raise ValueError(f"{setting_name} is out of range: {value}")

def _convert(setting_name, value):
    default = DEFAULT_SETTINGS.get(setting_name)
    if isinstance(default, bool):
        return str(value).lower() in ('1', 'true', 'yes', 'on')
    if isinstance(default, (int, float)):
        converted_value = float(value)
        _check_range(setting_name, converted_value)
        logging.debug(f"Converted setting {setting_name} to number: {converted_value}")
        return converted_value
    return str(value)

def load_settings():
    """
    (Re)build the settings store from defaults and environment overrides.

    Returns:
        dict: Copy of the loaded settings
    """
    with _lock:
        _settings.clear()
        for name, default in DEFAULT_SETTINGS.items():
            env_value = os.getenv(f"FLEET_{name.upper()}")
            if env_value is None:
                _settings[name] = default
                continue
            try:
                _settings[name] = _convert(name, env_value)
                logging.info(f"Setting {name} overridden from environment: {_settings[name]}")
            except ValueError:
                logging.warning(f"Ignoring invalid environment value for {name}: {env_value!r}")
                _settings[name] = default
        return dict(_settings)

def _ensure_loaded():
    if not _settings:
        load_settings()

def get_setting(setting_name, default_value=None):
    logging.debug(f"Retrieving setting: {setting_name}")
    _ensure_loaded()
    with _lock:
        if setting_name in _settings:
            return _settings[setting_name]
    logging.info(f"Setting {setting_name} not found, returning default value: {default_value}")
    return default_value

def get_all_settings():
    _ensure_loaded()
    with _lock:
        return dict(_settings)

def update_setting(setting_name, value):
    logging.info(f"Attempting to update setting: {setting_name} to value: {value}")
    if setting_name not in DEFAULT_SETTINGS:
        logging.warning(f"Unknown setting: {setting_name}")
        return False
    try:
        converted_value = _convert(setting_name, value)
    except (TypeError, ValueError) as e:
        logging.error(f"Error updating setting {setting_name}: {e}")
        return False
    _ensure_loaded()
    with _lock:
        _settings[setting_name] = converted_value
    logging.info(f"Successfully updated setting: {setting_name}")
    return True
