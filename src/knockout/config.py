"""
Tournament settings, read from YAML and merged with defaults.
"""
import logging
import os

import yaml

from .errors import InvalidInput

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = 'KNOCKOUT_SETTINGS'


def get_default_settings():
    """Return default settings."""
    return {
        'die_sides': 6,
        'min_participants': 1,
        'max_participants': None,
        'organizer_can_play': True,
        'log_level': 'INFO',
    }


def validate_settings(settings):
    """Raise InvalidInput for values no tournament can run with."""
    for key in ('die_sides', 'min_participants'):
        value = settings[key]
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidInput(f"Setting '{key}' must be an integer, got {value!r}")
    if settings['die_sides'] < 2:
        raise InvalidInput("Setting 'die_sides' must be at least 2")
    if settings['min_participants'] < 1:
        raise InvalidInput("Setting 'min_participants' must be at least 1")

    cap = settings['max_participants']
    if cap is not None:
        if not isinstance(cap, int) or isinstance(cap, bool):
            raise InvalidInput(f"Setting 'max_participants' must be an integer, got {cap!r}")
        if cap < settings['min_participants']:
            raise InvalidInput("Setting 'max_participants' is below 'min_participants'")

    if logging.getLevelName(str(settings['log_level']).upper()) not in (
        logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL
    ):
        raise InvalidInput(f"Unknown log level: {settings['log_level']!r}")
    return settings


def load_settings(path=None):
    """Load settings from a YAML file, merging with defaults."""
    defaults = get_default_settings()
    path = path or os.environ.get(SETTINGS_ENV_VAR)
    if not path or not os.path.exists(path):
        return validate_settings(defaults)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning(f'Failed to parse {path}: {e}')
        return validate_settings(defaults)

    if not data:
        return validate_settings(defaults)
    if not isinstance(data, dict):
        raise InvalidInput(f'{path} must contain a mapping of settings')

    # Merge with defaults to ensure all keys exist
    for key, value in defaults.items():
        if key not in data:
            data[key] = value
    return validate_settings(data)
