"""
Tournament settings, stored as YAML and merged over defaults.
"""
import logging
import os

import yaml

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = 'settings.yaml'


def get_default_settings():
    """Return default settings."""
    return {
        'tournament_name': 'BT Arena',
        # None draws second places differently on every generation
        'shuffle_seed': None,
        'cascade_invalidation': False,
        'auto_advance_byes': False,
    }


def load_settings(path):
    """Load settings from a YAML file, merging with defaults."""
    defaults = get_default_settings()
    if not os.path.exists(path):
        return defaults
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning(f'Failed to parse {path}: {e}')
        return defaults
    if not data:
        return defaults
    if not isinstance(data, dict):
        logger.warning(f'Ignoring {path}: expected a mapping, got {type(data).__name__}')
        return defaults
    return {**defaults, **data}


def save_settings(path, settings):
    """Save settings to a YAML file."""
    os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(settings, f, default_flow_style=False)
