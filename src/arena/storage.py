"""
Key-value persistence on YAML files.

Each key is one ``<key>.yaml`` file in the data directory. Stages and the
athlete roster live under separate keys and are saved independently.
"""
import logging
import os
from typing import List

import yaml
from filelock import FileLock

from arena.models import Athlete, Stage

logger = logging.getLogger(__name__)

STAGES_KEY = 'stages'
ATHLETES_KEY = 'athletes'


class YamlStore:
    def __init__(self, data_dir, lock_timeout=10):
        self.data_dir = data_dir
        os.makedirs(data_dir, exist_ok=True)
        # Held by callers around load-modify-save sequences
        self.lock = FileLock(os.path.join(data_dir, '.lock'), timeout=lock_timeout)

    def _path(self, key):
        return os.path.join(self.data_dir, f'{key}.yaml')

    def load(self, key):
        """Return the document stored under ``key``, or None if absent or unreadable."""
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.warning(f'Failed to parse {path}: {e}')
            return None

    def save(self, key, document):
        """Replace the document stored under ``key``."""
        path = self._path(key)
        tmp_path = path + '.tmp'
        with open(tmp_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(document, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
        os.replace(tmp_path, path)

    def delete(self, key):
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)


def load_stages(store: YamlStore) -> List[Stage]:
    data = store.load(STAGES_KEY)
    if not data:
        return []
    return [Stage.from_dict(s) for s in data]


def save_stages(store: YamlStore, stages: List[Stage]):
    store.save(STAGES_KEY, [s.to_dict() for s in stages])


def load_athletes(store: YamlStore) -> List[Athlete]:
    data = store.load(ATHLETES_KEY)
    if not data:
        return []
    return [Athlete.from_dict(a) for a in data]


def save_athletes(store: YamlStore, athletes: List[Athlete]):
    store.save(ATHLETES_KEY, [a.to_dict() for a in athletes])
