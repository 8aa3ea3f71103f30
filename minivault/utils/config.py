"""Configuration settings for the application."""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from ..inventory.models import DEFAULT_CATEGORIES, SORTABLE_KEYS

logger = logging.getLogger("minivault.config")

# Default configuration structure
DEFAULT_CONFIG = {
    'storage': {
        'backend': 'json',  # memory, json or sql
        'path': '~/.local/share/minivault/history.json',
        'url': 'sqlite:///minivault.db',
        'key': 'minivault-history'
    },
    'view': {
        'sort_key': 'name',
        'sort_direction': 'asc'
    },
    'categories': list(DEFAULT_CATEGORIES)
}

# Environment variables that override the storage section
ENV_OVERRIDES = {
    'MINIVAULT_STORAGE_BACKEND': 'backend',
    'MINIVAULT_STORAGE_PATH': 'path',
    'MINIVAULT_DB_URL': 'url',
    'MINIVAULT_HISTORY_KEY': 'key',
}


class Config:
    """Configuration manager."""

    def __init__(self, config_dir: Optional[Path] = None, use_dotenv: bool = True):
        """Initialize configuration."""
        if use_dotenv:
            load_dotenv()
        self.config_dir = Path(config_dir) if config_dir else Path.home() / '.config' / 'minivault'
        self.config_file = self.config_dir / 'config.json'
        self.config = {}  # Start empty, load will merge with defaults
        self.load_config()
        self._ensure_defaults()

    def _ensure_defaults(self):
        """Ensure all default keys exist in the loaded config."""
        changed = False
        for key, default_value in DEFAULT_CONFIG.items():
            if key not in self.config:
                self.config[key] = copy.deepcopy(default_value)
                changed = True
            elif isinstance(default_value, dict):
                for sub_key, sub_default_value in default_value.items():
                    if sub_key not in self.config[key]:
                        self.config[key][sub_key] = sub_default_value
                        changed = True
        if changed:
            self.save_config()

    def load_config(self):
        """Load configuration from file."""
        try:
            if self.config_file.exists():
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    self.config = json.load(f)
                if not isinstance(self.config, dict):
                    raise ValueError("config root must be an object")
            else:
                # If no config file, start with defaults
                self.config = copy.deepcopy(DEFAULT_CONFIG)
                self.save_config()
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Error decoding config file %s (%s). Starting with defaults.", self.config_file, e)
            self.config = copy.deepcopy(DEFAULT_CONFIG)
        except OSError as e:
            logger.warning("Error loading config: %s. Starting with defaults.", e)
            self.config = copy.deepcopy(DEFAULT_CONFIG)

    def save_config(self):
        """Save configuration to file."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=4)
        except OSError as e:
            logger.error("Error saving config: %s", e)

    def get_storage_config(self) -> Dict:
        """Storage section with environment overrides applied."""
        storage = dict(self.config.get('storage', DEFAULT_CONFIG['storage']))
        for env_name, field in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                storage[field] = value
        return storage

    def get_view_config(self) -> Dict:
        return self.config.get('view', DEFAULT_CONFIG['view'])

    def set_default_sort(self, key: str, direction: str = 'asc'):
        if key not in SORTABLE_KEYS:
            raise ValueError(f"Cannot sort by {key!r}")
        self.config.setdefault('view', {}).update(sort_key=key, sort_direction=direction)
        self.save_config()

    # --- Category registry ---

    def get_categories(self) -> List[str]:
        return list(self.config.get('categories', DEFAULT_CONFIG['categories']))

    def set_categories(self, names: List[str]):
        self.config['categories'] = list(names)
        self.save_config()
