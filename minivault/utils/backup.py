"""Whole-history backup files, including undo and redo stacks."""

import json
from pathlib import Path
from typing import Optional

import yaml

from ..inventory.errors import RestoreShapeError
from ..inventory.history import history_from_dict
from ..inventory.models import History

YAML_SUFFIXES = ('.yaml', '.yml')


def backup_format(path, fmt: Optional[str] = None) -> str:
    if fmt:
        fmt = fmt.lower()
        if fmt not in ('json', 'yaml'):
            raise ValueError(f"Unsupported backup format: {fmt}")
        return fmt
    return 'yaml' if Path(path).suffix.lower() in YAML_SUFFIXES else 'json'


def write_backup(path, history: History, fmt: Optional[str] = None) -> Path:
    """Write ``history`` to ``path`` as JSON or YAML."""
    path = Path(path)
    data = history.to_dict()
    with open(path, 'w', encoding='utf-8') as f:
        if backup_format(path, fmt) == 'yaml':
            yaml.safe_dump(data, f, default_flow_style=False, indent=2, allow_unicode=True, sort_keys=False)
        else:
            json.dump(data, f, indent=2, ensure_ascii=False)
    return path


def read_backup(path, fmt: Optional[str] = None) -> History:
    """Load and validate a backup file; anything unusable is a RestoreShapeError."""
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if backup_format(path, fmt) == 'yaml':
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise RestoreShapeError(f"Could not read backup {path}: {e}")
    return history_from_dict(data)
