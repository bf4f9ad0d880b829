"""Cached configuration access.

``get_config`` keeps one ``Config`` per resolved file path. Runtime objects
built from a section (the shared module resolution cache, for one) register
with ``watch_section`` and are handed the new section whenever a reload of the
default config file changes it.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from loguru import logger

from kbaserpc.config.loader import get_config_path, load_config
from kbaserpc.config.schema import Config

SectionWatcher = Callable[[Any], None]

_lock = threading.RLock()
_cache: dict[str, Config] = {}
_watchers: dict[str, list[SectionWatcher]] = {}
# (path, section) -> last loaded dump, compared on reload.
_seen: dict[tuple[str, str], dict[str, Any]] = {}


def _cache_key(config_path: Path | None = None) -> str:
    return str(Path(config_path or get_config_path()).expanduser().resolve())


def watch_section(section: str, callback: SectionWatcher) -> None:
    """Call ``callback(new_section)`` when a reload changes ``section`` of the default config."""
    if section not in Config.model_fields:
        raise ValueError(f"unknown config section: {section}")
    with _lock:
        callbacks = _watchers.setdefault(section, [])
        if callback not in callbacks:
            callbacks.append(callback)


def _notify_changed_sections(key: str, config: Config) -> None:
    for section in Config.model_fields:
        value = getattr(config, section)
        current = value.model_dump()
        previous = _seen.get((key, section))
        _seen[(key, section)] = current
        if previous is None or previous == current:
            continue
        logger.debug(f"config section '{section}' changed on reload of {key}")
        for callback in list(_watchers.get(section, ())):
            callback(value)


def get_config(*, config_path: Path | None = None, force_reload: bool = False) -> Config:
    """Return the config for ``config_path`` (default file when omitted), loading it at most once."""
    key = _cache_key(config_path)
    with _lock:
        if force_reload or key not in _cache:
            _cache[key] = load_config(Path(key))
            if key == _cache_key():
                _notify_changed_sections(key, _cache[key])
        return _cache[key]


def clear_config_cache(*, config_path: Path | None = None) -> None:
    """Forget one loaded config (or all); the next ``get_config`` reloads from disk."""
    with _lock:
        if config_path is None:
            _cache.clear()
            return
        _cache.pop(_cache_key(config_path), None)
