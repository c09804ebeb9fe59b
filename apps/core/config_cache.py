"""Small TTL cache for YAML lookup tables under ``config/``."""

from __future__ import annotations

import copy
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    payload: Dict[str, Any]
    mtime: Optional[float]
    loaded_at: float

    def usable(self, mtime: Optional[float], now: float, ttl: Optional[int]) -> bool:
        if self.mtime != mtime:
            return False
        return ttl is None or now - self.loaded_at <= ttl


_entries: Dict[str, _Entry] = {}
_lock = threading.Lock()


def _file_mtime(path: str) -> Optional[float]:
    try:
        return os.path.getmtime(path)
    except OSError:
        return None


def _read_mapping(path: str, default: Dict[str, Any]) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = yaml.safe_load(fh)
    except FileNotFoundError:
        logger.debug("%s not found, using built-in defaults", path)
        return default
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Cannot read %s (%s), using built-in defaults", path, exc)
        return default

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        logger.warning("%s must contain a mapping, got %s", path, type(payload).__name__)
        return default
    return payload


def load_yaml_cached(
    path: str,
    *,
    default: Optional[Dict[str, Any]] = None,
    ttl_seconds: Optional[int] = None,
) -> Dict[str, Any]:
    """Return the mapping stored in ``path``, re-reading it once the TTL expires
    or the file changes on disk.

    Callers get a deep copy and may mutate it. ``default`` is used when the file
    is missing, unreadable or not a mapping.
    """
    from apps.core.config import settings

    ttl = settings.config_cache_ttl_s if ttl_seconds is None else ttl_seconds
    key = os.path.abspath(path)
    mtime = _file_mtime(key)
    now = time.time()

    with _lock:
        entry = _entries.get(key)
        if entry is None or not entry.usable(mtime, now, ttl):
            entry = _Entry(_read_mapping(key, default or {}), mtime, now)
            _entries[key] = entry
        return copy.deepcopy(entry.payload)


def clear_yaml_cache() -> None:
    with _lock:
        _entries.clear()
