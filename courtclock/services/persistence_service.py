"""
Persistence service for the Courtside Match Clock application.

This module provides the key/value store the session persists into, and the
tolerant ``load`` policy that lets stored records survive schema changes.
"""
import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def _kind(value: Any) -> str:
    """Classify a decoded JSON value the way a loose type check would."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (dict, list)) or value is None:
        return "object"
    return type(value).__name__


def merge_with_default(raw: Optional[str], default: Any) -> Any:
    """
    Decode ``raw`` and reconcile it with ``default``.

    Args:
        raw: Serialised value as stored, or None when nothing is stored
        default: Value to fall back on; its shape decides the merge policy

    Returns:
        - ``default`` when nothing is stored or ``raw`` does not parse
        - for a list default: the stored list verbatim, or ``default`` if
          the stored value is not a list
        - for a dict default: a copy of ``default`` where every key whose
          stored value is present and not null is overridden
        - for a primitive default: the stored value if its kind matches
    """
    if not raw:
        return default
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.debug("Discarding malformed stored value: %s", e)
        return default

    if isinstance(default, list):
        return parsed if isinstance(parsed, list) else default

    if isinstance(default, dict):
        merged = copy.deepcopy(default)
        if not isinstance(parsed, dict):
            return merged
        for key in default:
            if parsed.get(key) is not None:
                merged[key] = parsed[key]
        return merged

    if parsed is not None and _kind(parsed) == _kind(default):
        return parsed
    return default


class PersistenceStore(ABC):
    """
    Key/value string storage with typed load/save on top.

    Backends implement ``get_item`` and ``set_item``; values are stored as
    JSON text so every backend sees the same encoding.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the raw stored string for ``key``, or None."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store the raw string ``value`` under ``key``."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass

    def load(self, key: str, default: Any) -> Any:
        """Load ``key`` applying the merge policy of ``merge_with_default``."""
        try:
            raw = self.get_item(key)
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s: %s", key, e)
            return default
        return merge_with_default(raw, default)

    def save(self, key: str, value: Any) -> None:
        """
        Serialise the full value and store it under ``key``.

        Raises:
            OSError: If the backend cannot be written
        """
        self.set_item(key, json.dumps(value))


class MemoryStore(PersistenceStore):
    """In-process store, used for tests and headless sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStore(PersistenceStore):
    """
    Store backed by a single JSON file mapping keys to serialised values.

    Every write rewrites the whole file through a temporary file and
    ``os.replace`` so a crash never leaves a half-written store behind.
    """

    def __init__(self, file_path: str):
        self.file_path = file_path
        self._items: Dict[str, str] = self._read_file()

    def _read_file(self) -> Dict[str, str]:
        if not os.path.exists(self.file_path):
            return {}
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable store %s: %s", self.file_path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store %s: top level is not an object", self.file_path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_file(self) -> None:
        directory = os.path.dirname(self.file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

        fd, tmp_path = tempfile.mkstemp(dir=directory or ".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._items, f, indent=2)
            os.replace(tmp_path, self.file_path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value
        self._write_file()

    def remove_item(self, key: str) -> None:
        if self._items.pop(key, None) is not None:
            self._write_file()
