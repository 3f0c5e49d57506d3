"""
app/repositories/key_value_store.py

Minimal key-value storage capability used for mapping presets.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Protocol


class KeyValueStore(Protocol):
    """
    Get/set/delete JSON-compatible values by string key.
    """

    def get(self, key: str) -> dict[str, Any] | None:
        ...

    def set(self, key: str, value: dict[str, Any]) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def keys(self, prefix: str = "") -> list[str]:
        ...


class InMemoryKeyValueStore:
    """
    Process-local store; values are copied in and out.
    """

    def __init__(self) -> None:
        self._values: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            value = self._values.get(key)
            return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: dict[str, Any]) -> None:
        with self._lock:
            self._values[key] = copy.deepcopy(value)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._values.pop(key, None) is not None

    def keys(self, prefix: str = "") -> list[str]:
        with self._lock:
            return sorted(key for key in self._values if key.startswith(prefix))
