"""
Flat string-keyed key-value adapter.

Values are JSON-like (dicts, lists, scalars). Reads hand back copies so a
caller mutating a loaded value never changes what is stored.
"""
from __future__ import annotations

import copy
import threading
from abc import ABC, abstractmethod
from typing import Any


class KVStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Any | None:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*; deleting an absent key is not an error."""

    @abstractmethod
    def get_by_prefix(self, prefix: str) -> list[Any]:
        """Return the values of every key starting with *prefix*."""

    def set_if_absent(self, key: str, value: Any) -> bool:
        """Store *value* only when *key* is absent. Returns ``True`` if stored.

        This fallback is a plain check-then-set and is NOT atomic: two
        concurrent callers can both see the key missing and both write.
        Backends with a conditional put should override it.
        """
        if self.get(key) is not None:
            return False
        self.set(key, value)
        return True


class InMemoryKVStore(KVStore):
    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            value = self._data.get(key)
        return copy.deepcopy(value)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def get_by_prefix(self, prefix: str) -> list[Any]:
        with self._lock:
            values = [v for k, v in self._data.items() if k.startswith(prefix)]
        return copy.deepcopy(values)

    def set_if_absent(self, key: str, value: Any) -> bool:
        with self._lock:
            if key in self._data:
                return False
            self._data[key] = copy.deepcopy(value)
            return True

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


_store: KVStore | None = None


def get_kv_store() -> KVStore:
    """Return the process-wide store, creating it on first call."""
    global _store
    if _store is None:
        _store = InMemoryKVStore()
    return _store
