"""Key/value stores for persisted drafts.

Only :class:`~care_assessment.persistence.DraftPersistence` talks to a
store.  Values are opaque strings (JSON-encoded envelopes); the store never
interprets them.  Implementations may raise on I/O failure; the
persistence layer logs and absorbs those errors.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """get / set / remove by string key."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value or ``None`` when the key is absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``; removing an absent key is not an error."""
        ...


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, mainly for tests and short-lived hosts.

    ``writes`` counts successful ``set`` calls.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.writes += 1

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileKeyValueStore(KeyValueStore):
    """One file per key under ``directory``.

    Keys are percent-encoded into file names.  Writes go to a temporary
    file that is then renamed over the target, so a crash mid-write never
    leaves a truncated draft behind.
    """

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)
        self._dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self._dir / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
