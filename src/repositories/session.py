# session-scoped key/value storage
# src/repositories/session.py
"""
Session storage for cached fetch results.

SessionStorage mirrors the browser's sessionStorage surface
(get_item / set_item / remove_item, string values):

- InMemorySessionStorage: lives as long as the process.
- JsonFileSessionStorage: one JSON object on disk, so a session survives
  process restarts until the file is removed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Dict, Optional, Protocol

log = logging.getLogger(__name__)


class SessionStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class InMemorySessionStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileSessionStorage:
    """
    File-backed storage. The whole file is rewritten on every change.

    An unreadable or corrupt file is treated as an empty session.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("Ignoring unreadable session file %s: %s", self._path, exc)
            return {}
        if not isinstance(data, dict):
            log.warning("Ignoring session file %s: expected an object", self._path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write(self, data: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self._path)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)
