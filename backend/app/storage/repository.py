from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "wanderlust_prefs"
FEEDBACK_KEY = "wanderlust_feedback"


class KeyValueStore(Protocol):
    """String-keyed store of encoded values that outlives the process."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class InMemoryRepository:
    def __init__(self) -> None:
        self.values: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class JsonFileRepository:
    """
    Keeps every key in one JSON object on disk. Writes go to a temp file that
    replaces the original so a crash never leaves a half-written store.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Unreadable store %s, starting empty: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Store %s does not hold an object, starting empty", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
            os.replace(tmp, self.path)


def build_repository(storage_path: str | None) -> KeyValueStore:
    if not storage_path:
        return InMemoryRepository()
    return JsonFileRepository(storage_path)
