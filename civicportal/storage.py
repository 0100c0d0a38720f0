"""
Persisted key-value storage for session records.

Values are JSON text keyed by name, the same shape a browser keeps in
local storage, so both the citizen and the admin namespace can live in
one file without seeing each other's keys.
"""

import json
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

from civicportal.exceptions import SessionStorageError
from civicportal.logging_config import logger


class KeyValueStorage(Protocol):
    """Minimal storage contract used by session namespaces"""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage:
    """In-process storage, nothing touches disk"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self):
        return list(self._items.keys())


class FileStorage:
    """
    Storage backed by a single JSON object on disk.

    The file is re-read on every access so a login in one terminal is seen
    by another. Written with 0600 permissions since it holds bearer tokens.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not load session storage {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed session storage {self.path}")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, 'w') as f:
                json.dump(data, f, indent=2)
            try:
                os.chmod(tmp_path, 0o600)
            except OSError:
                # Not supported on every platform
                pass
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise SessionStorageError(str(self.path), str(e)) from e

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def keys(self):
        return list(self._read().keys())
