"""
Key-value storage backends for session artifacts.

`FileStorage` keeps every key in one JSON document on disk (the device-local
store of a desktop or server process). `MemoryStorage` keeps them in a dict
for tests and throwaway sessions. Both raise on failure; nothing is swallowed.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Iterable


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def multi_remove(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class FileStorage:
    """
    JSON-file storage. The file is read on every access so separate instances
    pointing at the same path observe each other's writes.

    Raises:
        OSError: On read/write failures (permissions, disk full).
        ValueError: If the file exists but is not a JSON object.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.is_file():
            return {}
        with open(self._path, "r", encoding="utf-8") as f:
            text = f.read()
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"Session storage at {self._path} is not a JSON object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".session-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self._path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        self.multi_remove([key])

    def multi_remove(self, keys: Iterable[str]) -> None:
        data = self._read()
        changed = False
        for key in keys:
            if key in data:
                del data[key]
                changed = True
        if changed:
            self._write(data)

    def keys(self) -> list[str]:
        return list(self._read())
