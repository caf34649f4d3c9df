"""Key-value store adapters for persisted session hints.

Two implementations of ``IKeyValueStore``: a process-local dictionary,
and a JSON file that keeps hints across process restarts.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path


class InMemoryKeyValueStore:
    """Dictionary-backed store; contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Return a copy of all stored entries."""
        return dict(self._values)


class JsonFileKeyValueStore:
    """Store persisted as a flat JSON object in a single file.

    The file is read once on construction and rewritten atomically on
    every change. A missing file starts an empty store; a file that is
    not a JSON object of strings raises ``ValueError``.
    """

    def __init__(self, path: Path | str):
        self._path = Path(path)
        self._values = self._load()

    @property
    def path(self) -> Path:
        """Location of the backing file."""
        return self._path

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        if self._values.get(key) == value:
            return
        self._values[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if key not in self._values:
            return
        del self._values[key]
        self._flush()

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        if not isinstance(raw, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in raw.items()
        ):
            raise ValueError(f"{self._path} does not contain a JSON object of strings")
        return raw

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._values, handle, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
