"""The lock file: a key-sorted JSON object of lock entries."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from uptix.core.errors import LockfileError
from uptix.lock.models import LockEntry

log = structlog.get_logger(__name__)


class LockFile:
    """In-memory lock store bound to a path.

    Entries are kept as the JSON values they were loaded or merged as, so
    saving never rewrites an entry nobody touched.
    """

    def __init__(self, path: Path, entries: dict[str, Any] | None = None) -> None:
        self.path = path
        self._raw: dict[str, Any] = {}
        self._entries: dict[str, LockEntry] = {}
        for key, value in (entries or {}).items():
            self._raw[key] = value
            self._entries[key] = self._validate(key, value)

    @classmethod
    def load(cls, path: Path) -> LockFile:
        """Read ``path``; a missing file is an empty store.

        Raises:
            LockfileError: The file cannot be read, is not JSON, or holds an
                entry that is not a lock entry.
        """
        if not path.exists():
            log.debug("lock.missing", path=str(path))
            return cls(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise LockfileError.io_error(str(path), str(e)) from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise LockfileError.parse_error(str(path), str(e)) from e
        if not isinstance(data, dict):
            raise LockfileError.parse_error(str(path), "top-level value must be an object")
        store = cls(path, data)
        log.debug("lock.loaded", path=str(path), entries=len(store))
        return store

    def _validate(self, key: str, value: Any) -> LockEntry:
        try:
            return LockEntry.model_validate(value)
        except ValidationError as e:
            raise LockfileError.parse_error(str(self.path), f"entry {key!r}: {e.errors()[0]['msg']}") from e

    def __len__(self) -> int:
        return len(self._raw)

    def __contains__(self, key: object) -> bool:
        return key in self._raw

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._raw))

    def get(self, key: str) -> LockEntry | None:
        return self._entries.get(key)

    def items(self) -> Iterator[tuple[str, LockEntry]]:
        """Entries in key order."""
        for key in sorted(self._entries):
            yield key, self._entries[key]

    @property
    def entries(self) -> dict[str, LockEntry]:
        return dict(self.items())

    def merge(self, key: str, entry: LockEntry) -> None:
        """Insert or overwrite ``key``; the last write wins."""
        if key in self._raw:
            log.debug("lock.overwrite", key=key)
        self._raw[key] = entry.to_json()
        self._entries[key] = entry

    def to_json(self) -> str:
        return json.dumps(self._raw, indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    def save(self, path: Path | None = None) -> Path:
        """Write atomically: a temp file in the same directory replaces the target."""
        target = path or self.path
        content = self.to_json()
        tmp_path: Path | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(content)
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise LockfileError.io_error(str(target), str(e)) from e
        log.info("lock.saved", path=str(target), entries=len(self))
        return target

    @classmethod
    def init(cls, path: Path) -> bool:
        """Create an empty lock file. Returns False if one already exists."""
        if path.exists():
            return False
        cls(path).save()
        return True
