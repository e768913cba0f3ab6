from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Protocol

logger = logging.getLogger(__name__)

STORAGE_KEY_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")
STORAGE_FILE_SUFFIX = ".json"


def _validate_key(key: str) -> str:
    if not isinstance(key, str) or not STORAGE_KEY_PATTERN.match(key):
        raise ValueError(f"invalid storage key: {key!r}")
    return key


class Storage(Protocol):
    def save(self, key: str, text: str) -> None: ...

    def load(self, key: str) -> str | None: ...

    def clear(self) -> None: ...


class MemoryStorage:
    def __init__(self) -> None:
        self.blobs: dict[str, str] = {}

    def save(self, key: str, text: str) -> None:
        self.blobs[_validate_key(key)] = text

    def load(self, key: str) -> str | None:
        return self.blobs.get(_validate_key(key))

    def clear(self) -> None:
        self.blobs.clear()


class JsonDirectoryStorage:
    """One file per key under ``root``; writes replace files atomically."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        return self.root / f"{_validate_key(key)}{STORAGE_FILE_SUFFIX}"

    def save(self, key: str, text: str) -> None:
        destination = self._path(key)
        destination.parent.mkdir(parents=True, exist_ok=True)

        temp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=destination.parent,
                delete=False,
                suffix=".tmp",
            ) as temp_file:
                temp_file.write(text)
                temp_file.flush()
                os.fsync(temp_file.fileno())
                temp_path = Path(temp_file.name)
            os.replace(temp_path, destination)
        except Exception:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise
        logger.debug("wrote %s (%d bytes)", destination, len(text))

    def load(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def clear(self) -> None:
        if not self.root.exists():
            return
        for path in sorted(self.root.glob(f"*{STORAGE_FILE_SUFFIX}")):
            if STORAGE_KEY_PATTERN.match(path.stem):
                path.unlink()
