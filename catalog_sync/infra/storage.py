"""Key-value storage backends for the cache and persisted state.

Provides:
- KeyValueStore protocol (async get/set/delete/keys)
- In-memory store for tests and ephemeral runs
- File-backed store (one file per key) for durable local storage

Backend errors never propagate: reads map to ``None``, writes to ``False``.
"""

import asyncio
import hashlib
import json
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from catalog_sync.infra.logging import get_logger

logger = get_logger(__name__)

_FILE_SUFFIX = ".kv"


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol for persistent string key-value stores."""

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent or unreadable."""
        ...

    async def set(self, key: str, value: str) -> bool:
        """Store value under key. Returns False on failure."""
        ...

    async def delete(self, key: str) -> None:
        """Remove key if present."""
        ...

    async def keys(self) -> list[str]:
        """List all stored keys."""
        ...


class MemoryKeyValueStore:
    """Dict-backed store. Contents are lost at process exit."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def keys(self) -> list[str]:
        return list(self._data.keys())


class FileKeyValueStore:
    """Directory-backed store with one file per key.

    Files are named by the SHA-256 digest of the key, so any key (long or
    non-ASCII search text included) maps to a fixed-length filename. Each
    file holds a ``{"key": ..., "value": ...}`` JSON document so ``keys()``
    can report the original keys.

    Writes go to a temp file in the same directory and are atomically
    renamed into place, so concurrent writers never leave a torn value.
    """

    def __init__(self, root: str | Path) -> None:
        """Initialize file store.

        Args:
            root: Directory holding the key files (created on demand)
        """
        self.root = Path(root)

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.root / f"{digest}{_FILE_SUFFIX}"

    async def get(self, key: str) -> str | None:
        try:
            return await asyncio.to_thread(self._read, self._path_for(key), key)
        except Exception as e:
            logger.error("Error getting item from storage", key=key, error=str(e))
            return None

    async def set(self, key: str, value: str) -> bool:
        try:
            await asyncio.to_thread(self._write, self._path_for(key), key, value)
            return True
        except Exception as e:
            logger.error("Error setting item in storage", key=key, error=str(e))
            return False

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._path_for(key).unlink, missing_ok=True)
        except Exception as e:
            logger.error("Error removing item from storage", key=key, error=str(e))

    async def keys(self) -> list[str]:
        try:
            return await asyncio.to_thread(self._list_keys)
        except Exception as e:
            logger.error("Error listing storage keys", root=str(self.root), error=str(e))
            return []

    @staticmethod
    def _load(path: Path) -> dict[str, str]:
        document = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(document, dict) or not isinstance(document.get("key"), str):
            raise ValueError(f"Malformed storage file: {path.name}")
        return document

    def _read(self, path: Path, key: str) -> str | None:
        if not path.exists():
            return None
        document = self._load(path)
        if document["key"] != key:
            raise ValueError(f"Storage file {path.name} holds a different key")
        return document.get("value")

    def _write(self, path: Path, key: str, value: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp_")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump({"key": key, "value": value}, fh, ensure_ascii=False)
            Path(tmp_name).replace(path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _list_keys(self) -> list[str]:
        if not self.root.exists():
            return []
        keys: list[str] = []
        for path in self.root.iterdir():
            if not (path.is_file() and path.name.endswith(_FILE_SUFFIX)):
                continue
            try:
                keys.append(self._load(path)["key"])
            except (OSError, ValueError) as e:
                logger.warning("Skipping unreadable storage file", file=path.name, error=str(e))
        return keys


def create_store(backend: str, root: str | Path | None = None) -> KeyValueStore:
    """Build a key-value store for the configured backend.

    Args:
        backend: "memory" or "file"
        root: Directory for the file backend

    Returns:
        KeyValueStore instance

    Raises:
        ValueError: If backend is unknown or root missing for file backend
    """
    if backend == "memory":
        logger.info("Using in-memory key-value store")
        return MemoryKeyValueStore()
    if backend == "file":
        if root is None:
            raise ValueError("root is required for the file backend")
        logger.info("Using file key-value store", root=str(root))
        return FileKeyValueStore(root)
    raise ValueError(f"Unknown storage backend: {backend}")
