"""Key/value stores that back the CredentialVault.

Three interchangeable backends behind one async protocol:

  - MemoryStore: a dict; used in tests and short-lived scripts
  - FileStore: one JSON document on disk; what the CLI uses so a login
    survives between invocations
  - RedisStore: Upstash or fakeredis via RedisAdapter

Values are always strings. Structured credentials are JSON-encoded by the
vault, not by the store.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Protocol

from twinbot_shared.config import ClientConfig

from twinbot_session_store.client import RedisAdapter, get_client

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, *keys: str) -> None: ...


class MemoryStore:
    """Dict-backed store. ``data`` is public so tests can seed and inspect it."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self.data.pop(key, None)


class FileStore:
    """Persists all keys as one JSON object in ``path``.

    The file is rewritten on every change through a temp file + rename and
    created with 0600 permissions, since it holds live tokens. A missing or
    unreadable file reads as empty.

    File I/O runs in a worker thread so the event loop is not blocked, and
    writes are serialized per instance so concurrent updates are not lost.
    Two processes sharing one file can still overwrite each other.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable credential file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        os.replace(tmp, self.path)

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._load)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            data[key] = value
            await asyncio.to_thread(self._save, data)

    async def delete(self, *keys: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._load)
            if not any(k in data for k in keys):
                return
            for key in keys:
                data.pop(key, None)
            await asyncio.to_thread(self._save, data)


class RedisStore:
    """Store over a RedisAdapter (Upstash in the cloud, fakeredis locally)."""

    def __init__(self, adapter: RedisAdapter) -> None:
        self.adapter = adapter

    async def get(self, key: str) -> str | None:
        return await self.adapter.get(key)

    async def set(self, key: str, value: str) -> None:
        await self.adapter.set(key, value)

    async def delete(self, *keys: str) -> None:
        await self.adapter.delete(*keys)


def create_store(config: ClientConfig) -> KeyValueStore:
    """Instantiate the store selected by ``config.store_backend``."""
    if config.store_backend == "memory":
        return MemoryStore()
    if config.store_backend == "file":
        return FileStore(config.store_path)
    if config.store_backend == "redis":
        return RedisStore(get_client())
    raise ValueError(
        f"Unknown store_backend '{config.store_backend}'. Supported: file, memory, redis"
    )
