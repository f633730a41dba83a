"""Test fixtures for the credential store.

Provides one fixture per backend so the same behavioral tests run against
memory, file and (fake) Redis storage.
"""

from __future__ import annotations

import pytest
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis
from twinbot_session_store.client import RedisAdapter, reset_client
from twinbot_session_store.credentials import CredentialVault
from twinbot_session_store.store import FileStore, MemoryStore, RedisStore


@pytest.fixture(autouse=True)
def _fresh_redis_singleton():
    reset_client()
    yield
    reset_client()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def file_store(tmp_path) -> FileStore:
    return FileStore(tmp_path / "twinbot" / "credentials.json")


@pytest.fixture
def redis_store() -> RedisStore:
    return RedisStore(RedisAdapter(FakeRedis(server=FakeServer(), decode_responses=True)))


@pytest.fixture(params=["memory", "file", "redis"])
def any_store(request, memory_store, file_store, redis_store):
    return {"memory": memory_store, "file": file_store, "redis": redis_store}[request.param]


@pytest.fixture
def vault(memory_store) -> CredentialVault:
    return CredentialVault(memory_store)
