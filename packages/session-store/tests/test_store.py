"""Behavioral tests shared by every KeyValueStore backend."""

import asyncio
import json
import os
import stat
import threading

import pytest
from twinbot_session_store.client import RedisAdapter, get_client, set_client
from twinbot_session_store.store import FileStore, MemoryStore, RedisStore, create_store
from twinbot_shared.config import ClientConfig


class TestStoreContract:
    async def test_missing_key_is_none(self, any_store):
        assert await any_store.get("nope") is None

    async def test_set_then_get(self, any_store):
        await any_store.set("session", '{"access_token": "A1"}')
        assert await any_store.get("session") == '{"access_token": "A1"}'

    async def test_overwrite(self, any_store):
        await any_store.set("k", "one")
        await any_store.set("k", "two")
        assert await any_store.get("k") == "two"

    async def test_delete_many(self, any_store):
        await any_store.set("a", "1")
        await any_store.set("b", "2")
        await any_store.set("c", "3")
        await any_store.delete("a", "b", "missing")
        assert await any_store.get("a") is None
        assert await any_store.get("b") is None
        assert await any_store.get("c") == "3"


class TestFileStore:
    async def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "creds.json"
        await FileStore(path).set("user", "x")
        assert await FileStore(path).get("user") == "x"
        assert json.loads(path.read_text()) == {"user": "x"}

    async def test_file_is_owner_only(self, tmp_path):
        path = tmp_path / "creds.json"
        await FileStore(path).set("session", "secret")
        mode = stat.S_IMODE(os.stat(path).st_mode)
        assert mode == 0o600

    async def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "creds.json"
        path.write_text("{truncated")
        store = FileStore(path)
        assert await store.get("session") is None
        await store.set("session", "fresh")
        assert await store.get("session") == "fresh"

    async def test_delete_on_missing_file_does_not_create_it(self, tmp_path):
        path = tmp_path / "creds.json"
        await FileStore(path).delete("session")
        assert not path.exists()

    async def test_concurrent_writes_are_all_kept(self, tmp_path):
        path = tmp_path / "creds.json"
        store = FileStore(path)
        await asyncio.gather(*(store.set(f"key-{i}", str(i)) for i in range(20)))
        assert json.loads(path.read_text()) == {f"key-{i}": str(i) for i in range(20)}

    async def test_file_io_runs_off_the_event_loop_thread(self, tmp_path, monkeypatch):
        store = FileStore(tmp_path / "creds.json")
        threads = []
        load = store._load

        def recording_load():
            threads.append(threading.get_ident())
            return load()

        monkeypatch.setattr(store, "_load", recording_load)
        await store.get("session")
        assert threads and threading.get_ident() not in threads


class TestRedisAdapter:
    async def test_decodes_bytes(self):
        class BytesClient:
            async def get(self, key):
                return b"value"

        adapter = RedisAdapter(BytesClient())
        assert await adapter.get("k") == "value"

    async def test_delete_without_keys_is_noop(self):
        class ExplodingClient:
            async def delete(self, *keys):
                raise AssertionError("should not be called")

        await RedisAdapter(ExplodingClient()).delete()

    def test_get_client_defaults_to_fakeredis(self, monkeypatch):
        monkeypatch.delenv("UPSTASH_REDIS_REST_URL", raising=False)
        client = get_client()
        assert not client.is_upstash
        assert get_client() is client

    def test_set_client_injects(self):
        adapter = RedisAdapter(object())
        set_client(adapter)
        assert get_client() is adapter


class TestCreateStore:
    def test_memory(self):
        assert isinstance(create_store(ClientConfig(store_backend="memory")), MemoryStore)

    def test_file(self, tmp_path):
        store = create_store(ClientConfig(store_backend="file", store_path=tmp_path / "c.json"))
        assert isinstance(store, FileStore)
        assert store.path == tmp_path / "c.json"

    def test_redis(self, monkeypatch):
        monkeypatch.delenv("UPSTASH_REDIS_REST_URL", raising=False)
        assert isinstance(create_store(ClientConfig(store_backend="redis")), RedisStore)

    def test_unknown_backend_raises(self):
        config = ClientConfig.model_construct(store_backend="sqlite")
        with pytest.raises(ValueError, match="Unknown store_backend"):
            create_store(config)
