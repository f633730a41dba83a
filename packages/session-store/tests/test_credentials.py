"""Tests for CredentialVault: typed reads/writes and forgiving decoding."""

import json
import time

from twinbot_session_store.credentials import CredentialVault
from twinbot_session_store.store import MemoryStore
from twinbot_shared.auth_models import ExternalToken, Session, User


class TestSession:
    async def test_empty_store_has_no_session(self, vault):
        assert await vault.get_session() is None
        assert await vault.get_user() is None

    async def test_save_and_read(self, vault):
        await vault.save_login(
            Session(access_token="A1", refresh_token="R1"),
            User(id="u-1", email="ana@example.com", name="Ana"),
        )
        assert await vault.get_session() == Session(access_token="A1", refresh_token="R1")
        assert (await vault.get_user()).name == "Ana"

    async def test_session_is_replaced_wholesale(self, vault):
        await vault.save_session(Session(access_token="A1", refresh_token="R1"))
        await vault.save_session(Session(access_token="A2", refresh_token="R2"))
        assert await vault.get_session() == Session(access_token="A2", refresh_token="R2")

    async def test_corrupt_session_reads_as_absent(self, memory_store):
        memory_store.data["session"] = "{not-json"
        assert await CredentialVault(memory_store).get_session() is None

    async def test_session_missing_field_reads_as_absent(self, memory_store):
        memory_store.data["session"] = json.dumps({"access_token": "A1"})
        assert await CredentialVault(memory_store).get_session() is None

    async def test_reads_browser_exported_session(self, memory_store):
        memory_store.data["session"] = json.dumps({
            "access_token": "A1", "refresh_token": "R1", "expires_in": 3600,
        })
        memory_store.data["user"] = json.dumps({"id": "u-1", "email": "a@b.c"})
        vault = CredentialVault(memory_store)
        assert (await vault.get_session()).refresh_token == "R1"
        assert (await vault.get_user()).id == "u-1"

    async def test_clear_session_keeps_google_token(self, vault):
        await vault.save_login(Session(access_token="A", refresh_token="R"), User(id="u", email="e"))
        await vault.save_external_token("ya29.g")
        await vault.clear_session()
        assert await vault.get_session() is None
        assert await vault.get_user() is None
        assert (await vault.get_external_token()).token == "ya29.g"


class TestExternalToken:
    async def test_save_with_expiry_sets_epoch_ms(self, vault):
        before = int(time.time() * 1000)
        token = await vault.save_external_token("ya29.g", expires_in=3600)
        assert token.expires_at >= before + 3_600_000
        stored = await vault.get_external_token()
        assert stored == token

    async def test_save_without_expiry(self, vault):
        await vault.save_external_token("ya29.g")
        assert (await vault.get_external_token()).expires_at is None

    async def test_reads_legacy_raw_string(self, memory_store):
        memory_store.data["google_token"] = "ya29.legacy"
        token = await CredentialVault(memory_store).get_external_token()
        assert token == ExternalToken(token="ya29.legacy")

    async def test_invalidate_clears_token_and_sets_flag(self, vault):
        await vault.save_external_token("ya29.g")
        await vault.invalidate_external_token()
        assert await vault.get_external_token() is None
        assert await vault.external_reauth_needed()

    async def test_saving_token_clears_reauth_flag(self, vault):
        await vault.mark_external_reauth()
        await vault.save_external_token("ya29.new")
        assert not await vault.external_reauth_needed()

    async def test_invalidate_leaves_session_intact(self, vault):
        await vault.save_session(Session(access_token="A", refresh_token="R"))
        await vault.invalidate_external_token()
        assert await vault.get_session() is not None


class TestProfiles:
    async def test_profiles_are_isolated(self):
        store = MemoryStore()
        home = CredentialVault(store)
        work = CredentialVault(store, profile="work")
        await home.save_session(Session(access_token="H", refresh_token="HR"))
        assert await work.get_session() is None
        await work.save_session(Session(access_token="W", refresh_token="WR"))
        assert (await home.get_session()).access_token == "H"

    async def test_clear_all(self, vault, memory_store):
        await vault.save_login(Session(access_token="A", refresh_token="R"), User(id="u", email="e"))
        await vault.save_external_token("g")
        await vault.mark_external_reauth()
        await vault.clear_all()
        assert memory_store.data == {}

    async def test_vault_over_any_backend(self, any_store):
        vault = CredentialVault(any_store)
        await vault.save_session(Session(access_token="A1", refresh_token="R1"))
        assert (await vault.get_session()).access_token == "A1"
