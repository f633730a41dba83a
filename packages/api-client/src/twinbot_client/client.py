"""TwinBotClient: one gateway, one vault and the four services wired together."""

from __future__ import annotations

from typing import Any

import httpx
from twinbot_gateway.gateway import AuthenticatedGateway
from twinbot_session_store.credentials import CredentialVault
from twinbot_session_store.store import KeyValueStore, create_store
from twinbot_shared.config import ClientConfig

from twinbot_client.services import AuthService, CalendarService, EmailService, TwinService


class TwinBotClient:
    """Entry point for talking to the TwinBot backend.

    All four services share a single gateway, so a refresh triggered by one
    of them is seen by the rest on their next call.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        store: KeyValueStore | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.store = store if store is not None else create_store(self.config)
        self.vault = CredentialVault(self.store, profile=self.config.profile)
        self.gateway = AuthenticatedGateway(self.vault, config=self.config, client=http_client)

        self.auth = AuthService(self.gateway, self.vault)
        self.calendar = CalendarService(self.gateway, self.vault)
        self.email = EmailService(self.gateway, self.vault)
        self.twin = TwinService(self.gateway, self.vault)

    @classmethod
    def from_env(cls, **kwargs: Any) -> TwinBotClient:
        """Build a client from TWINBOT_* environment variables."""
        return cls(config=ClientConfig.from_env(), **kwargs)

    async def close(self) -> None:
        await self.gateway.close()

    async def __aenter__(self) -> TwinBotClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
