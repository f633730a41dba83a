"""Shared test fixtures for every package.

Provides:
  - MockTransport: an httpx transport that replays queued responses and
    records every request it receives
  - An in-memory CredentialVault, optionally pre-loaded with a login
  - An AuthenticatedGateway wired to both
"""

from __future__ import annotations

import json

import httpx
import pytest
from twinbot_gateway.gateway import AuthenticatedGateway
from twinbot_session_store.credentials import CredentialVault
from twinbot_session_store.store import MemoryStore
from twinbot_shared.auth_models import Session, User
from twinbot_shared.config import ClientConfig

BASE_URL = "http://twinbot.test"


class MockTransport(httpx.AsyncBaseTransport):
    """Mock HTTP transport that returns preconfigured responses.

    Usage:
        transport = MockTransport(responses=[
            httpx.Response(200, json={"events": []}),
        ])
        async with httpx.AsyncClient(transport=transport) as client:
            response = await client.get("https://example.com/api")

    Each call to handle_async_request pops the next response from the list.
    If the list is exhausted, returns a 500 error.
    """

    def __init__(self, responses: list[httpx.Response] | None = None) -> None:
        self.responses = list(responses or [])
        self.requests: list[httpx.Request] = []

    def add(self, *responses: httpx.Response) -> MockTransport:
        self.responses.extend(responses)
        return self

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            response = self.responses.pop(0)
            response.stream = httpx.ByteStream(response.content)
            return response
        return httpx.Response(500, json={"error": "No more mock responses"})

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def body(self, index: int) -> dict:  # type: ignore[type-arg]
        return json.loads(self.requests[index].content)


class RaisingTransport(httpx.AsyncBaseTransport):
    """Raises ConnectError for every request whose path is in ``fail_paths``
    (all paths when empty), and otherwise defers to ``fallback``."""

    def __init__(self, fail_paths: set[str] | None = None, fallback: MockTransport | None = None) -> None:
        self.fail_paths = fail_paths or set()
        self.fallback = fallback or MockTransport()
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.fail_paths or request.url.path in self.fail_paths:
            raise httpx.ConnectError("connection refused", request=request)
        return await self.fallback.handle_async_request(request)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def vault(store) -> CredentialVault:
    return CredentialVault(store)


@pytest.fixture
def transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(api_url=BASE_URL)


@pytest.fixture
async def gateway(vault, transport, config):
    client = httpx.AsyncClient(transport=transport, base_url=BASE_URL)
    gw = AuthenticatedGateway(vault, config=config, client=client)
    yield gw
    await client.aclose()


@pytest.fixture
async def logged_in(vault) -> Session:
    """Store the A1/R1 session and a user, as a successful login would."""
    session = Session(access_token="A1", refresh_token="R1")
    await vault.save_login(session, User(id="user-1", email="ana@example.com", name="Ana"))
    return session


@pytest.fixture
async def google_connected(vault) -> str:
    await vault.save_external_token("ya29.google", expires_in=3600)
    return "ya29.google"
