"""Live tests against a running TwinBot backend.

These hit a REAL backend (``npm run dev`` locally, or a deployed instance)
and catch what the mocked tests cannot: route renames, response shape drift
and auth configuration problems.

Tiers:
  smoke:    backend reachable, public endpoints answer
  contract: log in with a real account, then exercise authenticated routes

Usage:
  TWINBOT_LIVE_API_URL=http://localhost:5002 uv run pytest -m live -s
  # contract tier also needs TWINBOT_LIVE_EMAIL and TWINBOT_LIVE_PASSWORD
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv
from twinbot_client import TwinBotClient
from twinbot_session_store.store import MemoryStore
from twinbot_shared.config import ClientConfig

_project_root = Path(__file__).resolve().parents[3]
load_dotenv(_project_root / ".env")

pytestmark = pytest.mark.live

requires_backend = pytest.mark.skipif(
    not os.environ.get("TWINBOT_LIVE_API_URL"),
    reason="TWINBOT_LIVE_API_URL not set, skipping live backend tests",
)
requires_account = pytest.mark.skipif(
    not os.environ.get("TWINBOT_LIVE_EMAIL") or not os.environ.get("TWINBOT_LIVE_PASSWORD"),
    reason="TWINBOT_LIVE_EMAIL or TWINBOT_LIVE_PASSWORD not set, skipping contract tests",
)


def _report_requests(client: TwinBotClient, label: str) -> None:
    print(f"\n  [{label}] HTTP requests: {client.gateway.request_count}")


@pytest.fixture
async def live_client():
    config = ClientConfig(api_url=os.environ["TWINBOT_LIVE_API_URL"].rstrip("/"))
    async with TwinBotClient(config=config, store=MemoryStore()) as client:
        yield client


@requires_backend
class TestSmoke:
    async def test_verification_status_answers(self, live_client):
        result = await live_client.auth.verification_status("nobody@twinbot.invalid")
        _report_requests(live_client, "verification-status")
        assert result.status_code in (200, 404, 500)
        assert not result.verified

    async def test_protected_route_without_session_sends_nothing(self, live_client):
        result = await live_client.twin.extract_tasks("buy milk")
        assert result.requires_login
        assert live_client.gateway.request_count == 0


@requires_backend
@requires_account
class TestContract:
    async def test_login_and_profile(self, live_client):
        login = await live_client.auth.login(
            os.environ["TWINBOT_LIVE_EMAIL"], os.environ["TWINBOT_LIVE_PASSWORD"]
        )
        assert login.success, login.message

        profile = await live_client.auth.get_profile()
        _report_requests(live_client, "login+profile")
        assert profile.success, profile.message

    async def test_forced_refresh_keeps_session_usable(self, live_client):
        login = await live_client.auth.login(
            os.environ["TWINBOT_LIVE_EMAIL"], os.environ["TWINBOT_LIVE_PASSWORD"]
        )
        assert login.success, login.message

        refreshed = await live_client.gateway.refresh_session()
        assert refreshed is not None
        assert (await live_client.auth.get_profile()).success
        _report_requests(live_client, "refresh")

    async def test_events_without_google_need_reconnect(self, live_client):
        await live_client.auth.login(
            os.environ["TWINBOT_LIVE_EMAIL"], os.environ["TWINBOT_LIVE_PASSWORD"]
        )
        result = await live_client.calendar.list_events("2025-01-01T00:00:00Z", "2025-01-02T00:00:00Z")
        assert result.auth_error
        assert not result.requires_login
