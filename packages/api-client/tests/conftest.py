"""Service fixtures built on the shared gateway/vault fixtures in the root conftest."""

from __future__ import annotations

import pytest
from twinbot_client.services import AuthService, CalendarService, EmailService, TwinService


@pytest.fixture
def auth(gateway, vault) -> AuthService:
    return AuthService(gateway, vault)


@pytest.fixture
def calendar(gateway, vault) -> CalendarService:
    return CalendarService(gateway, vault)


@pytest.fixture
def email(gateway, vault) -> EmailService:
    return EmailService(gateway, vault)


@pytest.fixture
def twin(gateway, vault) -> TwinService:
    return TwinService(gateway, vault)
