"""Base service: shared plumbing for the TwinBot backend service clients.

Each service is a thin, typed layer over AuthenticatedGateway:

  - Builds the request body the backend expects (camelCase keys)
  - Calls the gateway, which owns tokens, refresh and re-auth flags
  - Turns the GatewayResult into a domain result model

Failures are never raised for expected conditions. A failed gateway call is
copied into the service's result type so ``requires_login`` and
``requires_external_auth`` reach the caller unchanged.
"""

from __future__ import annotations

from typing import Any, TypeVar

from twinbot_gateway.gateway import AuthenticatedGateway
from twinbot_session_store.credentials import CredentialVault
from twinbot_shared.models import ApiResult

R = TypeVar("R", bound=ApiResult)


class BaseService:
    """Holds the gateway and vault every service shares."""

    def __init__(self, gateway: AuthenticatedGateway, vault: CredentialVault) -> None:
        self.gateway = gateway
        self.vault = vault

    async def _user_id(self) -> str | None:
        user = await self.vault.get_user()
        return user.id if user else None

    async def _usable_google_token(self) -> str | None:
        """The stored Google token if it hasn't expired. Never clears anything;
        the gateway handles missing or expired tokens on delegated calls."""
        token = await self.vault.get_external_token()
        if token is None or token.is_expired():
            return None
        return token.token

    @staticmethod
    def _carry(result: ApiResult, result_cls: type[R], message: str | None = None, **fields: Any) -> R:
        """Copy a result's envelope into ``result_cls``, adding domain fields."""
        return result_cls(
            success=result.success,
            message=result.message if message is None else message,
            status_code=result.status_code,
            data=result.data,
            requires_login=result.requires_login,
            requires_external_auth=result.requires_external_auth,
            **fields,
        )

    @staticmethod
    def _payload(result: ApiResult) -> dict[str, Any]:
        """The response body as a dict; empty when the body was text or missing."""
        return result.data if isinstance(result.data, dict) else {}

    @classmethod
    def _server_message(cls, result: ApiResult, default: str) -> str:
        message = cls._payload(result).get("message")
        return message if isinstance(message, str) and message else default
