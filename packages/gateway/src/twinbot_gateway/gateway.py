"""Authenticated request gateway: the one place the token lifecycle is handled.

Every protected backend call passes through AuthenticatedGateway.request():

  1. No stored Session → AUTH_REQUIRED, nothing is sent.
  2. Delegated call without a usable Google token → EXTERNAL_AUTH_REQUIRED,
     nothing is sent (an expired token is cleared and the reconnect flag set).
  3. Send with ``Authorization: Bearer <access_token>`` and, for delegated
     calls, ``X-Google-Token``.
  4. 401 with ``{"error": "Invalid Google credentials"}`` → the Google grant is
     dead, not the Session: clear the Google token, set the reconnect flag,
     EXTERNAL_AUTH_REQUIRED. The Session is not refreshed.
  5. Any other 401 → one refresh. Success persists the new Session and
     resends the request exactly once; whatever that resend returns is final.
     Failure discards the Session and returns SESSION_EXPIRED.

Nothing here loops: a call makes at most three HTTP requests (first send,
refresh, resend). Concurrent calls that hit the same expiry each refresh
independently and the last Session written wins; the backend hands out a
valid pair on every refresh, so whichever write lands last is still usable.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError
from twinbot_session_store.credentials import CredentialVault
from twinbot_shared.auth_models import Session
from twinbot_shared.config import ClientConfig

from twinbot_gateway.errors import (
    AUTH_REQUIRED_MESSAGE,
    EXTERNAL_AUTH_EXPIRED_MESSAGE,
    EXTERNAL_AUTH_MISSING_MESSAGE,
    INVALID_GOOGLE_CREDENTIALS,
    SESSION_EXPIRED_MESSAGE,
    GatewayErrorKind,
)
from twinbot_gateway.result import GatewayResult

logger = logging.getLogger(__name__)

REFRESH_PATH = "/api/auth/refresh"
GOOGLE_TOKEN_HEADER = "X-Google-Token"


class AuthenticatedGateway:
    """Sends backend requests with the stored credentials attached.

    The HTTP client is created lazily from ``config`` unless one is injected;
    an injected client is left open on close() since the caller owns it.
    """

    def __init__(
        self,
        vault: CredentialVault,
        config: ClientConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.vault = vault
        self.config = config or ClientConfig()
        self._client = client
        self._owns_client = client is None
        self.request_count: int = 0

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.api_url,
                timeout=self.config.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client if this gateway created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> AuthenticatedGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Protected calls
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        delegated: bool = False,
        external_token: str | None = None,
    ) -> GatewayResult:
        """Call a protected endpoint, refreshing the Session once on a 401.

        Args:
            method: HTTP method.
            path: Endpoint path relative to the configured API URL.
            json: Optional JSON body.
            params: Optional query parameters.
            delegated: Attach the stored Google token; fail without sending
                if there is none or it has expired.
            external_token: Attach this Google token instead of the stored
                one. Implies a delegated call.
        """
        session = await self.vault.get_session()
        if session is None:
            logger.info(f"{method} {path}: no session stored, not sending")
            return GatewayResult.failure(GatewayErrorKind.AUTH_REQUIRED, AUTH_REQUIRED_MESSAGE)

        google_token = external_token
        if google_token is None and delegated:
            stored = await self.vault.get_external_token()
            if stored is None:
                logger.info(f"{method} {path}: no Google token stored, not sending")
                return GatewayResult.failure(
                    GatewayErrorKind.EXTERNAL_AUTH_REQUIRED, EXTERNAL_AUTH_MISSING_MESSAGE
                )
            if stored.is_expired():
                logger.info(f"{method} {path}: Google token expired, clearing it")
                await self.vault.invalidate_external_token()
                return GatewayResult.failure(
                    GatewayErrorKind.EXTERNAL_AUTH_REQUIRED, EXTERNAL_AUTH_EXPIRED_MESSAGE
                )
            google_token = stored.token

        try:
            response = await self._send(
                method, path, session.access_token, google_token, json=json, params=params
            )
        except httpx.TransportError as e:
            return _network_failure(method, path, e)

        if response.status_code != 401:
            return _to_result(response)

        if _is_google_rejection(response):
            return await self._reject_external_token(method, path)

        logger.info(f"{method} {path}: 401, refreshing session")
        refreshed = await self.refresh_session(session)
        if refreshed is None:
            return GatewayResult.failure(
                GatewayErrorKind.SESSION_EXPIRED, SESSION_EXPIRED_MESSAGE, status_code=401
            )

        try:
            retry = await self._send(
                method, path, refreshed.access_token, google_token, json=json, params=params
            )
        except httpx.TransportError as e:
            return _network_failure(method, path, e)

        if retry.status_code == 401 and _is_google_rejection(retry):
            return await self._reject_external_token(method, path)
        return _to_result(retry)

    async def refresh_session(self, session: Session | None = None) -> Session | None:
        """Exchange the refresh token for a new Session and persist it.

        Returns None when there is nothing to refresh or the backend refuses.
        A refused refresh also discards the stored Session and User.
        """
        if session is None:
            session = await self.vault.get_session()
        if session is None:
            return None

        client = await self._get_client()
        self.request_count += 1
        try:
            response = await client.post(REFRESH_PATH, json={"refresh_token": session.refresh_token})
        except httpx.TransportError as e:
            logger.warning(f"Session refresh failed: {type(e).__name__}: {e}")
            await self.vault.clear_session()
            return None

        if not response.is_success:
            logger.warning(f"Session refresh rejected with HTTP {response.status_code}")
            await self.vault.clear_session()
            return None

        try:
            payload = response.json()
            new_session = Session.model_validate(payload["session"])
        except (ValueError, KeyError, TypeError, ValidationError) as e:
            logger.warning(f"Session refresh returned an unusable body: {type(e).__name__}")
            await self.vault.clear_session()
            return None

        await self.vault.save_session(new_session)
        logger.info("Session refreshed")
        return new_session

    # ------------------------------------------------------------------
    # Unauthenticated calls (login, signup, verification helpers)
    # ------------------------------------------------------------------

    async def public_request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> GatewayResult:
        """Call an endpoint that needs no Session. Same result parsing, no refresh."""
        client = await self._get_client()
        self.request_count += 1
        try:
            response = await client.request(method, path, json=json, params=params)
        except httpx.TransportError as e:
            return _network_failure(method, path, e)
        return _to_result(response)

    async def post_public(self, path: str, body: dict[str, Any]) -> GatewayResult:
        return await self.public_request("POST", path, json=body)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _send(
        self,
        method: str,
        path: str,
        access_token: str,
        google_token: str | None,
        **kwargs: Any,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {access_token}"}
        if google_token:
            headers[GOOGLE_TOKEN_HEADER] = google_token
        client = await self._get_client()
        self.request_count += 1
        return await client.request(method, path, headers=headers, **kwargs)

    async def _reject_external_token(self, method: str, path: str) -> GatewayResult:
        logger.warning(f"{method} {path}: Google rejected the delegated token, clearing it")
        await self.vault.invalidate_external_token()
        return GatewayResult.failure(
            GatewayErrorKind.EXTERNAL_AUTH_REQUIRED,
            EXTERNAL_AUTH_EXPIRED_MESSAGE,
            status_code=401,
        )


def _parse_body(response: httpx.Response) -> Any:
    """JSON body if there is one, otherwise the text (None when empty)."""
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _error_message(response: httpx.Response, body: Any) -> str:
    """Server-reported ``error`` field, or a status line for HTML/unparseable bodies."""
    content_type = response.headers.get("content-type", "")
    if "text/html" not in content_type and isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, str) and error:
            return error
    return f"Server error: {response.status_code} {response.reason_phrase}".rstrip()


def _is_google_rejection(response: httpx.Response) -> bool:
    body = _parse_body(response)
    return isinstance(body, dict) and body.get("error") == INVALID_GOOGLE_CREDENTIALS


def _to_result(response: httpx.Response) -> GatewayResult:
    body = _parse_body(response)
    if response.is_success:
        return GatewayResult.ok(body, response.status_code)
    message = _error_message(response, body)
    logger.info(f"{response.request.method} {response.request.url.path}: HTTP {response.status_code}: {message}")
    return GatewayResult.failure(
        GatewayErrorKind.SERVER_ERROR, message, status_code=response.status_code, data=body
    )


def _network_failure(method: str, path: str, error: httpx.TransportError) -> GatewayResult:
    logger.warning(f"{method} {path}: {type(error).__name__}: {error}")
    return GatewayResult.failure(
        GatewayErrorKind.NETWORK_ERROR, f"Could not reach the TwinBot backend: {error}"
    )
