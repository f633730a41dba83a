"""Failure taxonomy for gateway calls.

Each kind asks the caller for a different reaction:

  - AUTH_REQUIRED           no Session at all; nothing was sent → show login
  - SESSION_EXPIRED         refresh failed; Session discarded → show login
  - EXTERNAL_AUTH_REQUIRED  Google token missing/expired/rejected → reconnect Google
  - SERVER_ERROR            backend answered with an error → show it inline
  - NETWORK_ERROR           backend unreachable → show it inline, credentials untouched

Gateway calls return these as ``GatewayResult.error_kind``. The exception
classes below exist for callers that prefer ``raise_for_error()``.
"""

from __future__ import annotations

from enum import StrEnum

AUTH_REQUIRED_MESSAGE = "Authentication required"
SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."
EXTERNAL_AUTH_MISSING_MESSAGE = (
    "Google Calendar authentication required. Please connect to Google Calendar first."
)
EXTERNAL_AUTH_EXPIRED_MESSAGE = "Google Calendar authentication has expired. Please reconnect."

# Body the backend sends (with HTTP 401) when Google rejected the forwarded token.
INVALID_GOOGLE_CREDENTIALS = "Invalid Google credentials"


class GatewayErrorKind(StrEnum):
    AUTH_REQUIRED = "auth_required"
    SESSION_EXPIRED = "session_expired"
    EXTERNAL_AUTH_REQUIRED = "external_auth_required"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"


class GatewayError(Exception):
    """Base class for gateway failures raised via GatewayResult.raise_for_error()."""

    kind: GatewayErrorKind = GatewayErrorKind.SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationRequired(GatewayError):
    kind = GatewayErrorKind.AUTH_REQUIRED


class SessionExpired(GatewayError):
    kind = GatewayErrorKind.SESSION_EXPIRED


class ExternalAuthRequired(GatewayError):
    kind = GatewayErrorKind.EXTERNAL_AUTH_REQUIRED


class ServerError(GatewayError):
    kind = GatewayErrorKind.SERVER_ERROR


class NetworkError(GatewayError):
    kind = GatewayErrorKind.NETWORK_ERROR


ERROR_TYPES: dict[GatewayErrorKind, type[GatewayError]] = {
    cls.kind: cls
    for cls in (AuthenticationRequired, SessionExpired, ExternalAuthRequired, ServerError, NetworkError)
}
