"""Authenticated request gateway for the TwinBot backend.

Every backend call goes through AuthenticatedGateway.request(), which owns
token attachment and the single refresh-and-resend on an expired access token.
"""

from twinbot_gateway.errors import (
    AuthenticationRequired,
    ExternalAuthRequired,
    GatewayError,
    GatewayErrorKind,
    NetworkError,
    ServerError,
    SessionExpired,
)
from twinbot_gateway.gateway import AuthenticatedGateway
from twinbot_gateway.result import GatewayResult

__all__ = [
    "AuthenticatedGateway",
    "AuthenticationRequired",
    "ExternalAuthRequired",
    "GatewayError",
    "GatewayErrorKind",
    "GatewayResult",
    "NetworkError",
    "ServerError",
    "SessionExpired",
]
