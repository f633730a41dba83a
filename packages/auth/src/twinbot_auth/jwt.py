"""Supabase JWT helpers.

The backend issues Supabase access tokens. The client never holds the JWT
secret, so it mostly reads claims without verifying the signature, which is enough to
show who is logged in and when the access token lapses. ``verify_token`` stays
for callers that do hold the secret (backend-side tools, tests).
"""

from __future__ import annotations

import time

import jwt as pyjwt
from twinbot_shared.auth_models import AuthUser


def verify_token(token: str, jwt_secret: str) -> AuthUser:
    """Decode and validate a Supabase JWT.

    Args:
        token: The raw JWT string (the Session's access_token).
        jwt_secret: The Supabase JWT secret (Settings → API → JWT Secret).

    Returns:
        AuthUser with user_id, email, role, and expiry.

    Raises:
        pyjwt.ExpiredSignatureError: Token has expired.
        pyjwt.InvalidSignatureError: Signature doesn't match the secret.
        pyjwt.DecodeError: Malformed token.
        pyjwt.MissingRequiredClaimError: ``exp`` or ``sub`` missing.
    """
    payload = pyjwt.decode(
        token,
        jwt_secret,
        algorithms=["HS256"],
        audience="authenticated",
        options={"require": ["exp", "sub"]},
    )
    return _to_auth_user(payload)


def read_claims(token: str) -> AuthUser:
    """Decode claims without checking the signature or expiry.

    Raises pyjwt.DecodeError for a malformed token and KeyError when
    ``sub`` or ``exp`` is absent.
    """
    payload = pyjwt.decode(
        token,
        options={"verify_signature": False, "verify_exp": False, "verify_aud": False},
    )
    return _to_auth_user(payload)


def is_expired(token: str, leeway: int = 0) -> bool:
    """True when the token's ``exp`` is in the past, or it can't be decoded at all."""
    try:
        claims = read_claims(token)
    except (pyjwt.PyJWTError, KeyError):
        return True
    return claims.exp <= int(time.time()) - leeway


def _to_auth_user(payload: dict) -> AuthUser:  # type: ignore[type-arg]
    return AuthUser(
        user_id=payload["sub"],
        email=payload.get("email", ""),
        role=payload.get("role", "authenticated"),
        exp=payload["exp"],
    )
