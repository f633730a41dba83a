"""Auth domain models: the credentials the client persists between calls."""

from __future__ import annotations

import json
import time

from pydantic import BaseModel, ValidationError

from twinbot_shared.models import ApiResult


class AuthUser(BaseModel):
    """Decoded Supabase JWT claims."""

    user_id: str
    email: str
    role: str = "authenticated"
    exp: int


class Session(BaseModel):
    """Backend-issued credential pair. Replaced wholesale on refresh."""

    access_token: str
    refresh_token: str


class User(BaseModel):
    """The authenticated principal as returned by login/signup."""

    id: str
    email: str
    name: str | None = None
    email_confirmed_at: str | None = None


class ExternalToken(BaseModel):
    """Google OAuth token used for delegated calendar calls.

    ``expires_at`` is epoch milliseconds. Tokens stored in the legacy raw
    string form have no expiry and never report themselves as expired.
    """

    token: str
    expires_at: int | None = None

    def is_expired(self, now_ms: int | None = None) -> bool:
        if self.expires_at is None:
            return False
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        return now_ms >= self.expires_at

    @classmethod
    def from_stored(cls, raw: str) -> ExternalToken | None:
        """Parse either storage form: a JSON ``{token, expires_at}`` object or a bare token."""
        raw = raw.strip()
        if not raw:
            return None
        if raw.startswith("{"):
            try:
                return cls.model_validate(json.loads(raw))
            except (ValueError, ValidationError):
                # A damaged JSON record reads as no token, never as a raw token.
                return None
        return cls(token=raw)


class LoginResult(ApiResult):
    """Returned by AuthService.login."""

    user: User | None = None
    session: Session | None = None


class SignupResult(ApiResult):
    """Returned by AuthService.signup. The account still needs email confirmation."""

    user: User | None = None


class VerificationStatus(ApiResult):
    """Returned by AuthService.verification_status."""

    verified: bool = False


class ProfileResult(ApiResult):
    """Returned by AuthService.get_profile / update_profile."""

    profile: dict = {}  # type: ignore[type-arg]
