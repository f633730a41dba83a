"""Account operations: login, signup, verification, password and profile.

Login, signup and the verification/reset helpers are public endpoints, sent
without a Session. Password update and profile calls go through the
authenticated path and so get the refresh-once behavior for free.
"""

from __future__ import annotations

import logging
from typing import Any

import jwt as pyjwt
from pydantic import ValidationError
from twinbot_auth.jwt import read_claims
from twinbot_shared.auth_models import (
    AuthUser,
    LoginResult,
    ProfileResult,
    Session,
    SignupResult,
    User,
    VerificationStatus,
)
from twinbot_shared.models import ApiResult

from twinbot_client.services.base import BaseService

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"
REGISTER_PATH = "/api/auth/register"
VERIFICATION_STATUS_PATH = "/api/auth/verification-status"
RESEND_VERIFICATION_PATH = "/api/auth/resend-verification"
RESET_PASSWORD_PATH = "/api/auth/reset-password"
UPDATE_PASSWORD_PATH = "/api/auth/update-password"
PROFILE_PATH = "/api/auth/profile"


def user_from_payload(raw: dict[str, Any]) -> User:
    """Build a User from a Supabase user object.

    The display name lives in ``user_metadata`` for Supabase users; a flat
    ``name`` key wins when the backend already flattened it.
    """
    metadata = raw.get("user_metadata") or {}
    return User(
        id=raw["id"],
        email=raw.get("email", ""),
        name=raw.get("name") or metadata.get("name") or metadata.get("username"),
        email_confirmed_at=raw.get("email_confirmed_at"),
    )


class AuthService(BaseService):
    """Account lifecycle against /api/auth."""

    async def login(self, email: str, password: str) -> LoginResult:
        """Exchange credentials for a Session and persist it with the User."""
        result = await self.gateway.post_public(LOGIN_PATH, {"email": email, "password": password})
        if not result.success:
            logger.info(f"Login failed for {email}: {result.message}")
            return self._carry(result, LoginResult)

        payload = self._payload(result)
        try:
            session = Session.model_validate(payload["session"])
            user = user_from_payload(payload["user"])
        except (KeyError, TypeError, ValidationError):
            return LoginResult(
                success=False,
                message="Login response did not include a session",
                status_code=result.status_code,
                data=result.data,
            )

        await self.vault.save_login(session, user)
        logger.info(f"Logged in as {user.email}")
        return LoginResult(
            success=True,
            message="Logged in",
            status_code=result.status_code,
            user=user,
            session=session,
        )

    async def signup(self, email: str, password: str, name: str) -> SignupResult:
        """Register a new account.

        The backend usually withholds the Session until the email address is
        confirmed. If it does return one, it is stored as a login.
        """
        result = await self.gateway.post_public(
            REGISTER_PATH, {"email": email, "password": password, "name": name, "username": name}
        )
        if not result.success:
            return self._carry(result, SignupResult)

        payload = self._payload(result)
        user = None
        try:
            if payload.get("user"):
                user = user_from_payload(payload["user"])
            if payload.get("session"):
                await self.vault.save_login(Session.model_validate(payload["session"]), user)
        except (KeyError, TypeError, ValidationError):
            logger.warning("Signup response had an unreadable user or session")

        return SignupResult(
            success=True,
            message=self._server_message(result, "Registration successful"),
            status_code=result.status_code,
            data=result.data,
            user=user,
        )

    async def verification_status(self, email: str) -> VerificationStatus:
        result = await self.gateway.public_request(
            "GET", VERIFICATION_STATUS_PATH, params={"email": email}
        )
        return self._carry(
            result,
            VerificationStatus,
            message=self._server_message(result, result.message),
            verified=bool(self._payload(result).get("verified", False)),
        )

    async def resend_verification(self, email: str) -> ApiResult:
        result = await self.gateway.post_public(RESEND_VERIFICATION_PATH, {"email": email})
        return self._with_server_message(result)

    async def reset_password(self, email: str) -> ApiResult:
        result = await self.gateway.post_public(RESET_PASSWORD_PATH, {"email": email})
        return self._with_server_message(result)

    async def update_password(self, password: str) -> ApiResult:
        result = await self.gateway.request("POST", UPDATE_PASSWORD_PATH, json={"password": password})
        return self._with_server_message(result)

    async def get_profile(self) -> ProfileResult:
        result = await self.gateway.request("GET", PROFILE_PATH)
        return self._carry(result, ProfileResult, profile=self._payload(result) if result.success else {})

    async def update_profile(self, fields: dict[str, Any]) -> ProfileResult:
        """Upsert profile fields. ``id`` is never sent; the backend takes it from the Session."""
        body = {k: v for k, v in fields.items() if k != "id"}
        result = await self.gateway.request("POST", PROFILE_PATH, json=body)
        return self._carry(result, ProfileResult, profile=self._payload(result) if result.success else {})

    async def logout(self) -> ApiResult:
        """Forget the Session and User locally. The backend is not contacted."""
        await self.vault.clear_session()
        logger.info("Logged out")
        return ApiResult(success=True, message="Logged out")

    async def current_user(self) -> User | None:
        return await self.vault.get_user()

    async def session_claims(self) -> AuthUser | None:
        """Claims of the stored access token, or None without a readable one."""
        session = await self.vault.get_session()
        if session is None:
            return None
        try:
            return read_claims(session.access_token)
        except (pyjwt.PyJWTError, KeyError):
            return None

    def _with_server_message(self, result: ApiResult) -> ApiResult:
        if not result.success:
            return self._carry(result, ApiResult)
        return self._carry(result, ApiResult, message=self._server_message(result, result.message))
