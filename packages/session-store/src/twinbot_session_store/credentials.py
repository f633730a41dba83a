"""Typed credential access over a KeyValueStore.

The vault is the only thing that knows how Session, User and ExternalToken
are encoded in storage. Reads are forgiving: a corrupt or half-written value
reads as "absent" rather than raising, because the caller's only sensible
reaction to a bad stored credential is the same as to a missing one: log in
(or reconnect Google) again.
"""

from __future__ import annotations

import json
import logging
import time

from pydantic import ValidationError
from twinbot_shared.auth_models import ExternalToken, Session, User

from twinbot_session_store import keys
from twinbot_session_store.store import KeyValueStore

logger = logging.getLogger(__name__)


class CredentialVault:
    """Reads and writes the persisted Session, User and Google token."""

    def __init__(self, store: KeyValueStore, profile: str = "default") -> None:
        self.store = store
        self.profile = profile

    # ------------------------------------------------------------------
    # Session + User
    # ------------------------------------------------------------------

    async def get_session(self) -> Session | None:
        raw = await self.store.get(keys.session_key(self.profile))
        if not raw:
            return None
        try:
            return Session.model_validate_json(raw)
        except ValidationError:
            logger.warning("Stored session is unreadable; treating as logged out")
            return None

    async def save_session(self, session: Session) -> None:
        await self.store.set(keys.session_key(self.profile), session.model_dump_json())

    async def get_user(self) -> User | None:
        raw = await self.store.get(keys.user_key(self.profile))
        if not raw:
            return None
        try:
            return User.model_validate_json(raw)
        except ValidationError:
            logger.warning("Stored user is unreadable; ignoring it")
            return None

    async def save_user(self, user: User) -> None:
        await self.store.set(keys.user_key(self.profile), user.model_dump_json())

    async def save_login(self, session: Session, user: User | None) -> None:
        await self.save_session(session)
        if user is not None:
            await self.save_user(user)

    async def clear_session(self) -> None:
        """Forget the Session and User. The Google token is left alone."""
        await self.store.delete(keys.session_key(self.profile), keys.user_key(self.profile))

    # ------------------------------------------------------------------
    # External (Google) token
    # ------------------------------------------------------------------

    async def get_external_token(self) -> ExternalToken | None:
        raw = await self.store.get(keys.external_token_key(self.profile))
        if not raw:
            return None
        return ExternalToken.from_stored(raw)

    async def save_external_token(self, token: str, expires_in: int | None = None) -> ExternalToken:
        """Store a freshly granted Google token.

        ``expires_in`` is seconds, as Google returns it; it becomes an absolute
        ``expires_at`` in epoch milliseconds. Storing a token also clears the
        re-authorization flag.
        """
        expires_at = None
        if expires_in is not None:
            expires_at = int(time.time() * 1000) + int(expires_in) * 1000
        external = ExternalToken(token=token, expires_at=expires_at)
        await self.store.set(
            keys.external_token_key(self.profile),
            json.dumps({"token": external.token, "expires_at": external.expires_at}),
        )
        await self.acknowledge_external_reauth()
        return external

    async def clear_external_token(self) -> None:
        await self.store.delete(keys.external_token_key(self.profile))

    async def invalidate_external_token(self) -> None:
        """Drop a rejected Google token and flag that the user must reconnect."""
        await self.clear_external_token()
        await self.mark_external_reauth()

    async def mark_external_reauth(self) -> None:
        await self.store.set(keys.external_reauth_key(self.profile), "true")

    async def external_reauth_needed(self) -> bool:
        return (await self.store.get(keys.external_reauth_key(self.profile))) == "true"

    async def acknowledge_external_reauth(self) -> None:
        await self.store.delete(keys.external_reauth_key(self.profile))

    async def clear_all(self) -> None:
        await self.store.delete(*keys.all_keys(self.profile))
