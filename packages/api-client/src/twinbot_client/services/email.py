"""IMAP mail access through the backend.

Every route takes an optional ``credentials`` object. Fields left out are
filled in server-side from the user's saved email configuration, so most
callers pass nothing.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError
from twinbot_shared.email_models import (
    EmailConfigResult,
    EmailCredentials,
    EmailMessage,
    EmailsResult,
    FetchOptions,
    Mailbox,
    MailboxesResult,
    MailboxStats,
)
from twinbot_shared.models import ApiResult

from twinbot_client.services.base import BaseService

logger = logging.getLogger(__name__)

FETCH_PATH = "/api/email/fetch"
MAILBOXES_PATH = "/api/email/mailboxes"
MARK_READ_PATH = "/api/email/mark-read"
MOVE_PATH = "/api/email/move"
STATS_PATH = "/api/email/stats"
CONFIG_PATH = "/api/email/config"


def _credentials(credentials: EmailCredentials | None) -> dict[str, Any]:
    return credentials.model_dump(exclude_none=True) if credentials else {}


class EmailService(BaseService):
    async def fetch(
        self,
        credentials: EmailCredentials | None = None,
        options: FetchOptions | None = None,
        save_metadata: bool = False,
    ) -> EmailsResult:
        """Fetch the newest messages from a mailbox (INBOX by default)."""
        body = {
            "credentials": _credentials(credentials),
            "options": (options or FetchOptions()).model_dump(),
            "saveMetadata": save_metadata,
        }
        result = await self.gateway.request("POST", FETCH_PATH, json=body)

        emails = []
        for raw in self._payload(result).get("emails") or []:
            try:
                emails.append(EmailMessage.model_validate(raw))
            except ValidationError:
                logger.warning("Skipping unreadable email from fetch response")
        return self._carry(result, EmailsResult, emails=emails)

    async def mailboxes(self, credentials: EmailCredentials | None = None) -> MailboxesResult:
        result = await self.gateway.request(
            "POST", MAILBOXES_PATH, json={"credentials": _credentials(credentials)}
        )
        mailboxes = []
        for raw in self._payload(result).get("mailboxes") or []:
            try:
                mailboxes.append(Mailbox.model_validate(raw))
            except ValidationError:
                logger.warning(f"Skipping unreadable mailbox: {raw!r}")
        return self._carry(result, MailboxesResult, mailboxes=mailboxes)

    async def mark_read(
        self, mailbox: str, uid: int, credentials: EmailCredentials | None = None
    ) -> ApiResult:
        body = {"credentials": _credentials(credentials), "mailbox": mailbox, "uid": uid}
        return await self.gateway.request("POST", MARK_READ_PATH, json=body)

    async def move(
        self,
        source_mailbox: str,
        target_mailbox: str,
        uid: int,
        credentials: EmailCredentials | None = None,
    ) -> ApiResult:
        body = {
            "credentials": _credentials(credentials),
            "sourceMailbox": source_mailbox,
            "targetMailbox": target_mailbox,
            "uid": uid,
        }
        return await self.gateway.request("POST", MOVE_PATH, json=body)

    async def stats(
        self, mailbox: str = "INBOX", credentials: EmailCredentials | None = None
    ) -> MailboxStats:
        result = await self.gateway.request(
            "POST", STATS_PATH, json={"credentials": _credentials(credentials), "mailbox": mailbox}
        )
        payload = self._payload(result)
        return self._carry(
            result,
            MailboxStats,
            total=payload.get("total") or 0,
            unseen=payload.get("unseen") or 0,
        )

    async def config(self) -> EmailConfigResult:
        """Whether the user has an email account configured and a live OAuth grant for it."""
        result = await self.gateway.request("GET", CONFIG_PATH)
        payload = self._payload(result)
        return self._carry(
            result,
            EmailConfigResult,
            configured=bool(payload.get("configured", False)),
            has_valid_tokens=bool(payload.get("hasValidTokens", False)),
            use_oauth=bool(payload.get("useOAuth", False)),
            config=payload.get("config") or {},
        )
