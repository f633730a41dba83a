"""Google Calendar operations, delegated through the backend.

Reads send the Google token in ``X-Google-Token``; writes also put it in the
body as ``accessToken`` because that is where the create and update routes
look for it. Either way the call is delegated, so a missing, expired or
rejected token comes back as ``requires_external_auth`` with the Session
untouched.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError
from twinbot_shared.auth_models import ExternalToken
from twinbot_shared.calendar_models import (
    AuthUrlResult,
    CalendarEvent,
    EventResult,
    EventsResult,
)
from twinbot_shared.models import ApiResult

from twinbot_client.services.base import BaseService

logger = logging.getLogger(__name__)

AUTH_URL_PATH = "/api/calendar/auth-url"
EVENTS_PATH = "/api/calendar/events"
HOLIDAYS_PATH = "/api/calendar/holidays"
CREATE_EVENT_PATH = "/api/calendar/create-event"
UPDATE_EVENT_PATH = "/api/calendar/update-event/{event_id}"
DELETE_EVENT_PATH = "/api/calendar/delete-event/{event_id}"


def _iso(value: datetime | str) -> str:
    return value.isoformat() if isinstance(value, datetime) else value


def _parse_events(raw: Any) -> list[CalendarEvent]:
    events = []
    for item in raw or []:
        try:
            events.append(CalendarEvent.model_validate(item))
        except ValidationError:
            logger.warning(f"Skipping unreadable calendar event: {item!r}")
    return events


class CalendarService(BaseService):
    """Calendar reads and writes for the logged-in user's Google account."""

    async def get_auth_url(self) -> AuthUrlResult:
        """URL of Google's consent screen. Needs only the Session."""
        result = await self.gateway.request("GET", AUTH_URL_PATH)
        return self._carry(result, AuthUrlResult, url=self._payload(result).get("url", ""))

    async def connect(self, token: str, expires_in: int | None = None) -> ExternalToken:
        """Store the Google token obtained from the consent flow."""
        token = token.strip()
        if not token:
            raise ValueError("Google token must not be empty")
        external = await self.vault.save_external_token(token, expires_in)
        logger.info("Google Calendar connected")
        return external

    async def disconnect(self) -> None:
        await self.vault.clear_external_token()
        await self.vault.acknowledge_external_reauth()

    async def needs_reconnect(self) -> bool:
        """True after a Google token was rejected or expired and nothing replaced it."""
        return await self.vault.external_reauth_needed()

    async def list_events(self, start: datetime | str, end: datetime | str) -> EventsResult:
        """Events between ``start`` and ``end`` (ISO-8601)."""
        result = await self.gateway.request(
            "GET", EVENTS_PATH, params={"start": _iso(start), "end": _iso(end)}, delegated=True
        )
        return self._carry(
            result,
            EventsResult,
            events=_parse_events(self._payload(result).get("events")),
            auth_error=result.requires_external_auth,
        )

    async def list_holidays(self, start: datetime | str, end: datetime | str) -> EventsResult:
        result = await self.gateway.request(
            "GET", HOLIDAYS_PATH, params={"start": _iso(start), "end": _iso(end)}, delegated=True
        )
        holidays = _parse_events(self._payload(result).get("holidays"))
        for holiday in holidays:
            holiday.is_holiday = True
        return self._carry(
            result, EventsResult, events=holidays, auth_error=result.requires_external_auth
        )

    async def create_event(self, event: CalendarEvent) -> EventResult:
        return await self._write_event(
            "POST", CREATE_EVENT_PATH, {"eventDetails": event.to_wire()}
        )

    async def create_event_from_text(self, content: str) -> EventResult:
        """Let the backend extract event details from free text and create the event."""
        return await self._write_event("POST", CREATE_EVENT_PATH, {"content": content})

    async def update_event(self, event_id: str, event: CalendarEvent) -> EventResult:
        if not event_id:
            raise ValueError("event_id is required")
        return await self._write_event(
            "PUT", UPDATE_EVENT_PATH.format(event_id=event_id), {"eventDetails": event.to_wire()}
        )

    async def delete_event(self, event_id: str) -> ApiResult:
        if not event_id:
            raise ValueError("event_id is required")
        result = await self.gateway.request(
            "DELETE", DELETE_EVENT_PATH.format(event_id=event_id), delegated=True
        )
        return self._carry(result, ApiResult, message=self._server_message(result, result.message))

    async def _write_event(self, method: str, path: str, body: dict[str, Any]) -> EventResult:
        token = await self._usable_google_token()
        if token is not None:
            body = {**body, "accessToken": token}
        result = await self.gateway.request(method, path, json=body, delegated=True)

        event = None
        raw_event = self._payload(result).get("event")
        if result.success and raw_event:
            try:
                event = CalendarEvent.model_validate(raw_event)
            except ValidationError:
                logger.warning("Backend returned an unreadable event")
        return self._carry(
            result,
            EventResult,
            message=self._server_message(result, result.message),
            event=event,
        )
