"""Calendar models: Google Calendar events as the backend passes them through.

Fields keep Google's camelCase names on the wire (``dateTime``, ``htmlLink``)
through aliases, so events round-trip to the backend unchanged while Python
code reads snake_case attributes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from twinbot_shared.models import ApiResult


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class EventTime(_WireModel):
    """Start or end of an event. All-day events carry ``date`` instead of ``dateTime``."""

    date_time: str | None = Field(default=None, alias="dateTime")
    date: str | None = None
    time_zone: str | None = Field(default=None, alias="timeZone")


class Attendee(_WireModel):
    email: str
    display_name: str | None = Field(default=None, alias="displayName")


class CalendarEvent(_WireModel):
    """A calendar event. ``id`` is empty until the backend has created it."""

    id: str = ""
    summary: str = ""
    description: str | None = None
    location: str | None = None
    start: EventTime | None = None
    end: EventTime | None = None
    attendees: list[Attendee] = []
    html_link: str | None = Field(default=None, alias="htmlLink")
    color_id: str | None = Field(default=None, alias="colorId")
    hangout_link: str | None = Field(default=None, alias="hangoutLink")
    is_holiday: bool | None = Field(default=None, alias="isHoliday")


class EventsResult(ApiResult):
    """Returned by list_events / list_holidays.

    ``auth_error`` is set when the Google grant is missing or was rejected,
    and the calendar view should offer to reconnect.
    """

    events: list[CalendarEvent] = []
    auth_error: bool = False


class EventResult(ApiResult):
    """Returned by create/update calls."""

    event: CalendarEvent | None = None


class AuthUrlResult(ApiResult):
    """Returned by CalendarService.get_auth_url."""

    url: str = ""
