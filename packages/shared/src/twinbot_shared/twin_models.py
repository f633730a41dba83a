"""Assistant ("twin") models: chat, task extraction and conversation history."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from twinbot_shared.models import ApiResult


class ChatResult(ApiResult):
    """Returned by TwinService.chat. ``reply`` is already fallback-filtered."""

    reply: str = ""
    conversation_id: str | None = None
    calendar_event: dict[str, Any] | None = None


class ExtractedTask(BaseModel):
    """A task the model pulled out of free text. The backend's shape varies by
    model, so unknown keys are kept in ``extra``."""

    title: str = ""
    description: str | None = None
    due_date: str | None = None
    priority: str | None = None
    extra: dict[str, Any] = {}


class TasksResult(ApiResult):
    tasks: list[ExtractedTask] = []


class Conversation(BaseModel):
    """Summary of one server-side conversation. Timestamps are passed through as sent."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    message_count: int = Field(default=0, alias="messageCount")
    created_at: str | int | None = Field(default=None, alias="createdAt")
    updated_at: str | int | None = Field(default=None, alias="updatedAt")


class ConversationsResult(ApiResult):
    conversations: list[Conversation] = []


class NLEventResult(ApiResult):
    """Returned by TwinService.create_calendar_event."""

    event: dict[str, Any] | None = None
    event_details: dict[str, Any] | None = None


class ModelStatus(ApiResult):
    """TensorFlow personalization status reported by the backend."""

    status: dict[str, Any] = {}
