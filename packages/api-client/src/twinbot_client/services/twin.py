"""Assistant ("twin") operations: chat, task extraction, NL calendar events.

Replies from the backend's language model can degrade to canned fallback
text when the model host is down. ``filter_fallback_message`` swaps those for
a neutral reply so the user never sees backend diagnostics in a chat bubble.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError
from twinbot_shared.models import ApiResult
from twinbot_shared.twin_models import (
    ChatResult,
    Conversation,
    ConversationsResult,
    ExtractedTask,
    ModelStatus,
    NLEventResult,
    TasksResult,
)

from twinbot_client.services.base import BaseService

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/twin/chat"
EXTRACT_TASKS_PATH = "/api/twin/extract-tasks"
NL_EVENT_PATH = "/api/twin/simple-calendar-event"
CONVERSATIONS_PATH = "/api/twin/conversations/{key}"
FEEDBACK_PATH = "/api/twin/feedback"
TENSORFLOW_STATUS_PATH = "/api/twin/tensorflow/status"

FALLBACK_REPLY = "I understand your request. How can I assist you further?"
STATUS_BANNER_REPLY = "I'll help you with that. What would you like to know?"
ERROR_PAYLOAD_REPLY = "I'm ready to help you. What would you like to know?"

NO_USER_MESSAGE = "No user stored for this session. Please log in again."

_ORDINAL_DATE = re.compile(
    r"(\d+)(st|nd|rd|th)\s+(of\s+)?"
    r"(January|February|March|April|May|June|July|August|September|October|November|December)",
    re.IGNORECASE,
)

_TASK_FIELDS = {"title", "description", "due_date", "dueDate", "priority"}


def filter_fallback_message(reply: str) -> str:
    """Replace fallback-mode text, service-status banners and JSON error
    payloads with a neutral reply. Anything else is returned unchanged."""
    if (
        "I apologize, but I'm currently running in fallback mode" in reply
        or "temporarily unavailable" in reply
    ):
        logger.warning("Assistant replied in fallback mode")
        return FALLBACK_REPLY

    if "Service Status:" in reply and (
        "Ollama: Unavailable" in reply or "TensorFlow: Unavailable" in reply
    ):
        logger.warning("Assistant replied with a service status banner")
        return STATUS_BANNER_REPLY

    if '"error":' in reply and '"diagnostic":' in reply:
        try:
            payload = json.loads(reply)
        except ValueError:
            return reply
        if isinstance(payload, dict) and payload.get("error") and payload.get("diagnostic"):
            logger.warning("Assistant replied with an error payload")
            return ERROR_PAYLOAD_REPLY

    return reply


def normalize_ordinal_dates(message: str) -> str:
    """'4th of April' / '4th April' → '4 April', which the event extractor parses reliably."""
    return _ORDINAL_DATE.sub(lambda m: f"{m.group(1)} {m.group(4)}", message)


def _to_task(raw: Any) -> ExtractedTask:
    if isinstance(raw, str):
        return ExtractedTask(title=raw)
    if not isinstance(raw, dict):
        return ExtractedTask(title=str(raw))
    return ExtractedTask(
        title=str(raw.get("title") or raw.get("task") or ""),
        description=raw.get("description"),
        due_date=raw.get("due_date") or raw.get("dueDate"),
        priority=raw.get("priority"),
        extra={k: v for k, v in raw.items() if k not in _TASK_FIELDS},
    )


class TwinService(BaseService):
    """The personal assistant: chat plus the structured helpers around it."""

    async def chat(
        self,
        message: str,
        conversation_id: str | None = None,
        debug: bool = False,
        prevent_fallback: bool = True,
    ) -> ChatResult:
        """Send a chat message.

        The Google token is forwarded when one is stored, so a message like
        "schedule a call with Sam tomorrow at 3" can land in the calendar.
        The call is not delegated: without a token it still goes through.
        """
        if not message.strip():
            raise ValueError("message must not be empty")

        body = {
            "message": message,
            "userId": await self._user_id(),
            "conversationId": conversation_id,
            "forceOllama": True,
            "debug": debug,
            "preventFallback": prevent_fallback,
        }
        result = await self.gateway.request(
            "POST", CHAT_PATH, json=body, external_token=await self._usable_google_token()
        )
        if not result.success:
            return self._carry(result, ChatResult)

        if isinstance(result.data, str):
            return self._carry(result, ChatResult, reply=filter_fallback_message(result.data))

        payload = self._payload(result)
        reply = payload.get("response")
        if not isinstance(reply, str) or not reply:
            return self._carry(result, ChatResult).model_copy(
                update={"success": False, "message": "Invalid response format from server"}
            )
        if payload.get("fallback") is True:
            logger.warning("Backend flagged the chat reply as a fallback")
            reply = FALLBACK_REPLY

        return self._carry(
            result,
            ChatResult,
            reply=filter_fallback_message(reply),
            conversation_id=payload.get("conversationId") or conversation_id,
            calendar_event=payload.get("calendarEvent"),
        )

    async def extract_tasks(self, content: str) -> TasksResult:
        result = await self.gateway.request(
            "POST", EXTRACT_TASKS_PATH, json={"content": content, "userId": await self._user_id()}
        )
        if not result.success:
            return self._carry(result, TasksResult)

        raw = self._payload(result).get("tasks")
        if isinstance(raw, dict):
            raw = raw["tasks"] if isinstance(raw.get("tasks"), list) else [raw]
        if not isinstance(raw, list):
            logger.warning(f"Task extraction returned no task list: {raw!r}")
            return self._carry(
                result, TasksResult, message="Invalid response format from server"
            ).model_copy(update={"success": False})
        return self._carry(result, TasksResult, tasks=[_to_task(t) for t in raw])

    async def create_calendar_event(self, message: str) -> NLEventResult:
        """Create a calendar event from a free-text description.

        Delegated: fails with ``requires_external_auth`` without sending
        when no usable Google token is stored.
        """
        processed = normalize_ordinal_dates(message)
        if processed != message:
            logger.info(f"Normalized event message: {processed!r}")

        body = {"message": processed, "userId": await self._user_id()}
        token = await self._usable_google_token()
        if token is not None:
            body["accessToken"] = token
        result = await self.gateway.request("POST", NL_EVENT_PATH, json=body, delegated=True)

        payload = self._payload(result)
        message_text = self._server_message(result, result.message)
        if result.success and payload.get("success") is False:
            return self._carry(result, NLEventResult, message=message_text).model_copy(
                update={"success": False}
            )
        return self._carry(
            result,
            NLEventResult,
            message=message_text,
            event=payload.get("event"),
            event_details=payload.get("eventDetails"),
        )

    async def conversations(self) -> ConversationsResult:
        user_id = await self._user_id()
        if user_id is None:
            return ConversationsResult(success=False, message=NO_USER_MESSAGE, requires_login=True)

        result = await self.gateway.request("GET", CONVERSATIONS_PATH.format(key=user_id))
        conversations = []
        for raw in self._payload(result).get("conversations") or []:
            try:
                conversations.append(Conversation.model_validate(raw))
            except ValidationError:
                logger.warning("Skipping unreadable conversation summary")
        return self._carry(result, ConversationsResult, conversations=conversations)

    async def delete_conversation(self, conversation_id: str) -> ApiResult:
        if not conversation_id:
            raise ValueError("conversation_id is required")
        return await self.gateway.request("DELETE", CONVERSATIONS_PATH.format(key=conversation_id))

    async def feedback(
        self,
        score: float,
        message: str,
        response: str,
        conversation_id: str | None = None,
        message_id: str | None = None,
    ) -> ApiResult:
        """Rate an assistant reply from 0 (bad) to 1 (good) for personalization."""
        if not 0 <= score <= 1:
            raise ValueError(f"score must be between 0 and 1, got {score}")
        user_id = await self._user_id()
        if user_id is None:
            return ApiResult(success=False, message=NO_USER_MESSAGE, requires_login=True)

        body = {
            "userId": user_id,
            "conversationId": conversation_id,
            "messageId": message_id,
            "feedback": score,
            "message": message,
            "response": response,
        }
        return await self.gateway.request("POST", FEEDBACK_PATH, json=body)

    async def tensorflow_status(self) -> ModelStatus:
        result = await self.gateway.request("GET", TENSORFLOW_STATUS_PATH)
        return self._carry(result, ModelStatus, status=self._payload(result))
