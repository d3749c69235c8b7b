from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from portal_assistant.assistant.engine import ResponseEngine, coerce_snapshot
from portal_assistant.assistant.ticketing import TicketingAssistant
from portal_assistant.data_models import ChatMessage, ContextSnapshot

logger = logging.getLogger(__name__)


class ChatSession:
    """
    One chat widget's conversation: a context snapshot plus an append-only transcript.

    Every accepted ``send`` appends the user message and then exactly one
    assistant message. Blank input leaves the transcript untouched.
    """

    def __init__(
        self,
        context: ContextSnapshot | Mapping[str, Any] | None = None,
        engine: ResponseEngine | None = None,
        ticketing: TicketingAssistant | None = None,
        clock: Callable[[], datetime] = datetime.now,
        session_id: str | None = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.context = coerce_snapshot(context)
        self.engine = engine or (ticketing.engine if ticketing else ResponseEngine())
        self.ticketing = ticketing
        self.clock = clock
        self._messages: list[ChatMessage] = []

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def update_context(self, context: ContextSnapshot | Mapping[str, Any] | None) -> None:
        self.context = coerce_snapshot(context)

    def welcome(self) -> str:
        return self.engine.welcome(self.context)

    def send(self, text: str) -> ChatMessage | None:
        if not text or not text.strip():
            return None
        user_message = self._message("user", text)
        reply = self.engine.respond(text, self.context)
        return self._commit(user_message, reply)

    async def send_async(self, text: str) -> ChatMessage | None:
        if not text or not text.strip():
            return None
        user_message = self._message("user", text)
        if self.ticketing is not None:
            reply = await self.ticketing.respond_async(text, self.context)
        else:
            reply = self.engine.respond(text, self.context)
        return self._commit(user_message, reply)

    def _commit(self, user_message: ChatMessage, reply: str) -> ChatMessage:
        assistant_message = self._message("assistant", reply)
        self._messages.extend([user_message, assistant_message])
        logger.debug("Session %s now holds %s messages", self.session_id, len(self._messages))
        return assistant_message

    def _message(self, role: str, content: str) -> ChatMessage:
        return ChatMessage(
            message_id=uuid.uuid4().hex,
            role=role,
            content=content,
            timestamp=self.clock().strftime("%H:%M"),
        )
