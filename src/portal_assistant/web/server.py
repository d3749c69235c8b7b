from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from portal_assistant import __version__
from portal_assistant.assistant.engine import ResponseEngine
from portal_assistant.assistant.session import ChatSession
from portal_assistant.assistant.ticketing import TicketingAssistant
from portal_assistant.config import SETTINGS
from portal_assistant.data_models import ContextSnapshot
from portal_assistant.support.tickets import TicketClient

logger = logging.getLogger(__name__)

MAX_SESSIONS = 500

app = FastAPI(title="Student Portal Assistant", version=__version__)


@dataclass
class RuntimeState:
    engine: ResponseEngine = field(default_factory=ResponseEngine)
    ticketing: TicketingAssistant | None = None
    sessions: dict[str, ChatSession] = field(default_factory=dict)


STATE = RuntimeState()


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)
    context: Optional[dict[str, Any]] = None


class SessionCreateRequest(BaseModel):
    context: Optional[dict[str, Any]] = None


class SessionMessageRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)
    context: Optional[dict[str, Any]] = None


@app.on_event("startup")
def startup() -> None:
    STATE.ticketing = _build_ticketing(STATE.engine)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/status")
def status() -> dict[str, Any]:
    return {
        "sessions": len(STATE.sessions),
        "ticketing_enabled": STATE.ticketing is not None,
        "spell_correction": SETTINGS.spell_correction,
        "escalate_unmatched_min_length": SETTINGS.escalate_unmatched_min_length,
    }


@app.post("/api/chat")
def chat(payload: ChatRequest) -> dict[str, Any]:
    snapshot = _snapshot_or_400(payload.context)
    reply = STATE.engine.reply(payload.message, snapshot)
    return {"ok": True, "reply": reply.to_dict()}


@app.post("/api/sessions")
def create_session(payload: SessionCreateRequest) -> dict[str, Any]:
    snapshot = _snapshot_or_400(payload.context)
    if len(STATE.sessions) >= MAX_SESSIONS:
        oldest = next(iter(STATE.sessions))
        STATE.sessions.pop(oldest)
        logger.info("Evicted chat session %s", oldest)

    session = ChatSession(context=snapshot, engine=STATE.engine, ticketing=STATE.ticketing)
    STATE.sessions[session.session_id] = session
    return {"ok": True, "session_id": session.session_id, "welcome": session.welcome()}


@app.get("/api/sessions/{session_id}/messages")
def list_messages(session_id: str) -> dict[str, Any]:
    session = _session_or_404(session_id)
    return {"ok": True, "count": len(session), "messages": [m.to_dict() for m in session.messages]}


@app.post("/api/sessions/{session_id}/messages")
async def send_message(session_id: str, payload: SessionMessageRequest) -> dict[str, Any]:
    session = _session_or_404(session_id)
    if payload.context is not None:
        session.update_context(_snapshot_or_400(payload.context))

    reply = await session.send_async(payload.message)
    return {
        "ok": True,
        "reply": reply.to_dict() if reply else None,
        "count": len(session),
    }


def _build_ticketing(engine: ResponseEngine) -> TicketingAssistant | None:
    if not SETTINGS.ticket_api_url:
        return None
    return TicketingAssistant(client=TicketClient(), engine=engine)


def _snapshot_or_400(context: dict[str, Any] | None) -> ContextSnapshot:
    try:
        return ContextSnapshot.from_dict(context)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _session_or_404(session_id: str) -> ChatSession:
    session = STATE.sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Unknown chat session")
    return session
