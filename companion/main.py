# companion/main.py
from __future__ import annotations

from pathlib import Path

# Charger .env à la racine du projet (WEBSOCKET_URL, AUTO_CONNECT, etc.) avant config
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    from dotenv import load_dotenv
    load_dotenv(_env_path)

import asyncio
import json
import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

import companion.config as config  # Import du MODULE (pas from import)
from companion.deps import get_session
from companion.dialogue import prompts
from companion.models.calendar_event import EventRecord
from companion.routes import calendar, memory
from companion.session import CompanionSession
from companion.transport import WebSocketTransport

logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO))
_logger = logging.getLogger(__name__)

app = FastAPI(title="Companion bridge")

app.include_router(calendar.router)  # /api/calendar/*
app.include_router(memory.router)    # /api/memory/*

# SSE : une file par client /stream connecté
STREAMS: List[asyncio.Queue] = []

_transport: Optional[WebSocketTransport] = None
_transport_task: Optional[asyncio.Task] = None
_bound_session: Optional[CompanionSession] = None


def now_iso() -> str:
    return datetime.utcnow().isoformat() + "Z"


def push_event(event_type: str, **fields: Any) -> None:
    """Diffuse un événement UI à tous les streams (appelé sur la boucle, via les Signal)."""
    payload: Dict[str, Any] = {"type": event_type, "timestamp": now_iso()}
    payload.update(fields)
    data = json.dumps(payload, ensure_ascii=False, default=str)
    for q in list(STREAMS):
        q.put_nowait(data)


def _event_created_payload(record: EventRecord) -> Dict[str, Any]:
    out = asdict(record)
    out["when"] = record.when.isoformat() if record.when else None
    return out


def bind_ui_stream(session: CompanionSession) -> None:
    """Relie la surface d'événements de la session aux streams SSE (une seule fois par session)."""
    global _bound_session
    if _bound_session is session:
        return
    session.on_ai_response.connect(lambda text: push_event("ai_response", text=text))
    session.on_connection_changed.connect(lambda connected: push_event("connection_changed", connected=connected))
    session.on_ask_question.connect(lambda question: push_event("ask_question", text=question))
    session.on_event_created.connect(lambda record: push_event("event_created", event=_event_created_payload(record)))
    session.on_flow_cancelled.connect(lambda: push_event("flow_cancelled", text=prompts.MSG_FLOW_CANCELLED))
    session.on_voice_processed.connect(
        lambda transcription, ai_response: push_event(
            "voice_processed", transcription=transcription, ai_response=ai_response
        )
    )
    session.on_backend_error.connect(lambda error: push_event("backend_error", message=error))
    _bound_session = session


@app.on_event("startup")
async def startup():
    """Session + stream UI ; connexion backend en arrière-plan (ne bloque pas /health)."""
    global _transport, _transport_task
    session = get_session()
    bind_ui_stream(session)
    if not config.AUTO_CONNECT:
        _logger.info("AUTO_CONNECT disabled: backend connection not started")
        return
    _transport = WebSocketTransport(config.WEBSOCKET_URL)
    session.bind_transport(_transport)
    _transport_task = asyncio.create_task(_transport.run())
    _logger.info("backend connection started url=%s", config.WEBSOCKET_URL)


@app.on_event("shutdown")
async def shutdown():
    global _transport, _transport_task
    for q in list(STREAMS):
        q.put_nowait(None)  # ferme les streams SSE ouverts
    if _transport is not None:
        await _transport.close()
    if _transport_task is not None:
        _transport_task.cancel()
        try:
            await _transport_task
        except asyncio.CancelledError:
            pass
    _transport = None
    _transport_task = None
    get_session().close()


class InputBody(BaseModel):
    text: str = Field(default="", max_length=config.MAX_MESSAGE_LENGTH)


@app.get("/health")
async def health(session: CompanionSession = Depends(get_session)) -> Dict[str, Any]:
    return {
        "status": "ok",
        "connected": session.is_connected(),
        "ready": session.router.ready,
        "player_id": session.player_id,
        "dialogue_state": session.dialogue.state.value,
    }


@app.post("/input")
async def user_input(body: InputBody, session: CompanionSession = Depends(get_session)) -> Dict[str, Any]:
    """Texte joueur (saisi ou transcrit) : flow calendrier ou chat libre, décidé par la session."""
    bind_ui_stream(session)
    result = session.handle_user_text(body.text)
    return {
        "route": result.route,
        "question": result.question,
        "sent": result.sent,
        "dialogue_state": session.dialogue.state.value,
    }


@app.get("/stream")
async def stream(session: CompanionSession = Depends(get_session)):
    bind_ui_stream(session)
    q: asyncio.Queue = asyncio.Queue()
    STREAMS.append(q)

    async def gen():
        try:
            while True:
                item = await q.get()
                if item is None:
                    break
                yield f"data: {item}\n\n"
        finally:
            if q in STREAMS:
                STREAMS.remove(q)

    return StreamingResponse(gen(), media_type="text/event-stream")
