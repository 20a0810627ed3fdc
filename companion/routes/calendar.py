# companion/routes/calendar.py : flow calendrier piloté depuis l'UI (/api/calendar/*)
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from companion import config
from companion.deps import get_session
from companion.models.calendar_event import EventRecord
from companion.session import CompanionSession

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/calendar", tags=["calendar"])


class AnswerBody(BaseModel):
    text: str = Field(default="", max_length=config.MAX_MESSAGE_LENGTH)


def _record_out(record: Optional[EventRecord]) -> Optional[Dict[str, Any]]:
    if record is None:
        return None
    return {
        "name": record.name,
        "when": record.when.isoformat() if record.when else None,
        "duration_minutes": record.duration_minutes,
        "location": record.location,
        "notes": record.notes,
        "priority": record.priority,
        "complete": record.complete,
    }


def _flow_out(session: CompanionSession) -> Dict[str, Any]:
    engine = session.dialogue
    return {
        "state": engine.state.value,
        "active": engine.is_active(),
        "question": engine.current_question(),
        "record": _record_out(engine.record),
    }


@router.get("")
async def get_flow(session: CompanionSession = Depends(get_session)) -> Dict[str, Any]:
    return _flow_out(session)


@router.post("/start")
async def start_flow(session: CompanionSession = Depends(get_session)) -> Dict[str, Any]:
    if session.dialogue.is_active():
        raise HTTPException(status_code=409, detail="A calendar flow is already in progress")
    session.dialogue.start_flow()
    return _flow_out(session)


@router.post("/answer")
async def answer(body: AnswerBody, session: CompanionSession = Depends(get_session)) -> Dict[str, Any]:
    if not session.dialogue.is_active():
        raise HTTPException(status_code=409, detail="No calendar flow in progress")
    session.dialogue.submit_answer(body.text)
    return _flow_out(session)


@router.post("/cancel")
async def cancel(session: CompanionSession = Depends(get_session)) -> Dict[str, Any]:
    if not session.dialogue.is_active():
        raise HTTPException(status_code=409, detail="No calendar flow in progress")
    session.dialogue.cancel()
    return _flow_out(session)


@router.post("/retry")
async def retry_handoff(session: CompanionSession = Depends(get_session)) -> Dict[str, Any]:
    record = session.dialogue.record
    if record is None or not record.complete:
        raise HTTPException(status_code=409, detail="No confirmed event waiting for delivery")
    delivered = session.dialogue.retry_handoff()
    out = _flow_out(session)
    out["delivered"] = delivered
    return out
