# companion/routes/memory.py : préférences joueur + historique (/api/memory/*)
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from companion.deps import get_session
from companion.session import CompanionSession

router = APIRouter(prefix="/api/memory", tags=["memory"])


class MemoryValueBody(BaseModel):
    value: str


@router.get("/conversation")
async def conversation(
    limit: int = Query(default=10, ge=1, le=200),
    session: CompanionSession = Depends(get_session),
) -> Dict[str, Any]:
    entries = session.memory.recent_conversation(limit)
    return {
        "entries": [
            {"speaker": e.speaker, "text": e.text, "meta": e.meta, "ts": e.ts.isoformat()}
            for e in entries
        ]
    }


@router.get("/{key}")
async def get_value(key: str, session: CompanionSession = Depends(get_session)) -> Dict[str, Any]:
    return {"key": key, "value": session.get_memory(key)}


@router.put("/{key}")
async def set_value(
    key: str,
    body: MemoryValueBody,
    session: CompanionSession = Depends(get_session),
) -> Dict[str, Any]:
    session.add_memory(key, body.value)
    return {"key": key, "value": body.value}
