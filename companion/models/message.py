# companion/models/message.py
"""
Messages échangés avec le backend IA (WebSocket, JSON).
Entrant : union taggée par `type` -> InboundMessage.
Sortant : dict avec au moins un discriminant `type`, sérialisé en JSON
(le texte libre utilisateur est échappé par l'encodeur).
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from companion.models.calendar_event import EventRecord

logger = logging.getLogger(__name__)


class InboundKind(str, Enum):
    """Type de message reçu du backend."""
    CONNECTED = "connected"
    REGISTERED = "registered"
    CHAT_RESPONSE = "chat_response"
    VOICE_PROCESSED = "voice_processed"
    ERROR = "error"
    PONG = "pong"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class InboundMessage:
    kind: InboundKind
    raw_type: str = ""  # type tel que reçu (utile pour logger les types inconnus)
    client_id: Optional[str] = None
    player_id: Optional[str] = None
    response_text: Optional[str] = None
    transcription: Optional[str] = None
    ai_response: Optional[str] = None
    error_text: Optional[str] = None


def _str_field(data: Dict[str, Any], key: str) -> Optional[str]:
    val = data.get(key)
    if val is None:
        return None
    return val if isinstance(val, str) else str(val)


def decode_inbound(raw: str) -> Optional[InboundMessage]:
    """
    Décode un message brut du backend.
    Retourne None si le payload est illisible (JSON invalide, pas un objet, pas de type).
    Un type non reconnu donne kind=UNKNOWN (le routeur log et ignore).
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict):
        return None
    msg_type = data.get("type")
    if not isinstance(msg_type, str) or not msg_type:
        return None

    try:
        kind = InboundKind(msg_type)
    except ValueError:
        kind = InboundKind.UNKNOWN
    if kind == InboundKind.UNKNOWN:
        return InboundMessage(kind=kind, raw_type=msg_type)

    # chat_response : "text" (client historique) ou "message" (backend v3)
    response_text = _str_field(data, "text")
    if response_text is None and kind == InboundKind.CHAT_RESPONSE:
        response_text = _str_field(data, "message")
    error_text = _str_field(data, "error")
    if error_text is None and kind == InboundKind.ERROR:
        error_text = _str_field(data, "message")

    return InboundMessage(
        kind=kind,
        raw_type=msg_type,
        client_id=_str_field(data, "clientId"),
        player_id=_str_field(data, "playerId"),
        response_text=response_text,
        transcription=_str_field(data, "transcription"),
        ai_response=_str_field(data, "aiResponse"),
        error_text=error_text,
    )


# ---------------------------------------------------------------------------
# Sortant
# ---------------------------------------------------------------------------

def register_payload(player_id: str) -> Dict[str, Any]:
    return {"type": "register", "playerId": player_id}


def chat_payload(text: str) -> Dict[str, Any]:
    return {"type": "chat", "text": text}


def calendar_event_payload(record: EventRecord) -> Dict[str, Any]:
    """Payload create_calendar_event. dateTime en ISO-8601."""
    return {
        "type": "create_calendar_event",
        "eventName": record.name,
        "dateTime": record.when.isoformat() if record.when else "",
        "durationMinutes": record.duration_minutes,
        "location": record.location,
        "notes": record.notes,
        "priority": record.priority,
    }


def encode_outbound(payload: Dict[str, Any]) -> str:
    """JSON compact ; guillemets, antislash et contrôles échappés par l'encodeur."""
    if not payload.get("type"):
        raise ValueError("outbound payload requires a 'type'")
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
