# tests/test_message_codec.py
"""Décodage des messages backend (union taggée) et encodage des payloads sortants."""

import json
from datetime import datetime

import pytest

from companion.models import EventRecord, InboundKind
from companion.models.message import (
    calendar_event_payload,
    chat_payload,
    decode_inbound,
    encode_outbound,
    register_payload,
)


def test_decode_connected():
    msg = decode_inbound('{"type": "connected", "clientId": "abc"}')
    assert msg.kind == InboundKind.CONNECTED
    assert msg.client_id == "abc"


def test_decode_registered():
    msg = decode_inbound('{"type": "registered", "playerId": "{P1}"}')
    assert msg.kind == InboundKind.REGISTERED
    assert msg.player_id == "{P1}"


def test_decode_chat_response_text_or_message():
    """chat_response : champ 'text', repli sur 'message'."""
    assert decode_inbound('{"type": "chat_response", "text": "hi"}').response_text == "hi"
    assert decode_inbound('{"type": "chat_response", "message": "hello"}').response_text == "hello"
    assert decode_inbound('{"type": "chat_response"}').response_text is None


def test_decode_voice_processed():
    msg = decode_inbound('{"type": "voice_processed", "transcription": "hey", "aiResponse": "yo"}')
    assert msg.kind == InboundKind.VOICE_PROCESSED
    assert msg.transcription == "hey"
    assert msg.ai_response == "yo"


def test_decode_error_error_or_message():
    assert decode_inbound('{"type": "error", "error": "boom"}').error_text == "boom"
    assert decode_inbound('{"type": "error", "message": "bad"}').error_text == "bad"


def test_decode_pong():
    assert decode_inbound('{"type": "pong"}').kind == InboundKind.PONG


def test_decode_unknown_type_kept_raw():
    msg = decode_inbound('{"type": "weather_update", "temp": 3}')
    assert msg.kind == InboundKind.UNKNOWN
    assert msg.raw_type == "weather_update"


@pytest.mark.parametrize("raw", [
    "not json",
    "",
    "[1, 2]",
    '"chat_response"',
    '{"text": "no type"}',
    '{"type": 42}',
    '{"type": ""}',
])
def test_decode_malformed_returns_none(raw):
    assert decode_inbound(raw) is None


def test_register_and_chat_payloads():
    assert register_payload("{ID}") == {"type": "register", "playerId": "{ID}"}
    assert chat_payload("hello") == {"type": "chat", "text": "hello"}


def test_calendar_event_payload_fields():
    record = EventRecord(
        name="Dentist",
        when=datetime(2026, 3, 11, 14, 0),
        duration_minutes=60,
        location="Main Street clinic",
        notes="",
        priority=8,
        complete=True,
    )
    assert calendar_event_payload(record) == {
        "type": "create_calendar_event",
        "eventName": "Dentist",
        "dateTime": "2026-03-11T14:00:00",
        "durationMinutes": 60,
        "location": "Main Street clinic",
        "notes": "",
        "priority": 8,
    }


def test_encode_escapes_user_text():
    """Guillemets / antislash / retours ligne dans le texte joueur : JSON toujours valide."""
    text = 'say "hi" \\ then\nleave'
    raw = encode_outbound(chat_payload(text))
    assert json.loads(raw) == {"type": "chat", "text": text}
    assert "\n" not in raw


def test_encode_keeps_unicode():
    raw = encode_outbound(chat_payload("café"))
    assert "café" in raw


def test_encode_requires_type():
    with pytest.raises(ValueError):
        encode_outbound({"text": "no type"})
