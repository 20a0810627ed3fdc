# companion/router.py
"""
Routeur de messages de session : entrant (backend -> UI / mémoire) et sortant
(register, chat, create_calendar_event).
Ne décide jamais si un texte utilisateur est une réponse au flow calendrier :
c'est CompanionSession.handle_user_text qui tranche.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Protocol

from companion import config
from companion.log_events import (
    INBOUND_MALFORMED,
    INBOUND_UNKNOWN_TYPE,
    OUTBOUND_DROPPED_DISCONNECTED,
    PLAYER_REGISTERED,
)
from companion.models.calendar_event import EventRecord
from companion.models.message import (
    InboundKind,
    InboundMessage,
    calendar_event_payload,
    chat_payload,
    decode_inbound,
    encode_outbound,
    register_payload,
)
from companion.signals import Signal
from companion.utils.log_mask import mask_for_log

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Interface minimale du transport (WebSocket ou fake en test)."""

    def is_connected(self) -> bool:
        ...

    def send(self, text: str) -> None:
        """Envoie un message texte. Ignore (log) si non connecté."""
        ...


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioScheduler:
    """call_later sur la boucle asyncio courante (lève RuntimeError hors boucle)."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class MemorySink(Protocol):
    def append_conversation_entry(self, speaker: str, text: str, meta: str = "") -> None:
        ...


class MessageRouter:
    def __init__(
        self,
        player_id: str,
        transport: Optional[Transport] = None,
        memory: Optional[MemorySink] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.player_id = player_id
        self._transport = transport
        self._memory = memory
        self._scheduler = scheduler or AsyncioScheduler()

        # Écrit uniquement par handle_connection_changed / handle_transport_error
        self.connected = False
        self.ready = False  # True après "registered"
        self._registration_sent = False
        self._probe_handle: Optional[TimerHandle] = None

        self.on_ai_response = Signal("ai_response")
        self.on_connection_changed = Signal("connection_changed")
        self.on_voice_processed = Signal("voice_processed")
        self.on_backend_error = Signal("backend_error")

    def attach_transport(self, transport: Optional[Transport]) -> None:
        self._transport = transport

    # ------------------------------------------------------------------
    # Entrant
    # ------------------------------------------------------------------

    def handle_raw(self, raw: str) -> None:
        """Point d'entrée transport.on_message : décode puis dispatch. Payload illisible -> log, drop."""
        message = decode_inbound(raw)
        if message is None:
            logger.warning(
                "inbound message malformed: dropped len=%s",
                len(raw or ""),
                extra={"event": INBOUND_MALFORMED},
            )
            return
        self.dispatch(message)

    def dispatch(self, message: InboundMessage) -> None:
        kind = message.kind
        logger.debug("inbound type=%s", message.raw_type)

        if kind == InboundKind.CONNECTED:
            self._on_connected(message)
        elif kind == InboundKind.REGISTERED:
            self._on_registered(message)
        elif kind == InboundKind.CHAT_RESPONSE:
            self._on_chat_response(message)
        elif kind == InboundKind.VOICE_PROCESSED:
            logger.info("voice processed transcription=%s", mask_for_log(message.transcription or ""))
            self.on_voice_processed.emit(message.transcription or "", message.ai_response or "")
        elif kind == InboundKind.ERROR:
            logger.error("backend error: %s", (message.error_text or "")[:200])
            self.on_backend_error.emit(message.error_text or "")
        elif kind == InboundKind.PONG:
            logger.debug("pong received (connection alive)")
        else:
            logger.info(
                "inbound type not handled: %s",
                message.raw_type[:50],
                extra={"event": INBOUND_UNKNOWN_TYPE},
            )

    def _on_connected(self, message: InboundMessage) -> None:
        logger.info("backend connection confirmed client_id=%s", message.client_id or "")
        if self._registration_sent:
            logger.debug("register already sent for this connection")
            return
        if self.register():
            self._registration_sent = True

    def _on_registered(self, message: InboundMessage) -> None:
        self.ready = True
        logger.info(
            "player registered player_id=%s",
            message.player_id or self.player_id,
            extra={"event": PLAYER_REGISTERED},
        )
        if config.is_probe_enabled():
            self._schedule_probe()

    def _on_chat_response(self, message: InboundMessage) -> None:
        text = message.response_text
        if text is None:
            logger.warning("chat_response without text: dropped")
            return
        logger.info("ai response received len=%s", len(text))
        if self._memory is not None:
            try:
                self._memory.append_conversation_entry("Assistant", text, "")
            except Exception as e:
                logger.warning("memory append failed (assistant entry): %s", e)
        self.on_ai_response.emit(text)

    # ------------------------------------------------------------------
    # Connexion
    # ------------------------------------------------------------------

    def handle_connection_changed(self, connected: bool) -> None:
        self.connected = connected
        if connected:
            logger.info("connected to backend")
        else:
            logger.warning("disconnected from backend")
            self.ready = False
            self._registration_sent = False
            self._cancel_probe()
        self.on_connection_changed.emit(connected)

    def handle_transport_error(self, error_text: str) -> None:
        logger.error("transport error: %s", (error_text or "")[:200])
        # Échecs de reconnexion répétés : un seul passage à déconnecté
        if self.connected:
            self.handle_connection_changed(False)

    # ------------------------------------------------------------------
    # Sonde de vivacité (one-shot, annulée à la déconnexion)
    # ------------------------------------------------------------------

    def _schedule_probe(self) -> None:
        self._cancel_probe()
        try:
            self._probe_handle = self._scheduler.call_later(config.probe_delay_sec(), self._fire_probe)
        except RuntimeError as e:
            logger.warning("liveness probe not scheduled: %s", e)

    def _fire_probe(self) -> None:
        self._probe_handle = None
        self.send_chat(config.probe_message())

    def _cancel_probe(self) -> None:
        if self._probe_handle is not None:
            self._probe_handle.cancel()
            self._probe_handle = None

    @property
    def probe_pending(self) -> bool:
        return self._probe_handle is not None

    # ------------------------------------------------------------------
    # Sortant
    # ------------------------------------------------------------------

    def send_payload(self, payload: Dict[str, Any]) -> bool:
        """
        Sérialise et envoie. Déconnecté -> log + False (pas de file d'attente, pas d'exception).
        """
        msg_type = payload.get("type", "")
        if self._transport is None:
            logger.error("outbound %s dropped: no transport attached", msg_type)
            return False
        if not (self.connected and self._transport.is_connected()):
            logger.warning(
                "outbound %s dropped: not connected",
                msg_type,
                extra={"event": OUTBOUND_DROPPED_DISCONNECTED, "type": msg_type},
            )
            return False
        try:
            raw = encode_outbound(payload)
        except (TypeError, ValueError) as e:
            logger.error("outbound %s not serializable: %s", msg_type, e)
            return False
        try:
            self._transport.send(raw)
        except Exception as e:
            logger.warning("outbound %s send failed: %s", msg_type, e)
            return False
        return True

    def register(self) -> bool:
        logger.info("registering player_id=%s", self.player_id)
        return self.send_payload(register_payload(self.player_id))

    def send_chat(self, text: str) -> bool:
        if not (text or "").strip():
            logger.debug("empty chat message not sent")
            return False
        logger.info("sending chat text=%s", mask_for_log(text))
        return self.send_payload(chat_payload(text))

    def send_calendar_event(self, record: EventRecord) -> bool:
        return self.send_payload(calendar_event_payload(record))

    def close(self) -> None:
        self._cancel_probe()
