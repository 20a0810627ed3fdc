# companion/session.py
"""
Session compagnon : un joueur, un routeur, un flow calendrier, une mémoire.
Décision explicite de routage du texte utilisateur (handle_user_text) :
flow actif -> tout va au flow (ou annulation) ; sinon intention calendrier -> flow ;
sinon chat libre vers le backend.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from companion import config, intent_parser
from companion.dialogue.engine import DialogueEngine
from companion.identity import new_opaque_id
from companion.memory import MemoryStore, create_memory_store
from companion.router import MessageRouter, Scheduler, Transport
from companion.utils.log_mask import mask_for_log

logger = logging.getLogger(__name__)

ROUTE_DIALOGUE = "dialogue"
ROUTE_FLOW_STARTED = "flow_started"
ROUTE_CANCELLED = "cancelled"
ROUTE_CHAT = "chat"
ROUTE_IGNORED = "ignored"


@dataclass
class UserTextResult:
    route: str
    question: Optional[str] = None  # question émise par le flow (si route dialogue / flow_started)
    sent: bool = False  # chat effectivement envoyé au backend


class CompanionSession:
    """
    Usage:
        session = CompanionSession()
        session.bind_transport(WebSocketTransport(config.WEBSOCKET_URL))
        session.on_ask_question.connect(ui.show_question)
        session.handle_user_text("schedule my dentist appointment")
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        memory: Optional[MemoryStore] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], datetime]] = None,
        player_id: Optional[str] = None,
    ) -> None:
        self.player_id = player_id or new_opaque_id()
        if memory is None:
            memory = create_memory_store()
        self.memory = memory
        self.router = MessageRouter(
            self.player_id,
            transport=transport,
            memory=self.memory,
            scheduler=scheduler,
        )
        self.dialogue = DialogueEngine(handoff=self.router.send_calendar_event, clock=clock)

        # Surface UI (mêmes Signal que les composants : pas de relais)
        self.on_ai_response = self.router.on_ai_response
        self.on_connection_changed = self.router.on_connection_changed
        self.on_voice_processed = self.router.on_voice_processed
        self.on_backend_error = self.router.on_backend_error
        self.on_ask_question = self.dialogue.on_ask_question
        self.on_event_created = self.dialogue.on_event_created
        self.on_flow_cancelled = self.dialogue.on_flow_cancelled

        logger.info("companion session created player_id=%s", self.player_id)

    def is_connected(self) -> bool:
        return self.router.connected

    def handle_user_text(self, text: str) -> UserTextResult:
        """Unique entrée pour le texte saisi / transcrit côté joueur."""
        if len(text or "") > config.MAX_MESSAGE_LENGTH:
            logger.warning("user text too long (%s chars): truncated", len(text))
            text = text[: config.MAX_MESSAGE_LENGTH]

        if self.dialogue.is_active():
            if intent_parser.is_cancel_command(text):
                self.dialogue.cancel()
                return UserTextResult(route=ROUTE_CANCELLED)
            question = self.dialogue.submit_answer(text)
            return UserTextResult(route=ROUTE_DIALOGUE, question=question)

        if not (text or "").strip():
            logger.debug("empty user text ignored")
            return UserTextResult(route=ROUTE_IGNORED)

        if intent_parser.detect_schedule_intent(text):
            logger.info("schedule intent detected text=%s", mask_for_log(text))
            question = self.dialogue.start_flow()
            return UserTextResult(route=ROUTE_FLOW_STARTED, question=question)

        return UserTextResult(route=ROUTE_CHAT, sent=self.send_chat(text))

    def send_chat(self, text: str) -> bool:
        """Chat libre (hors flow). Historique mémoire même si l'envoi échoue."""
        if (text or "").strip():
            try:
                self.memory.append_conversation_entry("Player", text.strip(), "")
            except Exception as e:
                logger.warning("memory append failed (player entry): %s", e)
        return self.router.send_chat(text)

    def add_memory(self, key: str, value: str) -> None:
        try:
            self.memory.set(key, value)
        except Exception as e:
            logger.warning("memory set failed key=%s: %s", key, e)
            return
        logger.info("memory set key=%s", key)

    def get_memory(self, key: str) -> str:
        try:
            return self.memory.get(key)
        except Exception as e:
            logger.warning("memory get failed key=%s: %s", key, e)
            return ""

    def close(self) -> None:
        self.router.close()

    def bind_transport(self, transport) -> None:
        """
        Branche un transport à signaux (WebSocketTransport) sur le routeur.
        Les callbacks tournent sur la boucle asyncio du transport.
        """
        transport.on_message.connect(self.router.handle_raw)
        transport.on_connected_changed.connect(self.router.handle_connection_changed)
        transport.on_error.connect(self.router.handle_transport_error)
        self.router.attach_transport(transport)
