# companion/dialogue/engine.py
"""
Flow de création d'événement calendrier : une question par état.
Réponse valide -> écriture dans le record + question suivante.
Réponse invalide -> même question, état et record inchangés.
Refus à la confirmation -> annulation. Confirmation -> hand-off unique puis Idle.
"""

from __future__ import annotations
import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from companion.dialogue.states import DialogueState
from companion.dialogue.steps import STEPS
from companion.log_events import (
    CALENDAR_ANSWER_REJECTED,
    CALENDAR_FLOW_CANCELLED,
    CALENDAR_FLOW_STARTED,
    CALENDAR_HANDOFF_DONE,
    CALENDAR_HANDOFF_FAILED,
)
from companion.models.calendar_event import EventRecord
from companion.signals import Signal
from companion.utils.log_mask import mask_for_log

logger = logging.getLogger(__name__)

# Reçoit une copie du record complet ; True si livré au backend
Handoff = Callable[[EventRecord], bool]


class DialogueEngine:
    """
    Usage:
        engine = DialogueEngine(handoff=router.send_calendar_event)
        engine.on_ask_question.connect(ui.show_question)
        engine.start_flow()
        engine.submit_answer("Dentist")
    """

    def __init__(
        self,
        handoff: Optional[Handoff] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._handoff = handoff
        self._clock = clock or datetime.now
        self._index: Optional[int] = None  # None = Idle
        self._record: Optional[EventRecord] = None

        self.on_ask_question = Signal("ask_question")
        self.on_event_created = Signal("event_created")
        self.on_flow_cancelled = Signal("flow_cancelled")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> DialogueState:
        if self._index is None:
            return DialogueState.IDLE
        return STEPS[self._index].state

    @property
    def record(self) -> Optional[EventRecord]:
        """Copie du record en cours (None si Idle) : seul l'engine le modifie."""
        if self._record is None:
            return None
        return replace(self._record)

    def is_active(self) -> bool:
        return self._index is not None

    def current_question(self) -> str:
        if self._index is None or self._record is None:
            return ""
        return STEPS[self._index].question(self._record)

    def set_handoff(self, handoff: Optional[Handoff]) -> None:
        self._handoff = handoff

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start_flow(self) -> Optional[str]:
        """Démarre un flow. Refusé (None) si un flow est déjà en cours."""
        if self.is_active():
            logger.warning(
                "calendar start_flow ignored: flow already active state=%s",
                self.state.value,
            )
            return None
        self._record = EventRecord()
        self._index = 0
        logger.info("calendar flow started", extra={"event": CALENDAR_FLOW_STARTED})
        return self._ask()

    def submit_answer(self, text: str) -> Optional[str]:
        """
        Traite la réponse à la question courante.
        Retourne la question émise (suivante ou répétée), None si rien à demander
        (Idle, flow terminé ou annulé).
        """
        if self._index is None or self._record is None:
            logger.warning("calendar answer received while idle: ignored")
            return None

        step = STEPS[self._index]
        logger.info("calendar answer state=%s text=%s", step.state.value, mask_for_log(text))

        # Écriture sur une copie : un rejet ne touche jamais le record
        draft = replace(self._record)
        if not step.apply(draft, text, self._clock()):
            if step.decline_cancels:
                return self._cancel("declined")
            logger.info(
                "calendar answer rejected state=%s",
                step.state.value,
                extra={"event": CALENDAR_ANSWER_REJECTED, "state": step.state.value},
            )
            return self._ask()

        self._record = draft
        if self._index + 1 < len(STEPS):
            self._index += 1
            return self._ask()
        return self._complete()

    def cancel(self) -> None:
        if self._index is None:
            logger.info("calendar cancel while idle: nothing to do")
            return
        self._cancel("user")

    def retry_handoff(self) -> bool:
        """Relance le hand-off d'un record déjà confirmé. True si livré."""
        if self._record is None or not self._record.complete:
            logger.warning("calendar retry_handoff: no confirmed event pending")
            return False
        return self._complete() is None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ask(self) -> str:
        question = self.current_question()
        logger.debug("calendar asking state=%s", self.state.value)
        self.on_ask_question.emit(question)
        return question

    def _complete(self) -> Optional[str]:
        """Hand-off du record confirmé. Succès -> Idle ; échec -> record conservé en Confirming."""
        record = replace(self._record)
        if self._handoff is None:
            logger.error(
                "calendar handoff failed: no backend handoff target",
                extra={"event": CALENDAR_HANDOFF_FAILED, "reason": "missing_target"},
            )
            return self._ask()
        delivered = self._handoff(record)
        if not delivered:
            logger.error(
                "calendar handoff failed: event not delivered",
                extra={"event": CALENDAR_HANDOFF_FAILED, "reason": "not_delivered"},
            )
            return self._ask()

        self._reset()
        logger.info("calendar event handed off", extra={"event": CALENDAR_HANDOFF_DONE})
        self.on_event_created.emit(record)
        return None

    def _cancel(self, reason: str) -> None:
        state = self.state.value
        self._reset()
        logger.info(
            "calendar flow cancelled state=%s reason=%s",
            state,
            reason,
            extra={"event": CALENDAR_FLOW_CANCELLED, "state": state, "reason": reason},
        )
        self.on_flow_cancelled.emit()
        return None

    def _reset(self) -> None:
        self._index = None
        self._record = None
