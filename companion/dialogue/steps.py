# companion/dialogue/steps.py
"""
Table des transitions : une entrée par état (question, validation/écriture).
L'état suivant est l'entrée suivante ; ajouter un état = ajouter une entrée.
Chaque `apply` n'écrit dans le record qu'après validation (retourne False sinon).
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Tuple

from companion.dialogue import parsing, prompts
from companion.dialogue.states import DialogueState
from companion.models.calendar_event import EventRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Step:
    state: DialogueState
    question: Callable[[EventRecord], str]
    apply: Callable[[EventRecord, str, datetime], bool]
    # True : un refus termine le flow (annulation) au lieu de reposer la question
    decline_cancels: bool = False


def _fixed(text: str) -> Callable[[EventRecord], str]:
    return lambda record: text


def _apply_name(record: EventRecord, answer: str, now: datetime) -> bool:
    name = (answer or "").strip()
    if len(name) < 2:
        return False
    record.name = name
    return True


def _apply_datetime(record: EventRecord, answer: str, now: datetime) -> bool:
    when = parsing.parse_datetime(answer, now)
    if when is None:
        logger.info("calendar datetime not understood")
        return False
    record.when = when
    return True


def _apply_duration(record: EventRecord, answer: str, now: datetime) -> bool:
    minutes = parsing.parse_duration(answer)
    if minutes <= 0:
        return False
    record.duration_minutes = minutes
    return True


def _apply_location(record: EventRecord, answer: str, now: datetime) -> bool:
    record.location = parsing.normalize_optional(answer)
    return True


def _apply_notes(record: EventRecord, answer: str, now: datetime) -> bool:
    record.notes = parsing.normalize_optional(answer)
    return True


def _apply_priority(record: EventRecord, answer: str, now: datetime) -> bool:
    priority = parsing.extract_number(answer)
    if not (1 <= priority <= 10):
        return False
    record.priority = priority
    return True


def _apply_confirmation(record: EventRecord, answer: str, now: datetime) -> bool:
    if not parsing.is_affirmative(answer):
        return False
    record.complete = True
    return True


STEPS: Tuple[Step, ...] = (
    Step(DialogueState.ASKING_NAME, _fixed(prompts.QUESTION_NAME), _apply_name),
    Step(DialogueState.ASKING_DATETIME, _fixed(prompts.QUESTION_DATETIME), _apply_datetime),
    Step(DialogueState.ASKING_DURATION, _fixed(prompts.QUESTION_DURATION), _apply_duration),
    Step(DialogueState.ASKING_LOCATION, _fixed(prompts.QUESTION_LOCATION), _apply_location),
    Step(DialogueState.ASKING_NOTES, _fixed(prompts.QUESTION_NOTES), _apply_notes),
    Step(DialogueState.ASKING_PRIORITY, _fixed(prompts.QUESTION_PRIORITY), _apply_priority),
    Step(DialogueState.CONFIRMING, prompts.format_confirmation, _apply_confirmation, decline_cancels=True),
)


def states_covered() -> set:
    """États qui ont une entrée dans la table (tous sauf IDLE)."""
    return {step.state for step in STEPS}
