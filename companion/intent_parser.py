# companion/intent_parser.py
"""
Routage déterministe du texte utilisateur : fonctions pures, testables.
- Lexiques dédiés ici (pas de matching basé sur les formulations des questions).
- Annulation : message entier uniquement (une note "don't cancel" ne doit pas annuler le flow).
"""

from __future__ import annotations

import re

# Demande de création d'événement (déclenche le flow calendrier)
_SCHEDULE_LEXICON = [
    "schedule",
    "create an event", "create event", "create a calendar event",
    "add an event", "add event", "new event",
    "add to my calendar", "put it in my calendar", "put in my calendar",
    "book an appointment", "make an appointment", "set up a meeting",
]

# Annulation du flow en cours (message entier)
_CANCEL_COMMANDS = frozenset({
    "cancel", "stop", "abort", "never mind", "nevermind", "forget it",
    "cancel that", "cancel it", "cancel the event",
})


def normalize_text(text: str) -> str:
    """Minuscules, ponctuation -> espaces, espaces compactés."""
    t = (text or "").lower()
    t = re.sub(r"[^a-z0-9' ]+", " ", t)
    t = t.replace("'", "")
    return re.sub(r"\s+", " ", t).strip()


def _contains_phrase(normalized: str, phrase: str) -> bool:
    # Frontières de mots : "schedule" ne matche pas "rescheduled"
    return re.search(r"\b" + re.escape(phrase) + r"\b", normalized) is not None


def detect_schedule_intent(text: str) -> bool:
    t = normalize_text(text)
    if not t:
        return False
    return any(_contains_phrase(t, phrase) for phrase in _SCHEDULE_LEXICON)


def is_cancel_command(text: str) -> bool:
    return normalize_text(text) in _CANCEL_COMMANDS
