# companion/dialogue/parsing.py
"""
Parsing des réponses du flow calendrier : fonctions pures, testables.
Parseurs volontairement étroits (mots-clés / motifs simples) : si ça ne matche
pas un motif connu, on rejette et l'engine repose la question.
"""

from __future__ import annotations

import re
from datetime import datetime, time, timedelta
from typing import Optional

from companion import config

AFFIRMATIVE_WORDS = frozenset({
    "yes", "yeah", "yep", "sure", "ok", "okay", "y", "confirm", "correct", "right",
})
# Réponses "rien" pour les champs optionnels (lieu, notes)
SKIP_WORDS = frozenset({"none", "no", "skip"})

_TOMORROW_RE = re.compile(r"\btomorrow\b")
_TODAY_RE = re.compile(r"\btoday\b")
# "2pm", "2 pm", "3:30pm"
_CLOCK_RE = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b")


def extract_number(text: str) -> int:
    """
    Premier nombre du texte : scan gauche -> droite, première suite de chiffres,
    arrêt au premier non-chiffre après le début de la suite. 0 si aucun chiffre.
    Ex. "abc 2pm and 30 min" -> 2.
    """
    digits = []
    for ch in text or "":
        if "0" <= ch <= "9":
            digits.append(ch)
        elif digits:
            break
    if not digits:
        return 0
    return int("".join(digits))


def parse_duration(text: str) -> int:
    """
    Durée en minutes : "1 hour" -> 60, "30 minutes" / "30 min" -> 30, "45" -> 45.
    Retourne 0 si pas de nombre positif (réponse rejetée).
    """
    t = (text or "").strip().lower()
    number = extract_number(t)
    if number <= 0:
        return 0
    if "hour" in t:
        return number * 60
    # "minute(s)" / "min" ou pas d'unité : minutes
    return number


def parse_datetime(text: str, now: datetime) -> Optional[datetime]:
    """
    "today" / "tomorrow" + heure optionnelle am/pm -> datetime concret.
    - tomorrow prioritaire sur today si les deux apparaissent
    - sans heure : DEFAULT_EVENT_HOUR (midi)
    - 12am = minuit, 12pm = midi
    Dates absolues non supportées -> None.
    """
    t = (text or "").strip().lower()
    if _TOMORROW_RE.search(t):
        day = (now + timedelta(days=1)).date()
    elif _TODAY_RE.search(t):
        day = now.date()
    else:
        return None

    hour, minute = config.DEFAULT_EVENT_HOUR, 0
    m = _CLOCK_RE.search(t)
    if m:
        hour = int(m.group(1))
        minute = int(m.group(2) or "0")
        if not (1 <= hour <= 12) or minute > 59:
            return None
        if m.group(3) == "pm" and hour < 12:
            hour += 12
        elif m.group(3) == "am" and hour == 12:
            hour = 0

    return datetime.combine(day, time(hour, minute), tzinfo=now.tzinfo)


def is_affirmative(text: str) -> bool:
    return (text or "").strip().lower() in AFFIRMATIVE_WORDS


def normalize_optional(text: str) -> str:
    """Champ optionnel : "none" / "no" / "skip" -> "" ; sinon texte nettoyé."""
    t = (text or "").strip()
    if t.lower() in SKIP_WORDS:
        return ""
    return t
