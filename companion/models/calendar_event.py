# companion/models/calendar_event.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class EventRecord:
    """
    Événement calendrier en cours de construction.
    Rempli champ par champ par le DialogueEngine uniquement (après validation).
    location / notes : "" = pas de lieu / pas de notes.
    """
    name: str = ""
    when: Optional[datetime] = None
    duration_minutes: int = 0
    location: str = ""
    notes: str = ""
    priority: int = 0
    complete: bool = False  # True seulement après confirmation explicite
