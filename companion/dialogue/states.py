# companion/dialogue/states.py
from __future__ import annotations
from enum import Enum


class DialogueState(str, Enum):
    """États du flow de création d'événement (ordre = ordre des questions)."""
    IDLE = "Idle"
    ASKING_NAME = "AskingName"
    ASKING_DATETIME = "AskingDateTime"
    ASKING_DURATION = "AskingDuration"
    ASKING_LOCATION = "AskingLocation"
    ASKING_NOTES = "AskingNotes"
    ASKING_PRIORITY = "AskingPriority"
    CONFIRMING = "Confirming"
