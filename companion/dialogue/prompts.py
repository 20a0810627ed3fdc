# companion/dialogue/prompts.py
"""
Formulations du flow calendrier (textes affichés / lus à l'utilisateur).
Pas de matching ici : les lexiques sont dans parsing.py.
"""

from __future__ import annotations

from companion.models.calendar_event import EventRecord

QUESTION_NAME = "What would you like to call this event?"
QUESTION_DATETIME = "When would you like to schedule it? (e.g., 'today at 5pm', 'tomorrow at 2pm')"
QUESTION_DURATION = "How long will it take? (e.g., '1 hour', '30 minutes')"
QUESTION_LOCATION = "Where will this take place? (or say 'none')"
QUESTION_NOTES = "Any notes or details? (or say 'none')"
QUESTION_PRIORITY = "How important is this event? (1-10, where 10 is most important)"
QUESTION_CONFIRM = "Should I create this event?"

MSG_FLOW_CANCELLED = "Okay, I won't create that event."


def format_when(record: EventRecord) -> str:
    if record.when is None:
        return ""
    return record.when.strftime("%B %d, %Y at %I:%M %p")


def format_confirmation(record: EventRecord) -> str:
    """
    Récapitulatif avant confirmation. Déterministe ; lieu / notes omis si vides.
    """
    lines = [
        "Here's what I have:",
        "",
        f"Event: {record.name}",
        f"When: {format_when(record)}",
        f"Duration: {record.duration_minutes} minutes",
    ]
    if record.location:
        lines.append(f"Location: {record.location}")
    if record.notes:
        lines.append(f"Notes: {record.notes}")
    lines.append(f"Priority: {record.priority}/10")
    lines.append("")
    lines.append(QUESTION_CONFIRM)
    return "\n".join(lines)
