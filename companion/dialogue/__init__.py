# companion/dialogue : flow calendrier (table d'états, parsing, engine)

from companion.dialogue.states import DialogueState
from companion.dialogue.engine import DialogueEngine
from companion.dialogue.parsing import extract_number, parse_duration, parse_datetime, is_affirmative

__all__ = [
    "DialogueState",
    "DialogueEngine",
    "extract_number",
    "parse_duration",
    "parse_datetime",
    "is_affirmative",
]
