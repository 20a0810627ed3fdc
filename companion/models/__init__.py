"""Models package - Modèles de données partagés"""

from companion.models.calendar_event import EventRecord
from companion.models.message import InboundKind, InboundMessage

__all__ = ["EventRecord", "InboundKind", "InboundMessage"]
