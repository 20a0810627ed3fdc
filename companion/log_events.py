"""
Constantes d'événements de log pour audit et traçabilité.
Utilisés avec logger.info/warning(..., extra={"event": EVENT_NAME, ...}).
Aucun texte utilisateur brut : uniquement états, types et tailles.
"""

# Dialogue calendrier
CALENDAR_FLOW_STARTED = "calendar_flow_started"
CALENDAR_ANSWER_REJECTED = "calendar_answer_rejected"
CALENDAR_FLOW_CANCELLED = "calendar_flow_cancelled"
CALENDAR_HANDOFF_DONE = "calendar_handoff_done"
CALENDAR_HANDOFF_FAILED = "calendar_handoff_failed"

# Transport / routage
OUTBOUND_DROPPED_DISCONNECTED = "outbound_dropped_disconnected"
INBOUND_MALFORMED = "inbound_malformed"
INBOUND_UNKNOWN_TYPE = "inbound_unknown_type"
PLAYER_REGISTERED = "player_registered"
