# companion/config.py
from __future__ import annotations
import logging
import os

logger = logging.getLogger(__name__)

# --- Backend (URL WebSocket, surchargée par env) ---
WEBSOCKET_URL = os.getenv("WEBSOCKET_URL", "ws://localhost:3000")

# Connexion automatique au démarrage de l'app
AUTO_CONNECT = os.getenv("AUTO_CONNECT", "true").lower() in ("true", "1", "yes")

# Reconnexion : délai initial puis doublement jusqu'au plafond
RECONNECT_DELAY_SEC = float(os.getenv("RECONNECT_DELAY_SEC", "1.0"))
MAX_RECONNECT_DELAY_SEC = float(os.getenv("MAX_RECONNECT_DELAY_SEC", "30.0"))
PING_INTERVAL_SEC = float(os.getenv("PING_INTERVAL_SEC", "30.0"))

# Mémoire / préférences
ENABLE_MEMORY = os.getenv("ENABLE_MEMORY", "true").lower() in ("true", "1", "yes")
# Vide = mémoire en RAM ; sinon fichier SQLite
MEMORY_DB_PATH = (os.getenv("MEMORY_DB_PATH") or "").strip()
MAX_CONVERSATION_HISTORY = int(os.getenv("MAX_CONVERSATION_HISTORY", "50"))

# UX / Inputs
MAX_MESSAGE_LENGTH = 500

# Dialogue calendrier : heure par défaut quand l'utilisateur ne donne pas d'heure
DEFAULT_EVENT_HOUR = 12

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


# ==============================
# SONDE DE VIVACITÉ (après "registered")
# ==============================
# Lecture runtime (pas import-time) pour permettre mock en tests.


def is_probe_enabled() -> bool:
    """True si PROBE_ENABLED=true (défaut). Fonction pour mock facile en test."""
    return os.getenv("PROBE_ENABLED", "true").lower() in ("true", "1", "yes")


def probe_delay_sec() -> float:
    raw = os.getenv("PROBE_DELAY_SEC", "2.0")
    try:
        delay = float(raw)
    except ValueError:
        logger.warning("PROBE_DELAY_SEC invalid (%s), using 2.0", raw)
        return 2.0
    return max(delay, 0.0)


def probe_message() -> str:
    return os.getenv("PROBE_MESSAGE", "Hello from the companion client!")
