# companion/deps.py
"""
Dépendances FastAPI : session compagnon unique du process (client = un joueur).
Tests : app.dependency_overrides[get_session] ou reset_session().
"""
from __future__ import annotations

import logging
from typing import Optional

from companion.session import CompanionSession

logger = logging.getLogger(__name__)

_SESSION: Optional[CompanionSession] = None


def get_session() -> CompanionSession:
    global _SESSION
    if _SESSION is None:
        _SESSION = CompanionSession()
    return _SESSION


def reset_session(session: Optional[CompanionSession] = None) -> None:
    """Remplace (ou oublie) la session courante. Ferme l'ancienne."""
    global _SESSION
    if _SESSION is not None and _SESSION is not session:
        _SESSION.close()
    _SESSION = session
