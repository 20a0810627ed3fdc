# companion/signals.py
"""
Surface d'événements vers l'UI / la session : diffusion à 0..n listeners.
L'ordre d'appel des listeners n'est pas garanti (ne pas s'en servir en test).
"""

from __future__ import annotations
import logging
from typing import Any, Callable, List

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class Signal:
    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: List[Listener] = []

    def connect(self, listener: Listener) -> Listener:
        """Abonne un listener (idempotent). Retourne le listener pour usage en décorateur."""
        if listener not in self._listeners:
            self._listeners.append(listener)
        return listener

    def disconnect(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, *args: Any) -> None:
        # Un listener en erreur ne bloque ni les autres ni l'appelant (engine/router).
        for listener in list(self._listeners):
            try:
                listener(*args)
            except Exception:
                logger.exception("signal %s: listener %r failed", self.name, listener)

    def __len__(self) -> int:
        return len(self._listeners)
