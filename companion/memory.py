# companion/memory.py
"""
Mémoire joueur : préférences clé/valeur (chaînes opaques) + historique de conversation.
Deux implémentations : RAM (défaut, tests) et SQLite (MEMORY_DB_PATH).
"""

from __future__ import annotations

import logging
import sqlite3
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Deque, Dict, List, Protocol

from companion import config

logger = logging.getLogger(__name__)


@dataclass
class ConversationEntry:
    speaker: str  # "Player" | "Assistant"
    text: str
    meta: str = ""
    ts: datetime = field(default_factory=datetime.utcnow)


class MemoryStore(Protocol):
    """Interface minimale de la mémoire joueur."""

    def set(self, key: str, value: str) -> None:
        ...

    def get(self, key: str) -> str:
        """Valeur ou "" si absente."""
        ...

    def append_conversation_entry(self, speaker: str, text: str, meta: str = "") -> None:
        ...

    def recent_conversation(self, limit: int = 10) -> List[ConversationEntry]:
        ...


class InMemoryMemoryStore:
    def __init__(self, max_history: int = config.MAX_CONVERSATION_HISTORY) -> None:
        self._prefs: Dict[str, str] = {}
        self._conversation: Deque[ConversationEntry] = deque(maxlen=max_history)

    def set(self, key: str, value: str) -> None:
        self._prefs[key] = value

    def get(self, key: str) -> str:
        return self._prefs.get(key, "")

    def append_conversation_entry(self, speaker: str, text: str, meta: str = "") -> None:
        self._conversation.append(ConversationEntry(speaker=speaker, text=text, meta=meta))

    def recent_conversation(self, limit: int = 10) -> List[ConversationEntry]:
        if limit <= 0:
            return []
        return list(self._conversation)[-limit:]


class NullMemoryStore:
    """Mémoire désactivée (ENABLE_MEMORY=false) : rien n'est stocké, get -> ""."""

    def set(self, key: str, value: str) -> None:
        return None

    def get(self, key: str) -> str:
        return ""

    def append_conversation_entry(self, speaker: str, text: str, meta: str = "") -> None:
        return None

    def recent_conversation(self, limit: int = 10) -> List[ConversationEntry]:
        return []


class SQLiteMemoryStore:
    """
    Mémoire persistante SQLite (survit au redémarrage du client).
    Une connexion par opération : usage mono-thread, faible volume.
    """

    def __init__(self, db_path: str = "memory.db", max_history: int = config.MAX_CONVERSATION_HISTORY):
        self.db_path = db_path
        self.max_history = max_history
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_db(self) -> None:
        conn = self._connect()
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA synchronous=NORMAL")
            conn.execute("""
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS conversation (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    speaker TEXT NOT NULL,
                    text TEXT NOT NULL,
                    meta TEXT NOT NULL DEFAULT '',
                    ts TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def set(self, key: str, value: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "INSERT INTO preferences (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
            conn.commit()
        finally:
            conn.close()

    def get(self, key: str) -> str:
        conn = self._connect()
        try:
            row = conn.execute("SELECT value FROM preferences WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row[0] if row else ""

    def append_conversation_entry(self, speaker: str, text: str, meta: str = "") -> None:
        conn = self._connect()
        try:
            conn.execute(
                "INSERT INTO conversation (speaker, text, meta, ts) VALUES (?, ?, ?, ?)",
                (speaker, text, meta, datetime.utcnow().isoformat()),
            )
            # Historique borné : on garde les max_history dernières entrées
            conn.execute(
                "DELETE FROM conversation WHERE id NOT IN "
                "(SELECT id FROM conversation ORDER BY id DESC LIMIT ?)",
                (self.max_history,),
            )
            conn.commit()
        finally:
            conn.close()

    def recent_conversation(self, limit: int = 10) -> List[ConversationEntry]:
        if limit <= 0:
            return []
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT speaker, text, meta, ts FROM conversation ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        finally:
            conn.close()
        return [
            ConversationEntry(speaker=r[0], text=r[1], meta=r[2], ts=datetime.fromisoformat(r[3]))
            for r in reversed(rows)
        ]


def create_memory_store() -> MemoryStore:
    """
    ENABLE_MEMORY=false -> NullMemoryStore.
    MEMORY_DB_PATH défini -> SQLite ; sinon RAM. Échec SQLite -> repli RAM (log).
    """
    if not config.ENABLE_MEMORY:
        logger.info("memory disabled (ENABLE_MEMORY=false)")
        return NullMemoryStore()
    if config.MEMORY_DB_PATH:
        try:
            return SQLiteMemoryStore(config.MEMORY_DB_PATH)
        except sqlite3.Error as e:
            logger.warning("SQLite memory unavailable (%s), falling back to in-memory store", e)
    return InMemoryMemoryStore()
