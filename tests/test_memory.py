# tests/test_memory.py
"""Mémoire joueur : préférences + historique borné (RAM et SQLite)."""

from unittest.mock import patch

import pytest

from companion.memory import InMemoryMemoryStore, NullMemoryStore, SQLiteMemoryStore, create_memory_store


@pytest.fixture(params=["ram", "sqlite"])
def store(request, tmp_path):
    if request.param == "ram":
        return InMemoryMemoryStore(max_history=3)
    return SQLiteMemoryStore(str(tmp_path / "memory.db"), max_history=3)


def test_get_missing_key_returns_empty(store):
    assert store.get("nope") == ""


def test_set_then_overwrite(store):
    store.set("name", "Alex")
    store.set("name", "Sam")
    assert store.get("name") == "Sam"


def test_conversation_order_oldest_first(store):
    store.append_conversation_entry("Player", "hi")
    store.append_conversation_entry("Assistant", "hello", "meta")
    entries = store.recent_conversation(10)
    assert [(e.speaker, e.text, e.meta) for e in entries] == [
        ("Player", "hi", ""),
        ("Assistant", "hello", "meta"),
    ]


def test_conversation_bounded(store):
    for i in range(5):
        store.append_conversation_entry("Player", f"msg {i}")
    assert [e.text for e in store.recent_conversation(10)] == ["msg 2", "msg 3", "msg 4"]
    assert [e.text for e in store.recent_conversation(2)] == ["msg 3", "msg 4"]


def test_recent_conversation_zero_limit(store):
    store.append_conversation_entry("Player", "hi")
    assert store.recent_conversation(0) == []


def test_sqlite_survives_reopen(tmp_path):
    path = str(tmp_path / "memory.db")
    first = SQLiteMemoryStore(path)
    first.set("favorite_game", "chess")
    first.append_conversation_entry("Player", "remember me")

    second = SQLiteMemoryStore(path)
    assert second.get("favorite_game") == "chess"
    assert second.recent_conversation(1)[0].text == "remember me"


def test_create_memory_store_defaults_to_ram():
    with patch("companion.config.MEMORY_DB_PATH", ""):
        assert isinstance(create_memory_store(), InMemoryMemoryStore)


def test_create_memory_store_sqlite(tmp_path):
    with patch("companion.config.MEMORY_DB_PATH", str(tmp_path / "m.db")):
        assert isinstance(create_memory_store(), SQLiteMemoryStore)


def test_create_memory_store_falls_back_on_sqlite_error(tmp_path):
    """Chemin inutilisable (répertoire inexistant) → repli RAM."""
    with patch("companion.config.MEMORY_DB_PATH", str(tmp_path / "missing" / "m.db")):
        assert isinstance(create_memory_store(), InMemoryMemoryStore)


def test_create_memory_store_disabled():
    """ENABLE_MEMORY=false : aucune mémoire, même avec MEMORY_DB_PATH."""
    with patch("companion.config.ENABLE_MEMORY", False), patch("companion.config.MEMORY_DB_PATH", "x.db"):
        assert isinstance(create_memory_store(), NullMemoryStore)


def test_null_memory_store_keeps_nothing():
    store = NullMemoryStore()
    store.set("name", "Alex")
    store.append_conversation_entry("Player", "hi")
    assert store.get("name") == ""
    assert store.recent_conversation(10) == []
