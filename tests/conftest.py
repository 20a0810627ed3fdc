"""
Configuration pytest : pas de connexion backend au chargement de l'app, mémoire en RAM.
Fixtures partagées : transport / scheduler factices, horloge figée.
"""
from __future__ import annotations

import os
from datetime import datetime
from typing import Callable, List, Tuple

import pytest


def pytest_configure(config):
    """Au démarrage de pytest : AUTO_CONNECT off (l'app ne tente pas ws://localhost)."""
    os.environ["AUTO_CONNECT"] = "false"
    os.environ["MEMORY_DB_PATH"] = ""


# 2026-03-10 = mardi, 9h
FIXED_NOW = datetime(2026, 3, 10, 9, 0)


class FakeTransport:
    """Transport en mémoire : garde les messages envoyés."""

    def __init__(self, connected: bool = True, fail_on_send: bool = False) -> None:
        self.connected = connected
        self.fail_on_send = fail_on_send
        self.sent: List[str] = []

    def is_connected(self) -> bool:
        return self.connected

    def send(self, text: str) -> None:
        if self.fail_on_send:
            raise ConnectionError("socket closed")
        self.sent.append(text)


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """call_later sans boucle : les timers se déclenchent à la main (fire_all)."""

    def __init__(self) -> None:
        self.timers: List[FakeTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def pending(self) -> List[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def fire_all(self) -> None:
        for timer in self.pending():
            timer.cancelled = True
            timer.callback()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def collect() -> Callable[..., Tuple[list, Callable[..., None]]]:
    """collect() -> (liste, listener) : le listener empile ses arguments dans la liste."""

    def _make():
        calls: list = []

        def listener(*args):
            calls.append(args)

        return calls, listener

    return _make
