# tests/test_signals.py

from companion.signals import Signal


def test_emit_to_all_listeners(collect):
    sig = Signal("test")
    a, la = collect()
    b, lb = collect()
    sig.connect(la)
    sig.connect(lb)
    sig.emit("x", 1)
    assert a == [("x", 1)]
    assert b == [("x", 1)]


def test_connect_is_idempotent(collect):
    sig = Signal("test")
    calls, listener = collect()
    sig.connect(listener)
    sig.connect(listener)
    assert len(sig) == 1
    sig.emit()
    assert calls == [()]


def test_disconnect(collect):
    sig = Signal("test")
    calls, listener = collect()
    sig.connect(listener)
    sig.disconnect(listener)
    sig.disconnect(listener)
    sig.emit("x")
    assert calls == []


def test_failing_listener_does_not_stop_others(collect):
    sig = Signal("test")
    calls, listener = collect()

    def boom(*args):
        raise ValueError("listener bug")

    sig.connect(boom)
    sig.connect(listener)
    sig.emit("x")
    assert calls == [("x",)]


def test_emit_without_listeners():
    Signal("empty").emit("ignored")
