"""
Tests for the cancellation token and the background input listener.
"""

from __future__ import annotations

import threading
import time

import pytest

from tickdown.signals import CancelToken, InputListener, is_quit_key
from tickdown.surface import KeyEvent, MemorySurface, ResizeEvent


class TestCancelToken:
    def test_starts_clear(self):
        token = CancelToken()
        assert not token.cancelled
        assert token.wait(0) is False

    def test_cancel_is_idempotent(self):
        token = CancelToken()
        assert token.cancel("first") is True
        assert token.cancel("second") is False
        assert token.cancelled
        assert token.reason == "first"

    def test_wait_returns_early_on_cancel(self):
        token = CancelToken()
        threading.Timer(0.05, token.cancel).start()
        start = time.monotonic()
        assert token.wait(5) is True
        assert time.monotonic() - start < 1

    def test_concurrent_cancels_report_one_winner(self):
        token = CancelToken()
        results = []
        threads = [threading.Thread(target=lambda: results.append(token.cancel())) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert results.count(True) == 1


class TestQuitKeys:
    @pytest.mark.parametrize("event", [KeyEvent(27, "\x1b"), KeyEvent(3, "\x03"), KeyEvent(113, "q"), KeyEvent(81, "Q")])
    def test_quit(self, event):
        assert is_quit_key(event)

    @pytest.mark.parametrize("event", [KeyEvent(32, " "), KeyEvent(10, "\n"), KeyEvent(259, None)])
    def test_not_quit(self, event):
        assert not is_quit_key(event)


class TestInputListener:
    def test_dispatch_resize_syncs(self):
        surface = MemorySurface(10, 10)
        token = CancelToken()
        InputListener(surface, token).dispatch(ResizeEvent(20, 5))
        assert surface.syncs == 1
        assert not token.cancelled

    def test_dispatch_other_key_ignored(self):
        surface = MemorySurface(10, 10)
        token = CancelToken()
        InputListener(surface, token).dispatch(KeyEvent(120, "x"))
        assert not token.cancelled

    def test_thread_cancels_on_quit_key(self):
        surface = MemorySurface(10, 10)
        surface.resize(30, 8)
        surface.push_event(KeyEvent(32, " "))
        surface.push_event(KeyEvent(113, "q"))
        surface.push_event(KeyEvent(27, "\x1b"))
        token = CancelToken()
        listener = InputListener(surface, token, poll_interval=0.01)
        listener.start()
        try:
            assert token.wait(2)
        finally:
            listener.stop()
        assert not listener.is_alive()
        assert surface.syncs == 1
        assert token.reason == "key 113"

    def test_stop_without_input(self):
        listener = InputListener(MemorySurface(5, 5), CancelToken(), poll_interval=0.01)
        listener.start()
        listener.stop()
        assert not listener.is_alive()

    def test_is_daemon(self):
        assert InputListener(MemorySurface(5, 5), CancelToken()).daemon
