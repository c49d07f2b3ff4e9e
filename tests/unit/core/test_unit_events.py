# tests/unit/core/test_unit_events.py - v1
"""Tests for core/events.py."""

from __future__ import annotations

import logging

from smelltrack.core.events import Subscribers


class TestSubscribers:
    def test_emit_in_order(self):
        subs: Subscribers[int] = Subscribers("test")
        seen: list[tuple[str, int]] = []
        subs.subscribe(lambda v: seen.append(("a", v)))
        subs.subscribe(lambda v: seen.append(("b", v)))
        subs.emit(1)
        assert seen == [("a", 1), ("b", 1)]

    def test_unsubscribe_twice_is_safe(self):
        subs: Subscribers[int] = Subscribers("test")
        unsubscribe = subs.subscribe(lambda v: None)
        unsubscribe()
        unsubscribe()
        assert len(subs) == 0

    def test_failure_is_logged_and_isolated(self, caplog):
        subs: Subscribers[str] = Subscribers("test")
        seen: list[str] = []

        def boom(_v: str) -> None:
            raise ValueError("bad")

        subs.subscribe(boom)
        subs.subscribe(seen.append)
        with caplog.at_level(logging.ERROR, logger="smelltrack.core.events"):
            subs.emit("x")
        assert seen == ["x"]
        assert "Subscriber of test failed" in caplog.text

    def test_unsubscribe_during_emit(self):
        subs: Subscribers[int] = Subscribers("test")
        seen: list[int] = []
        handle = None

        def once(v: int) -> None:
            seen.append(v)
            handle()

        handle = subs.subscribe(once)
        subs.emit(1)
        subs.emit(2)
        assert seen == [1]
