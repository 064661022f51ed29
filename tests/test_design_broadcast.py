from __future__ import annotations

from ensemble.broadcast import DesignBroadcaster


def test_publish_reaches_session_listeners_only() -> None:
    hub = DesignBroadcaster()
    seen_a: list = []
    seen_b: list = []
    hub.subscribe("a", seen_a.append)
    hub.subscribe("b", seen_b.append)
    warnings = hub.publish("a", {"event": "design-updated"})
    assert warnings == []
    assert seen_a == [{"event": "design-updated"}]
    assert seen_b == []


def test_failing_listener_is_isolated() -> None:
    hub = DesignBroadcaster()
    seen: list = []

    def broken(event) -> None:
        raise ConnectionError("socket closed")

    bad = hub.subscribe("a", broken)
    hub.subscribe("a", seen.append)
    warnings = hub.publish("a", {"n": 1})
    assert seen == [{"n": 1}]
    assert warnings == [f"listener {bad[1]} failed: socket closed"]


def test_unsubscribe_and_drop() -> None:
    hub = DesignBroadcaster()
    handle = hub.subscribe("a", lambda e: None)
    hub.subscribe("b", lambda e: None)
    assert hub.listener_count("a") == 1
    assert hub.unsubscribe(handle) is True
    assert hub.unsubscribe(handle) is False
    assert hub.listener_count("a") == 0
    hub.drop_session("b")
    assert hub.listener_count("b") == 0
    assert hub.publish("b", {}) == []
