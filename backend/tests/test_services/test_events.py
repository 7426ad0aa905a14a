"""Tests for the state observer."""

from puremetrics.services.events import StateObserver


class TestStateObserver:
    def test_emit_reaches_every_subscriber(self):
        observer = StateObserver()
        first, second = [], []
        observer.subscribe(first.append)
        observer.subscribe(second.append)

        change = observer.emit("sessions", "reading_added")

        assert first == [change]
        assert second == [change]
        assert change.collection == "sessions"
        assert change.reason == "reading_added"

    def test_unsubscribe(self):
        observer = StateObserver()
        received = []
        unsubscribe = observer.subscribe(received.append)

        unsubscribe()
        unsubscribe()
        observer.emit("sessions", "reading_added")

        assert received == []
        assert observer.subscriber_count == 0

    def test_failing_subscriber_does_not_block_others(self):
        observer = StateObserver()
        received = []

        def broken(change):
            raise RuntimeError("render failed")

        observer.subscribe(broken)
        observer.subscribe(received.append)

        observer.emit("health_metrics", "metric_added")

        assert len(received) == 1
