"""Tests for EventStream and EventEmitter."""

from computed_attrs import EventEmitter, EventStream


class TestEventStream:
    def test_subscribe_receives_emitted_values(self):
        stream = EventStream()
        received = []
        stream.subscribe(lambda *args: received.append(args))
        stream.emit(1)
        stream.emit(2, "x")
        assert received == [(1,), (2, "x")]

    def test_multiple_subscribers_in_order(self):
        stream = EventStream()
        order = []
        stream.subscribe(lambda: order.append("a"))
        stream.subscribe(lambda: order.append("b"))
        stream.emit()
        assert order == ["a", "b"]

    def test_unsubscribe(self):
        stream = EventStream()
        received = []
        unsub = stream.subscribe(received.append)
        stream.emit(1)
        unsub()
        stream.emit(2)
        assert received == [1]

    def test_unsubscribe_idempotent(self):
        stream = EventStream()
        unsub = stream.subscribe(lambda v: None)
        unsub()
        unsub()  # should not raise

    def test_unsubscribe_during_emit(self):
        stream = EventStream()
        received = []

        def first(v):
            received.append(("first", v))
            unsub_second()

        stream.subscribe(first)
        unsub_second = stream.subscribe(lambda v: received.append(("second", v)))
        stream.emit(1)
        stream.emit(2)
        # Snapshot dispatch: second still sees the first emit.
        assert received == [("first", 1), ("second", 1), ("first", 2)]

    def test_emit_after_dispose_is_noop(self):
        stream = EventStream()
        received = []
        stream.subscribe(received.append)
        stream.dispose()
        stream.emit(1)
        assert received == []
        assert len(stream) == 0


class TestEventEmitter:
    def test_named_channels(self):
        events = EventEmitter()
        a, b = [], []
        events.on("a", a.append)
        events.on("b", b.append)
        events.emit("a", 1)
        assert a == [1]
        assert b == []

    def test_emit_without_listeners(self):
        EventEmitter().emit("nobody", 1)  # no error

    def test_on_returns_disposer(self):
        events = EventEmitter()
        received = []
        off = events.on("x", received.append)
        off()
        events.emit("x", 1)
        assert received == []

    def test_off_single_callback(self):
        events = EventEmitter()
        a, b = [], []
        events.on("x", a.append)
        events.on("x", b.append)
        events.off("x", a.append)
        events.emit("x", 1)
        assert a == []
        assert b == [1]

    def test_off_all(self):
        events = EventEmitter()
        received = []
        events.on("x", received.append)
        events.on("x", received.append)
        events.off("x")
        events.emit("x", 1)
        assert received == []
        assert events.listener_count("x") == 0

    def test_off_unknown_is_noop(self):
        EventEmitter().off("nope")

    def test_once(self):
        events = EventEmitter()
        received = []
        events.once("x", received.append)
        events.emit("x", 1)
        events.emit("x", 2)
        assert received == [1]
        assert events.listener_count("x") == 0

    def test_listener_count(self):
        events = EventEmitter()
        events.on("x", lambda: None)
        events.on("x", lambda: None)
        assert events.listener_count("x") == 2
        assert events.listener_count("y") == 0

    def test_dispose(self):
        events = EventEmitter()
        received = []
        events.on("x", received.append)
        events.dispose()
        events.emit("x", 1)
        assert received == []
