"""Named event channels — the publish/subscribe surface a host exposes.

An EventStream is a single channel: emit values, subscribe callbacks.
An EventEmitter multiplexes named streams ("change:first_name", "reset", ...)
created on first use.

Handlers run synchronously, in subscription order, on the emitting thread.
"""

from __future__ import annotations

from typing import Callable

Handler = Callable[..., None]
Disposer = Callable[[], None]


class EventStream:
    """Push-based event channel."""

    def __init__(self) -> None:
        self._subscribers: list[Handler] = []
        self._disposed = False

    def emit(self, *args) -> None:
        """Push args to all subscribers."""
        if self._disposed:
            return
        # Snapshot — handlers may subscribe/unsubscribe while we dispatch.
        for cb in list(self._subscribers):
            cb(*args)

    def subscribe(self, callback: Handler) -> Disposer:
        """Register a callback. Returns a function that removes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass  # already removed

        return _unsubscribe

    def unsubscribe(self, callback: Handler) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    def __len__(self) -> int:
        return len(self._subscribers)

    def dispose(self) -> None:
        """Drop all subscribers. Later emits are no-ops."""
        self._disposed = True
        self._subscribers.clear()


class EventEmitter:
    """Named event channels.

    Usage:
        events = EventEmitter()
        off = events.on("change:name", lambda model, value: print(value))
        events.emit("change:name", model, "Ada")
        off()
    """

    def __init__(self) -> None:
        self._streams: dict[str, EventStream] = {}

    def _stream(self, name: str) -> EventStream:
        stream = self._streams.get(name)
        if stream is None:
            stream = self._streams[name] = EventStream()
        return stream

    def on(self, name: str, callback: Handler) -> Disposer:
        return self._stream(name).subscribe(callback)

    def once(self, name: str, callback: Handler) -> Disposer:
        """Like on(), but the callback is removed after its first call."""

        def _once(*args) -> None:
            dispose()
            callback(*args)

        dispose = self.on(name, _once)
        return dispose

    def off(self, name: str, callback: Handler | None = None) -> None:
        """Remove callback from name, or every callback when omitted."""
        stream = self._streams.get(name)
        if stream is None:
            return
        if callback is None:
            del self._streams[name]
            stream.dispose()
        else:
            stream.unsubscribe(callback)

    def emit(self, name: str, *args) -> None:
        stream = self._streams.get(name)
        if stream is not None:
            stream.emit(*args)

    def listener_count(self, name: str) -> int:
        stream = self._streams.get(name)
        return len(stream) if stream is not None else 0

    def dispose(self) -> None:
        for stream in self._streams.values():
            stream.dispose()
        self._streams.clear()
