"""Invalidation cache — lazy per-key memoization cleared by host events.

An AttrCache is composed into one host. compute(key) evaluates a declared
attribute on demand and keeps the result until one of the key's events fires
on the host. The first evaluation of a key subscribes the cache to those
events, one host subscription per (key, event) pair; later evaluations
never subscribe again.

When an event fires, every key registered under it is evicted and the host
re-announces it as "change:computed:<key>". Nothing is recomputed until the
next read.

The host must provide on(name, handler) -> disposer and emit(name, *args).
"""

from __future__ import annotations

import functools
import logging
import threading
from typing import Any, Callable

from computed_attrs.registry import Registry

logger = logging.getLogger("computed_attrs.cache")

_UNSET = object()


def stale_event(key: str) -> str:
    """Name of the event emitted when key is evicted."""
    return f"change:computed:{key}"


class AttrCache:
    """Cached values, event→keys index and subscription bookkeeping for one host."""

    def __init__(self, host: Any, registry: Registry, *, none_is_absent: bool = False) -> None:
        self._host = host
        self._registry = registry
        self._none_is_absent = none_is_absent
        self._values: dict[str, Any] = {}
        self._stale_events: dict[str, list[str]] = {}
        self._subscribed: set[str] = set()
        self._unsubscribers: dict[tuple[str, str], Callable[[], None]] = {}
        self._disabled = False
        self._setup_done = False
        # Reentrant: compute functions may read other keys, and stale
        # handlers may compute while the fan-out is still running.
        self._lock = threading.RLock()

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def disabled(self) -> bool:
        return self._disabled

    def disable(self) -> None:
        """Debugging aid: recompute on every read."""
        self._disabled = True

    def enable(self) -> None:
        self._disabled = False

    def setup_once(self) -> None:
        """Resolve method references and alias each method to compute(key).

        After setup, host.full_name() and cache.compute("full_name") share
        one cache entry. Runs once per cache; later calls do nothing.
        """
        with self._lock:
            if self._setup_done:
                return
            self._setup_done = True
            for key, name in self._registry.resolve(self._host):
                original = getattr(self._host, name)
                setattr(self._host, name, self._alias(key, original))
                logger.debug("Aliased %s.%s() to computed attribute %r",
                             type(self._host).__name__, name, key)

    def _alias(self, key: str, original: Callable) -> Callable[..., Any]:
        @functools.wraps(original)
        def alias(*args: Any, **kwargs: Any) -> Any:
            # Arguments are ignored; the cached value depends on host state only.
            return self.compute(key)

        return alias

    def _has_value(self, key: str) -> bool:
        value = self._values.get(key, _UNSET)
        if value is _UNSET:
            return False
        return not (self._none_is_absent and value is None)

    def is_fresh(self, key: str) -> bool:
        """True if key holds a cached value that no event has cleared yet."""
        with self._lock:
            return self._has_value(key)

    def compute(self, key: str) -> Any:
        """Return the cached value for key, evaluating it first if stale."""
        definition = self._registry.get(key)
        if definition is None:
            logger.warning('A "%s" computed attribute has not been defined.', key)
            return None

        with self._lock:
            if self._has_value(key) and not self._disabled:
                return self._values[key]

            # Errors propagate; the entry stays absent and the next read retries.
            value = definition.source.evaluate(self._host)
            self._values[key] = value

            if key not in self._subscribed:
                self._subscribe(key, definition.events)

            return value

    def _subscribe(self, key: str, events: tuple[str, ...]) -> None:
        for name in events:
            keys = self._stale_events.setdefault(name, [])
            if key not in keys:
                keys.append(key)
            if (key, name) not in self._unsubscribers:
                self._unsubscribers[(key, name)] = self._host.on(
                    name, functools.partial(self._mark_stale, key, name)
                )
        self._subscribed.add(key)
        logger.debug("Computed attribute %r goes stale on %s", key, list(events))

    def _mark_stale(self, key: str, name: str, *payload: Any) -> None:
        with self._lock:
            self._values.pop(key, None)
        logger.debug("Computed attribute %r marked stale by %r", key, name)
        self._host.emit(stale_event(key), self._host)

    def on_event(self, name: str, *payload: Any) -> None:
        """Evict every key that depends on event name and announce it."""
        with self._lock:
            keys = list(self._stale_events.get(name, ()))
        for key in keys:
            self._mark_stale(key, name)

    def keys_for(self, name: str) -> tuple[str, ...]:
        """Keys evicted when event name fires."""
        with self._lock:
            return tuple(self._stale_events.get(name, ()))

    def dispose(self) -> None:
        """Unsubscribe from the host and forget everything cached."""
        with self._lock:
            for unsubscribe in self._unsubscribers.values():
                unsubscribe()
            self._unsubscribers.clear()
            self._values.clear()
            self._stale_events.clear()
            self._subscribed.clear()

    def __repr__(self) -> str:
        fresh = [key for key in self._registry if self._has_value(key)]
        state = "disabled" if self._disabled else f"fresh={fresh!r}"
        return f"AttrCache({type(self._host).__name__}, {state})"
