"""Model — an observable attribute container with cached derived attributes.

Plain attributes live in a dict and announce every change as an event.
Derived attributes are declared on the class and cached by an AttrCache
until one of their events fires.

Usage:
    class Person(Model):
        computed_attrs = {
            "full_name": {
                "events": ["change:first_name", "change:last_name"],
                "compute": lambda p: f"{p.get('first_name')} {p.get('last_name')}",
            },
        }

        @computed_attr(events=["change:birth_year"])
        def age(self):
            return 2024 - self.get("birth_year")

    ada = Person(first_name="Ada", last_name="Lovelace", birth_year=1815)
    ada.compute("full_name")   # computed
    ada.compute("full_name")   # cached
    ada.age()                  # same cache, via the aliased method
    ada.set("first_name", "Augusta")
    ada.compute("full_name")   # computed again
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from computed_attrs.cache import AttrCache
from computed_attrs.events import Disposer, EventEmitter, Handler
from computed_attrs.registry import Registry

_MARKER = "__computed_attr_events__"


def computed_attr(fn: Callable | None = None, *, events: Iterable[str] | None = None):
    """Declare a method as a cached derived attribute keyed by its name.

    Usable bare (@computed_attr) or with explicit invalidating events
    (@computed_attr(events=[...])). Without events, the attribute goes stale
    on "reset" and "change:<name>".
    """

    def mark(method: Callable) -> Callable:
        setattr(method, _MARKER, None if events is None else list(events))
        return method

    if fn is not None:
        return mark(fn)
    return mark


class Model:
    """Observable attribute container that owns a computed-attribute cache."""

    computed_attrs: Mapping[str, Any] = {}
    computed_none_is_absent: bool = False

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        merged: dict[str, Any] = {}
        for base in reversed(cls.__mro__[1:]):
            merged.update(base.__dict__.get("computed_attrs", {}))
        merged.update(cls.__dict__.get("computed_attrs", {}))
        for name, member in cls.__dict__.items():
            if callable(member) and hasattr(member, _MARKER):
                merged[name] = {"compute": name, "events": getattr(member, _MARKER)}
        cls.computed_attrs = merged

    def __init__(self, attributes: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._attributes: dict[str, Any] = dict(attributes or {}, **kwargs)
        self._events = EventEmitter()
        self._computed = AttrCache(
            self,
            Registry.from_declarations(type(self).computed_attrs),
            none_is_absent=self.computed_none_is_absent,
        )
        self.initialize()

    def initialize(self) -> None:
        """Construction hook. Overrides must call setup_computed_attrs() first."""
        self.setup_computed_attrs()

    # --- Attributes ---

    def get(self, key: str, default: Any = None) -> Any:
        return self._attributes.get(key, default)

    def has(self, key: str) -> bool:
        return key in self._attributes

    def to_dict(self) -> dict[str, Any]:
        return dict(self._attributes)

    def _assign(self, key: str, value: Any) -> bool:
        missing = key not in self._attributes
        old = self._attributes.get(key)
        if missing or (old is not value and old != value):
            self._attributes[key] = value
            self.trigger(f"change:{key}", self, value)
            return True
        return False

    def set(self, key: str, value: Any) -> None:
        """Write one attribute; emits change:<key> then change if it differs."""
        if self._assign(key, value):
            self.trigger("change", self)

    def update(self, values: Mapping[str, Any]) -> None:
        """Write several attributes; a single change event follows."""
        changed = False
        for key, value in values.items():
            changed = self._assign(key, value) or changed
        if changed:
            self.trigger("change", self)

    def unset(self, key: str) -> None:
        if key not in self._attributes:
            return
        del self._attributes[key]
        self.trigger(f"change:{key}", self, None)
        self.trigger("change", self)

    def reset(self, attributes: Mapping[str, Any] | None = None) -> None:
        """Replace every attribute at once and emit "reset"."""
        self._attributes = dict(attributes or {})
        self.trigger("reset", self)

    # --- Events ---

    def on(self, name: str, callback: Handler) -> Disposer:
        return self._events.on(name, callback)

    def once(self, name: str, callback: Handler) -> Disposer:
        return self._events.once(name, callback)

    def off(self, name: str, callback: Handler | None = None) -> None:
        self._events.off(name, callback)

    def trigger(self, name: str, *args: Any) -> None:
        self._events.emit(name, *args)

    def emit(self, name: str, *args: Any) -> None:
        """Entry point AttrCache uses; routed through trigger() for overrides."""
        self.trigger(name, *args)

    # --- Computed attributes ---

    def compute(self, key: str) -> Any:
        return self._computed.compute(key)

    def setup_computed_attrs(self) -> None:
        self._computed.setup_once()

    def disable_computed_attrs(self) -> None:
        self._computed.disable()

    def enable_computed_attrs(self) -> None:
        self._computed.enable()

    def dispose(self) -> None:
        """Drop cached values, cache subscriptions and all listeners."""
        self._computed.dispose()
        self._events.dispose()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._attributes!r})"
