"""Definition registry — which derived attributes a host has and how to compute them.

A declaration maps an attribute key to a compute source and the host events
that make its cached value stale:

    computed_attrs = {
        "full_name": {
            "events": ["change:first_name", "change:last_name"],
            "compute": lambda model: f"{model.get('first_name')} {model.get('last_name')}",
        },
        "initials": {"compute": "make_initials"},   # method name on the host
        "label": {},                                 # method named "label", default events
    }

Registries are built per host instance; definitions are never shared.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any, Callable


def default_events(key: str) -> tuple[str, ...]:
    """Events that invalidate a key declared without an explicit list."""
    return ("reset", f"change:{key}")


class ComputeSource:
    """How a derived attribute's value is produced."""

    __slots__ = ()

    def evaluate(self, host: Any) -> Any:
        raise NotImplementedError


class Literal(ComputeSource):
    """A fixed value."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def evaluate(self, host: Any) -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"Literal({self.value!r})"


class Call(ComputeSource):
    """A function called with the host as its only argument."""

    __slots__ = ("fn",)

    def __init__(self, fn: Callable[[Any], Any]) -> None:
        self.fn = fn

    def evaluate(self, host: Any) -> Any:
        return self.fn(host)

    def __repr__(self) -> str:
        return f"Call({getattr(self.fn, '__name__', self.fn)!r})"


class MethodRef(ComputeSource):
    """A method looked up on the host each time it is evaluated.

    When the host has no callable by that name the reference degrades to a
    literal: the name itself, or None if the name was defaulted from the key.
    """

    __slots__ = ("name", "defaulted")

    def __init__(self, name: str, *, defaulted: bool = False) -> None:
        self.name = name
        self.defaulted = defaulted

    def lookup(self, host: Any) -> Callable[[], Any] | None:
        method = getattr(host, self.name, None)
        return method if callable(method) else None

    def evaluate(self, host: Any) -> Any:
        method = self.lookup(host)
        if method is not None:
            return method()
        return None if self.defaulted else self.name

    def __repr__(self) -> str:
        return f"MethodRef({self.name!r})"


class BoundMethod(ComputeSource):
    """A MethodRef resolved once against a specific host."""

    __slots__ = ("method",)

    def __init__(self, method: Callable[[], Any]) -> None:
        self.method = method

    def evaluate(self, host: Any) -> Any:
        return self.method()

    def __repr__(self) -> str:
        return f"BoundMethod({getattr(self.method, '__name__', self.method)!r})"


def literal(value: Any) -> Literal:
    """Declare a literal compute source (needed for plain strings)."""
    return Literal(value)


def to_source(value: Any, key: str) -> ComputeSource:
    if isinstance(value, ComputeSource):
        return value
    if value is None:
        return MethodRef(key, defaulted=True)
    if isinstance(value, str):
        return MethodRef(value)
    if callable(value):
        return Call(value)
    return Literal(value)


def _normalize_events(key: str, events: Iterable[str] | None) -> tuple[str, ...]:
    if events is None:
        return default_events(key)
    if isinstance(events, str):
        raise TypeError(
            f"events for computed attribute {key!r} must be a list of names, not a string"
        )
    ordered: dict[str, None] = {}
    for name in events:
        if not isinstance(name, str):
            raise TypeError(f"event names for {key!r} must be strings, got {name!r}")
        ordered[name] = None
    return tuple(ordered)


_DECLARATION_KEYS = frozenset({"compute", "events"})


class AttrDefinition:
    """One declared derived attribute."""

    __slots__ = ("key", "source", "events")

    def __init__(
        self,
        key: str,
        source: Any = None,
        events: Iterable[str] | None = None,
    ) -> None:
        self.key = key
        self.source = to_source(source, key)
        self.events = _normalize_events(key, events)

    @classmethod
    def from_declaration(cls, key: str, decl: Any) -> AttrDefinition:
        if isinstance(decl, AttrDefinition):
            # Copy so a shared class-level definition is never resolved in place.
            return cls(key, decl.source, decl.events)
        if isinstance(decl, Mapping):
            unknown = set(decl) - _DECLARATION_KEYS
            if unknown:
                raise TypeError(
                    f"unknown options for computed attribute {key!r}: {sorted(unknown)}"
                )
            return cls(key, decl.get("compute"), decl.get("events"))
        return cls(key, decl)

    def __repr__(self) -> str:
        return f"AttrDefinition({self.key!r}, {self.source!r}, events={list(self.events)!r})"


class Registry:
    """Per-instance mapping of attribute key to AttrDefinition."""

    def __init__(self, definitions: Iterable[AttrDefinition] = ()) -> None:
        self._definitions: dict[str, AttrDefinition] = {d.key: d for d in definitions}

    @classmethod
    def from_declarations(cls, declarations: Mapping[str, Any] | None) -> Registry:
        if not declarations:
            return cls()
        return cls(
            AttrDefinition.from_declaration(key, decl)
            for key, decl in declarations.items()
        )

    def get(self, key: str) -> AttrDefinition | None:
        return self._definitions.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def resolve(self, host: Any) -> list[tuple[str, str]]:
        """Bind method references to host; return (key, method_name) pairs bound.

        Only references naming an existing callable are rewritten. The caller
        decides what to do with the returned method slots.
        """
        resolved = []
        for key, definition in self._definitions.items():
            source = definition.source
            if not isinstance(source, MethodRef):
                continue
            method = source.lookup(host)
            if method is None:
                continue
            definition.source = BoundMethod(method)
            resolved.append((key, source.name))
        return resolved

    def __repr__(self) -> str:
        return f"Registry({list(self._definitions)!r})"
