"""Computed attributes: lazily cached derived values invalidated by host events."""

from importlib.metadata import version as _version

__version__ = _version("computed-attrs")

from computed_attrs.events import EventEmitter, EventStream
from computed_attrs.registry import (
    AttrDefinition,
    BoundMethod,
    Call,
    ComputeSource,
    Literal,
    MethodRef,
    Registry,
    default_events,
    literal,
)
from computed_attrs.cache import AttrCache, stale_event
from computed_attrs.model import Model, computed_attr
# textual NOT auto-imported — opt-in only

__all__ = [
    "AttrCache",
    "AttrDefinition",
    "BoundMethod",
    "Call",
    "ComputeSource",
    "EventEmitter",
    "EventStream",
    "Literal",
    "MethodRef",
    "Model",
    "Registry",
    "computed_attr",
    "default_events",
    "literal",
    "stale_event",
]
