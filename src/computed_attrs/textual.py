"""Push computed attributes into Textual widgets. Opt-in — requires textual.

bind() recomputes a model's attribute whenever the model announces
"change:computed:<key>" and hands the fresh value to a widget callback.
Updates are dropped while the app is not running or while a pause() block
swaps widgets out; the attribute itself is still invalidated, so the next
read picks up the current value.
"""

import threading
from contextlib import contextmanager

from textual.css.query import NoMatches

from computed_attrs.cache import stale_event

# Apps currently inside pause(), by id(app); nothing is stored on the app.
_stalled_apps: set[int] = set()


@contextmanager
def pause(app):
    """Hold back bound updates while widgets are being replaced."""
    app_id = id(app)
    _stalled_apps.add(app_id)
    try:
        yield
    finally:
        _stalled_apps.discard(app_id)


def is_safe(app) -> bool:
    """True when bound updates may touch the widget tree."""
    return app.is_running and id(app) not in _stalled_apps


def bind(app, model, key, effect_fn, *, fire_immediately=True):
    """Push model.compute(key) into widgets each time the attribute goes stale.

    The attribute is computed once up front so its invalidating events are
    subscribed. Guards against firing during pause/not-running, catches
    NoMatches from widget queries, and marshals cross-thread calls via
    call_from_thread. Returns a disposer.
    """
    _main = threading.get_ident()

    def _guarded(*_):
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe)
        else:
            _safe()

    def _safe():
        try:
            effect_fn(model.compute(key))
        except NoMatches:
            pass

    value = model.compute(key)
    if fire_immediately and is_safe(app):
        try:
            effect_fn(value)
        except NoMatches:
            pass

    return model.on(stale_event(key), _guarded)
