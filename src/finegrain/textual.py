"""Textual integration for finegrain. Opt-in, requires textual.

Widget updates belong in effects, but a Textual app is not always in a state
where its widget tree can be queried: before it is running, and while widgets
are being swapped out. reaction() here keeps tracking its data either way and
only skips the side effect.
"""

import logging
from contextlib import contextmanager

from textual.css.query import NoMatches

from finegrain import reaction as _reaction

logger = logging.getLogger("finegrain.textual")

# Module-owned pause state, keyed by id(app) so multiple apps work in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend guarded reactions during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def reaction(app, data_fn, effect_fn, *, fire_immediately=False, equals=None):
    """reaction() that safely bridges to Textual widgets.

    data_fn always runs, so dependencies survive a pause. effect_fn is skipped
    while the app is paused or not running, and a NoMatches from a widget
    query inside it is logged and dropped.
    """

    def _guarded(value):
        if not is_safe(app):
            return
        try:
            effect_fn(value)
        except NoMatches:
            logger.debug("Widget query found nothing for %r", value)

    return _reaction(data_fn, _guarded, fire_immediately=fire_immediately, equals=equals)
