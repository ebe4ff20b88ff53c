# events.py
"""Typed notifications exchanged between the selection model, the map and the widgets."""

import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, DefaultDict, List

logger = logging.getLogger(__name__)


class SelectionEvent(str, Enum):
    SELECTION_CHANGED = "selectionChanged"
    ERROR_TOO_MANY_COMPARISONS = "errorTooManyComparisons"
    MAP_ITEM_HOVER = "mapItemHover"
    MAP_ITEM_UNHOVER = "mapItemUnhover"


Listener = Callable[[SelectionEvent, Any], None]


class EventBus:
    """
    Fire-and-forget event dispatch. Listeners are called synchronously in
    registration order with the event and its payload.
    """

    def __init__(self):
        self._listeners: DefaultDict[SelectionEvent, List[Listener]] = defaultdict(list)

    def subscribe(self, event: SelectionEvent, listener: Listener) -> Callable[[], None]:
        """Registers a listener and returns a callable that removes it again."""
        self._listeners[event].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[event]:
                self._listeners[event].remove(listener)

        return unsubscribe

    def emit(self, event: SelectionEvent, payload: Any = None) -> None:
        logger.debug("Emitting %s", event.name)
        for listener in list(self._listeners[event]):
            listener(event, payload)
