"""Strategy and callable type definitions."""

from enum import IntEnum
from typing import Any, Callable, TypeVar

# Event names are plain strings or str-based enums
EventT = TypeVar("EventT", bound=str)

Listener = Callable[..., Any]
Unsubscriber = Callable[[], None]


class ListenerRunnerStrategy(IntEnum):
    """Order in which buffered replay invokes listeners."""

    # Iterate over the listeners in the order they were registered
    ORDERED_BY_LISTENER_ID = 0
    # Iterate over the listeners grouped by events, in event registration order
    ORDERED_BY_EVENTS = 1


STRATEGY_ORDERED_BY_LISTENER_ID = ListenerRunnerStrategy.ORDERED_BY_LISTENER_ID
STRATEGY_ORDERED_BY_EVENTS = ListenerRunnerStrategy.ORDERED_BY_EVENTS
