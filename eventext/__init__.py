"""
Extended event emitter.

Provides a whitelisted, muteable publish/subscribe registry with buffered
replay and awaitable wait helpers.
"""

from .exceptions import EventRegistryError, ReentrantDispatchError
from .models import ListenerRegistration
from .registry import EventRegistry
from .types import (
    STRATEGY_ORDERED_BY_EVENTS,
    STRATEGY_ORDERED_BY_LISTENER_ID,
    Listener,
    ListenerRunnerStrategy,
    Unsubscriber,
)

__all__ = [
    "EventRegistry",
    "EventRegistryError",
    "Listener",
    "ListenerRegistration",
    "ListenerRunnerStrategy",
    "ReentrantDispatchError",
    "STRATEGY_ORDERED_BY_EVENTS",
    "STRATEGY_ORDERED_BY_LISTENER_ID",
    "Unsubscriber",
]
