"""Event registry - a whitelisted publish/subscribe emitter.

Events must be registered before listeners can attach to them or emissions
have any effect. Listeners are tracked by an integer identity so the same
callable can be attached several times, and one identity can be shared by
several events (``on_any``). While muted, emissions are buffered per event
(latest wins) and replayed on ``unmute``.

Dispatch is synchronous and not reentrant: calling ``emit``, ``emit_many``
or ``unmute`` from inside a listener raises ``ReentrantDispatchError``.
"""

import functools
from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterable, Iterator, List, Tuple

from .config import settings
from .exceptions import ReentrantDispatchError
from .logger import log_exception, logger
from .models import ListenerRegistration
from .types import EventT, Listener, ListenerRunnerStrategy, Unsubscriber
from .waiters import EventWaiter

# Positional and keyword arguments of one emission
Arguments = Tuple[Tuple[Any, ...], Dict[str, Any]]


def _noop() -> None:
    """Detach function handed out when nothing was attached."""


@log_exception("Listener for event '{event}' failed")
def _run_listener(
    event: Any, listener: Listener, args: Tuple[Any, ...], kwargs: Dict[str, Any]
) -> None:
    listener(*args, **kwargs)


class EventRegistry(Generic[EventT]):
    """Registry of named events and the listeners attached to them."""

    def __init__(
        self,
        auto_register: bool | None = None,
        strategy: ListenerRunnerStrategy | int | None = None,
    ):
        """Initialize an empty registry.

        Args:
            auto_register: Register unknown events on ``on``/``on_any``
                instead of ignoring them. Defaults to ``settings.auto_register``.
            strategy: Ordering used by buffered replay. Defaults to
                ``settings.listener_runner_strategy``.
        """
        # Event name -> listener ids, both in insertion order
        self._events: Dict[EventT, Dict[int, None]] = {}
        self._listeners: Dict[int, ListenerRegistration] = {}
        self._scheduled_events: Dict[EventT, Arguments] = {}
        self._last_listener_id = -1
        self._muted = False
        self._listeners_are_running = False

        self.auto_register: bool = (
            settings.auto_register if auto_register is None else auto_register
        )
        self._listener_runner_strategy = ListenerRunnerStrategy(
            settings.listener_runner_strategy if strategy is None else strategy
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(events={len(self._events)}, "
            f"listeners={len(self._listeners)}, muted={self._muted})"
        )

    # Listener bookkeeping

    def _register_listener(self, listener: Listener) -> int:
        self._last_listener_id += 1
        listener_id = self._last_listener_id
        self._listeners[listener_id] = ListenerRegistration(
            listener_id=listener_id, callback=listener
        )
        return listener_id

    def _attach_listener_to_event(self, event: EventT, listener_id: int) -> None:
        listeners = self._events.get(event)
        registration = self._listeners.get(listener_id)
        if listeners is None or registration is None or listener_id in listeners:
            return

        listeners[listener_id] = None
        registration.attachment_count += 1

    def _detach_listener_from_event(self, event: EventT, listener_id: int) -> None:
        listeners = self._events.get(event)
        if listeners is None or listener_id not in listeners:
            return

        del listeners[listener_id]

        registration = self._listeners.get(listener_id)
        if registration is None:
            return
        registration.attachment_count -= 1
        if registration.attachment_count <= 0:
            del self._listeners[listener_id]

    def _ensure_known(self, event: EventT) -> bool:
        if self.auto_register:
            self.register_events(event)
        return event in self._events

    @contextmanager
    def _running_listeners(self) -> Iterator[None]:
        self._listeners_are_running = True
        try:
            yield
        finally:
            self._listeners_are_running = False

    # Strategy and mute state

    def set_listener_runner_strategy(
        self, strategy: ListenerRunnerStrategy | int
    ) -> None:
        """Set the order in which buffered replay invokes listeners.

        Args:
            strategy: ``STRATEGY_ORDERED_BY_LISTENER_ID`` (0) to run listeners
                in registration order, or ``STRATEGY_ORDERED_BY_EVENTS`` (1) to
                run them grouped by event in event registration order.

        Raises:
            ValueError: If strategy is not one of the supported values
        """
        self._listener_runner_strategy = ListenerRunnerStrategy(strategy)

    def get_listener_runner_strategy(self) -> ListenerRunnerStrategy:
        return self._listener_runner_strategy

    def mute(self) -> None:
        """Buffer emissions instead of dispatching them until ``unmute``."""
        self._muted = True
        logger.debug("Event registry muted")

    def unmute(self) -> None:
        """Stop buffering and replay every event emitted while muted.

        Raises:
            ReentrantDispatchError: If called from inside a listener
        """
        if self._listeners_are_running:
            raise ReentrantDispatchError("unmute")

        self._muted = False
        logger.debug("Event registry unmuted")
        self._run_scheduled_events()

    def is_muted(self) -> bool:
        return self._muted

    def is_dispatching(self) -> bool:
        """Whether listeners of this registry are currently running."""
        return self._listeners_are_running

    # Event registration

    def register_events(self, *events: EventT) -> None:
        """Register events so listeners can attach and emissions take effect.

        Registration order determines the order of buffered replay under the
        event-grouped strategy. Already registered events are left untouched.
        """
        for event in events:
            if event not in self._events:
                self._events[event] = {}
                logger.debug(f"Registered event '{event}'")

    def unregister_events(self, *events: EventT) -> None:
        """Unregister events, detaching all of their listeners.

        Unknown events are ignored.
        """
        for event in events:
            listeners = self._events.get(event)
            if listeners is None:
                continue

            for listener_id in list(listeners):
                self._detach_listener_from_event(event, listener_id)

            del self._events[event]
            self._scheduled_events.pop(event, None)
            logger.debug(f"Unregistered event '{event}'")

    def unregister_all_events(self) -> None:
        """Drop every event, listener and buffered emission."""
        self._events.clear()
        self._listeners.clear()
        self._scheduled_events.clear()
        logger.debug("Unregistered all events")

    unregister_all = unregister_all_events

    def has_event(self, event: EventT) -> bool:
        return event in self._events

    def get_event_names(self) -> List[EventT]:
        """Registered event names in registration order."""
        return list(self._events)

    # Attaching and detaching listeners

    def on(self, event: EventT, listener: Listener) -> Unsubscriber:
        """Attach ``listener`` to ``event``.

        Unknown events are ignored unless ``auto_register`` is enabled.

        Returns:
            Function detaching exactly this attachment. Calling it more than
            once is harmless.
        """
        if not self._ensure_known(event):
            return _noop

        listener_id = self._register_listener(listener)
        self._attach_listener_to_event(event, listener_id)

        def unsubscriber() -> None:
            self._detach_listener_from_event(event, listener_id)

        return unsubscriber

    def on_any(self, events: Iterable[EventT], listener: Listener) -> Unsubscriber:
        """Attach one listener to several events at once.

        The listener shares a single identity across all the events, so a
        buffered replay covering several of them runs it only once.
        """
        events = list(events)
        if self.auto_register:
            self.register_events(*events)

        attached = [event for event in dict.fromkeys(events) if event in self._events]
        if not attached:
            return _noop

        listener_id = self._register_listener(listener)
        for event in attached:
            self._attach_listener_to_event(event, listener_id)

        def unsubscriber() -> None:
            for event in attached:
                self._detach_listener_from_event(event, listener_id)

        return unsubscriber

    def once(self, event: EventT, listener: Listener) -> Unsubscriber:
        """Attach a listener that detaches itself before its first call."""
        fired = False

        @functools.wraps(listener)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            nonlocal fired
            if fired:
                return None
            fired = True
            unsubscriber()
            return listener(*args, **kwargs)

        unsubscriber = self.on(event, wrapper)
        return unsubscriber

    def remove_listener(self, event: EventT, listener: Listener) -> None:
        """Detach the oldest attachment of ``listener`` from ``event``.

        Linear in the number of listeners attached to the event.
        """
        listeners = self._events.get(event)
        if listeners is None:
            return

        for listener_id in sorted(listeners):
            registration = self._listeners.get(listener_id)
            if registration is not None and registration.matches(listener):
                self._detach_listener_from_event(event, listener_id)
                return

    off = remove_listener

    def remove_all_listeners(self, event: EventT) -> None:
        listeners = self._events.get(event)
        if listeners is None:
            return

        for listener_id in list(listeners):
            self._detach_listener_from_event(event, listener_id)

    def has_listeners(self, event: EventT) -> bool:
        return bool(self._events.get(event))

    def get_number_of_listeners(self, event: EventT) -> int:
        return len(self._events.get(event, ()))

    def get_listeners(self, event: EventT) -> List[Listener]:
        """Callables attached to ``event`` in attachment order."""
        return [
            self._listeners[listener_id].callback
            for listener_id in self._events.get(event, ())
            if listener_id in self._listeners
        ]

    # Dispatch

    def emit(self, event: EventT, *args: Any, **kwargs: Any) -> None:
        """Trigger ``event``, or buffer it while muted.

        Listeners run synchronously in attachment order. Exceptions raised by
        a listener are logged and do not stop the remaining listeners.

        Raises:
            ReentrantDispatchError: If called from inside a listener
        """
        if self._listeners_are_running:
            raise ReentrantDispatchError("emit")

        if event not in self._events:
            return

        if self._muted:
            self._scheduled_events[event] = (args, kwargs)
            logger.debug(f"Buffered emission of '{event}' while muted")
            return

        self._dispatch(event, args, kwargs)

    def emit_many(self, events: Iterable[EventT], *args: Any, **kwargs: Any) -> None:
        """Trigger several events with the same arguments as one batch.

        Each listener runs at most once per batch, ordered by the current
        listener runner strategy. While muted the batch stays buffered.

        Raises:
            ReentrantDispatchError: If called from inside a listener
        """
        if self._listeners_are_running:
            raise ReentrantDispatchError("emit_many")

        for event in events:
            if event in self._events:
                self._scheduled_events[event] = (args, kwargs)

        if not self._muted:
            self._run_scheduled_events()

    def _dispatch(
        self, event: EventT, args: Tuple[Any, ...], kwargs: Dict[str, Any]
    ) -> None:
        listeners = self._events[event]
        if not listeners:
            logger.debug(f"No listeners attached to event '{event}'")
            return

        with self._running_listeners():
            for listener_id in list(listeners):
                # Skip listeners detached earlier in this pass
                registration = self._listeners.get(listener_id)
                if registration is None or listener_id not in listeners:
                    continue
                _run_listener(event, registration.callback, args, kwargs)

    def _run_scheduled_events(self) -> None:
        if not self._scheduled_events:
            return

        # Listener id -> (event, arguments). A listener reached through
        # several buffered events keeps its first position and the
        # arguments of the last event.
        run_data: Dict[int, Tuple[EventT, Arguments]] = {}
        for event, listeners in self._events.items():
            scheduled = self._scheduled_events.get(event)
            if scheduled is None:
                continue
            for listener_id in listeners:
                run_data[listener_id] = (event, scheduled)

        logger.debug(
            f"Replaying {len(self._scheduled_events)} buffered events "
            f"to {len(run_data)} listeners"
        )
        self._scheduled_events.clear()

        ordered_listener_ids = list(run_data)
        if self._listener_runner_strategy == ListenerRunnerStrategy.ORDERED_BY_LISTENER_ID:
            ordered_listener_ids.sort()

        with self._running_listeners():
            for listener_id in ordered_listener_ids:
                event, (args, kwargs) = run_data[listener_id]
                registration = self._listeners.get(listener_id)
                if registration is None or listener_id not in self._events.get(
                    event, ()
                ):
                    continue
                _run_listener(event, registration.callback, args, kwargs)

    # Waiting

    async def wait_for_event(self, event: EventT, max_wait_ms: float = 0) -> bool:
        """Wait until ``event`` is emitted.

        Args:
            event: Event to wait for
            max_wait_ms: Maximum time to wait in milliseconds. 0 waits forever.

        Returns:
            True if the event was emitted, False if the time ran out
        """
        waiter = EventWaiter()
        waiter.add_subscription(self.on(event, waiter.on_event))
        waiter.arm_timeout(max_wait_ms)
        return await waiter.wait()

    async def wait_for_any_event(
        self, events: Iterable[EventT], max_wait_ms: float = 0
    ) -> bool:
        """Wait until any of ``events`` is emitted.

        The first event to fire detaches the listeners on all the others.

        Returns:
            True if an event was emitted, False if the time ran out
        """
        waiter = EventWaiter()
        for event in events:
            waiter.add_subscription(self.on(event, waiter.on_event))
        waiter.arm_timeout(max_wait_ms)
        return await waiter.wait()
