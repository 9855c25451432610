class EventRegistryError(Exception):
    """Base class for errors raised by the event registry."""


class ReentrantDispatchError(EventRegistryError, RuntimeError):
    """Raised when a dispatch is triggered while listeners are running."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot call {operation} while listeners are running")
