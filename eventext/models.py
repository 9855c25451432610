from pydantic import BaseModel, Field

from .types import Listener


class ListenerRegistration(BaseModel):
    """Runtime record of a listener identity and its attachments."""

    model_config = {"arbitrary_types_allowed": True}

    listener_id: int = Field(..., ge=0, description="Listener identity")
    callback: Listener = Field(..., description="Callable invoked on dispatch")
    attachment_count: int = Field(
        default=0, ge=0, description="Number of events referencing this listener"
    )

    def matches(self, callback: Listener) -> bool:
        """Whether this registration wraps ``callback``.

        Bound methods compare equal when they share the same instance and
        function, so ``==`` is used instead of ``is``. Wrappers created by
        ``once`` expose the original callable through ``__wrapped__``.
        """
        if self.callback == callback:
            return True
        return getattr(self.callback, "__wrapped__", None) == callback
