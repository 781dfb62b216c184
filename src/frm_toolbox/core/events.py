"""EventBus — Observer carrying conversion progress, report lines and completion."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

logger = logging.getLogger(__name__)

# Type alias for event handler callbacks.
EventHandler = Any  # Callable[..., None], relaxed for mypy

PROGRESS = "progress"
COMPLETED = "completed"
LOG = "log"


class EventBus:
    """Publish/subscribe bus between the tools and whoever drives them.

    Tools report through the typed helpers:

    * ``progress(tool, current, total, message)`` once per written file,
    * ``log(tool, message)`` for report lines meant for the user,
    * ``completed(tool, message)`` when a run finishes.

    Handlers receive those values as keyword arguments.  Raw ``emit`` stays
    available for ad-hoc events.
    """

    def __init__(self) -> None:
        """Initialise an empty event bus."""
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event: str, handler: EventHandler) -> None:
        """Register a handler for a given event type.

        Args:
            event: The event name to subscribe to (e.g. ``"progress"``).
            handler: A callable invoked with the event's keyword arguments.
        """
        self._handlers[event].append(handler)

    def emit(self, event: str, **kwargs: Any) -> None:
        """Fire an event, calling all subscribed handlers.

        A failing handler is logged and does not stop the remaining ones.
        """
        for handler in self._handlers.get(event, []):
            try:
                handler(**kwargs)
            except Exception:
                logger.exception("Error in handler %r for event %r", handler, event)

    # ── typed helpers ──────────────────────────────────────────
    def progress(self, tool: str, current: int, total: int, message: str) -> None:
        """Report that item *current* of *total* is done."""
        logger.debug("%s [%d/%d] %s", tool, current, total, message)
        self.emit(PROGRESS, tool=tool, current=current, total=total, message=message)

    def log(self, tool: str, message: str) -> None:
        """Publish one user-facing report line."""
        self.emit(LOG, tool=tool, message=message)

    def completed(self, tool: str, message: str) -> None:
        """Signal the end of a tool run."""
        logger.info("%s: %s", tool, message)
        self.emit(COMPLETED, tool=tool, message=message)
