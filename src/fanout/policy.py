"""Host-side handling of the reserved error event.

EventRegistry.fire treats every event the same way, including "error".
These helpers layer the conventional policy on top: an error event that
nobody listens to is escalated instead of silently dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Hashable, Optional

from .exceptions import UnhandledErrorEvent
from .registry import EventRegistry

logger = logging.getLogger(__name__)


def fire_error(
    registry: EventRegistry,
    error: Any,
    *args: Any,
    error_event: Optional[str] = None,
    **kwargs: Any,
) -> None:
    """Fire ``error`` on the registry's error event.

    Raises:
        UnhandledErrorEvent: if no listener is registered for the error event.
            When ``error`` is an exception it becomes the ``__cause__``.
    """
    event = error_event or registry.config.error_event
    if registry.fire(event, error, *args, **kwargs):
        return
    logger.error("Unhandled '%s' event: %r", event, error)
    exc = UnhandledErrorEvent(event, error)
    if isinstance(error, BaseException):
        raise exc from error
    raise exc


def guard(registry: EventRegistry, event: Hashable, *args: Any, **kwargs: Any) -> bool:
    """Fire ``event``; a listener failure is re-routed to the error event.

    Dispatch of ``event`` still stops at the failing listener. The error
    listeners receive the exception followed by the event name. If there are
    none, UnhandledErrorEvent is raised.

    Returns:
        True if ``event`` had listeners.
    """
    try:
        return registry.fire(event, *args, **kwargs)
    except Exception as exc:
        logger.debug("Listener for %r failed; routing to error event", event)
        fire_error(registry, exc, event)
        return True


__all__ = ["fire_error", "guard"]
