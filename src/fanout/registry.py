from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, Dict, Hashable, List, Optional, Set

from .config import RegistryConfig

logger = logging.getLogger(__name__)

# A listener accepts whatever positional/keyword arguments fire() was given.
ListenerCallback = Callable[..., Any]
ListenerErrorHook = Callable[[Hashable, ListenerCallback, BaseException], None]


@dataclass(eq=False)
class Listener:
    """One registration of a callback against an event.

    Entries compare by identity so that duplicate registrations of the same
    callback stay independent.
    """

    callback: ListenerCallback
    once: bool = False
    consumed: bool = field(default=False, repr=False)


def _same_callback(registered: ListenerCallback, callback: ListenerCallback) -> bool:
    # Bound methods are rebuilt on each attribute access; they compare equal only for the same __self__
    return registered is callback or (inspect.ismethod(callback) and registered == callback)


class EventRegistry:
    """Threadsafe, synchronous publish/subscribe registry.

    Maps event identifiers to ordered listener lists. ``fire`` invokes every
    listener registered at the moment dispatch begins, in registration order,
    in the calling thread. Listeners run outside the internal lock so they may
    register, unregister or fire re-entrantly.
    """

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        on_listener_error: Optional[ListenerErrorHook] = None,
    ) -> None:
        self.config = config or RegistryConfig()
        self._on_listener_error = on_listener_error
        self._listeners: Dict[Hashable, List[Listener]] = {}
        self._warned: Set[Hashable] = set()
        self._lock = RLock()

    @classmethod
    def from_config(cls, **kwargs: Any) -> "EventRegistry":
        """Build a registry from config sources (defaults < YAML file < env)."""
        on_listener_error = kwargs.pop("on_listener_error", None)
        return cls(RegistryConfig.from_sources(**kwargs), on_listener_error=on_listener_error)

    # ------------------------ Registration ------------------------
    def register(self, event: Hashable, callback: ListenerCallback) -> None:
        """Append ``callback`` to the listeners of ``event``.

        The same callback may be registered more than once; each registration
        fires independently.
        """
        self._add(event, Listener(callback))

    def register_once(self, event: Hashable, callback: ListenerCallback) -> None:
        """Like :meth:`register`, but the listener is removed after it first fires."""
        self._add(event, Listener(callback, once=True))

    def _add(self, event: Hashable, entry: Listener) -> None:
        if not callable(entry.callback):
            raise TypeError(f"listener for {event!r} must be callable, got {type(entry.callback).__name__}")
        with self._lock:
            entries = self._listeners.setdefault(event, [])
            entries.append(entry)
            count = len(entries)
            logger.debug("Registered %s for event %r (once=%s)", entry.callback, event, entry.once)
            limit = self.config.max_listeners
            if limit and count > limit and event not in self._warned:
                self._warned.add(event)
                logger.warning(
                    "Possible listener leak: %d listeners registered for event %r (max_listeners=%d)",
                    count,
                    event,
                    limit,
                )

    # ------------------------ Removal ------------------------
    def unregister(self, event: Hashable, callback: ListenerCallback) -> bool:
        """Remove the first registration of ``callback`` for ``event``.

        Returns True if an entry was removed. Unknown events or callbacks are a no-op.
        """
        with self._lock:
            entries = self._listeners.get(event)
            if not entries:
                return False
            for index, entry in enumerate(entries):
                if _same_callback(entry.callback, callback):
                    del entries[index]
                    break
            else:
                return False
            if not entries:
                self._drop(event)
            logger.debug("Unregistered %s from event %r", callback, event)
            return True

    def unregister_all(self, event: Optional[Hashable] = None) -> None:
        """Remove every listener for ``event``, or for all events when omitted."""
        with self._lock:
            if event is None:
                self._listeners.clear()
                self._warned.clear()
                logger.debug("Cleared all listeners")
            elif event in self._listeners:
                self._drop(event)
                logger.debug("Cleared listeners for event %r", event)

    def _drop(self, event: Hashable) -> None:
        del self._listeners[event]
        self._warned.discard(event)

    def _claim(self, event: Hashable, entry: Listener) -> bool:
        """Mark a once-listener as used and detach it. False if already used."""
        with self._lock:
            if entry.consumed:
                return False
            entry.consumed = True
            entries = self._listeners.get(event)
            if entries is not None:
                for index, live in enumerate(entries):
                    if live is entry:
                        del entries[index]
                        break
                if not entries:
                    self._drop(event)
            return True

    # ------------------------ Dispatch ------------------------
    def fire(self, event: Hashable, *args: Any, isolate: Optional[bool] = None, **kwargs: Any) -> bool:
        """Synchronously call every listener of ``event`` with ``args``/``kwargs``.

        Args:
            event: Event identifier.
            *args: Positional payload, passed unmodified to each listener.
            isolate: Override ``config.isolate_errors`` for this call. When
                false (the default), the first listener exception propagates
                and the remaining listeners of this pass are skipped.
            **kwargs: Keyword payload, passed unmodified to each listener.
                The name ``isolate`` is reserved by this method and is never
                forwarded to listeners.

        Returns:
            True if the event had listeners, False otherwise.
        """
        with self._lock:
            snapshot = list(self._listeners.get(event, ()))
        if not snapshot:
            logger.debug("Fired %r with no listeners", event)
            return False
        if isolate is None:
            isolate = self.config.isolate_errors
        logger.debug("Firing %r to %d listeners", event, len(snapshot))
        for entry in snapshot:
            if entry.once and not self._claim(event, entry):
                continue
            if not isolate:
                entry.callback(*args, **kwargs)
                continue
            try:
                entry.callback(*args, **kwargs)
            except Exception as exc:
                logger.exception("Error in listener %s for event %r", entry.callback, event)
                if self._on_listener_error is not None:
                    self._on_listener_error(event, entry.callback, exc)
        return True

    emit = fire
    on = register
    once = register_once
    off = unregister

    # ------------------------ Introspection ------------------------
    def listener_count(self, event: Hashable) -> int:
        with self._lock:
            return len(self._listeners.get(event, ()))

    def listeners(self, event: Hashable) -> List[ListenerCallback]:
        """Return a copy of the callbacks registered for ``event``, in order."""
        with self._lock:
            return [entry.callback for entry in self._listeners.get(event, ())]

    def event_names(self) -> List[Hashable]:
        with self._lock:
            return list(self._listeners)

    def has_listeners(self, event: Hashable) -> bool:
        return self.listener_count(event) > 0

    def __contains__(self, event: Hashable) -> bool:
        return self.has_listeners(event)

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)

    def __repr__(self) -> str:
        with self._lock:
            counts = {event: len(entries) for event, entries in self._listeners.items()}
        return f"EventRegistry({counts!r})"


__all__ = ["EventRegistry", "Listener", "ListenerCallback", "ListenerErrorHook"]
