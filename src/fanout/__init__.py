"""
fanout package root.

An in-process, synchronous publish/subscribe registry. Create an
EventRegistry and pass it to whichever components publish or subscribe;
there is no implicit global instance.
"""

from .config import RegistryConfig
from .events import ERROR, EventNames, Events, load_event_names
from .exceptions import ConfigError, FanoutError, UnhandledErrorEvent, UnknownEventName
from .policy import fire_error, guard
from .registry import EventRegistry, Listener

__version__ = "0.1.0"

__all__ = [
    "ERROR",
    "ConfigError",
    "EventNames",
    "EventRegistry",
    "Events",
    "FanoutError",
    "Listener",
    "RegistryConfig",
    "UnhandledErrorEvent",
    "UnknownEventName",
    "fire_error",
    "guard",
    "load_event_names",
]
