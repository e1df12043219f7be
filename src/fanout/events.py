from __future__ import annotations

import logging
from enum import Enum
from importlib.resources import files as resource_files
from typing import Dict, Iterator, Mapping, Optional

import yaml

from .exceptions import ConfigError, UnknownEventName

logger = logging.getLogger(__name__)


class Events(str, Enum):
    """Conventional event names. Members compare equal to their string value."""

    ERROR = "error"
    DATA = "data"
    END = "end"
    CLOSE = "close"
    REQUEST = "request"
    LISTENING = "listening"
    GREET = "greet"

    # Events.GREET and "greet" must key the same listeners
    __hash__ = str.__hash__

    def __str__(self) -> str:
        return self.value


ERROR = Events.ERROR.value


class EventNames:
    """Immutable table of event-name constants.

    Attribute access returns the event name; a missing constant raises
    UnknownEventName instead of quietly producing a typo'd identifier:

        names = load_event_names()
        registry.register(names.GREET, handler)
    """

    def __init__(self, names: Mapping[str, str]) -> None:
        table: Dict[str, str] = {}
        for key, value in names.items():
            if not isinstance(value, str) or not value:
                raise ConfigError(f"Event name for {key!r} must be a non-empty string, got {value!r}")
            upper = str(key).upper()
            if upper in table:
                raise ConfigError(f"Event name key {key!r} collides with another key differing only by case")
            table[upper] = value
        object.__setattr__(self, "_names", table)

    def __getattr__(self, key: str) -> str:
        if key.startswith("_"):
            raise AttributeError(key)
        try:
            return self._names[key.upper()]
        except KeyError:
            raise UnknownEventName(f"No event name defined for {key!r}") from None

    def __setattr__(self, key: str, value: object) -> None:
        raise AttributeError("EventNames is read-only")

    def __iter__(self) -> Iterator[str]:
        return iter(self._names.values())

    def __contains__(self, name: object) -> bool:
        return name in self._names.values()

    def __len__(self) -> int:
        return len(self._names)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._names)

    def __repr__(self) -> str:
        return f"EventNames({self._names!r})"


def load_event_names(path: Optional[str] = None) -> EventNames:
    """Load an event-name table from YAML.

    If path is None, loads the embedded default resource at
    fanout/data/events.yaml.
    """
    if path is None:
        data = resource_files("fanout.data").joinpath("events.yaml").read_text(encoding="utf-8")
        logger.debug("Loaded embedded event names resource")
    else:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = f.read()
        except OSError as exc:
            raise ConfigError(f"Cannot read event names file {path}: {exc}") from exc
        logger.debug("Loaded event names from path: %s", path)

    try:
        raw = yaml.safe_load(data) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse event names YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError("Event names YAML must contain a mapping")
    names = EventNames(raw)
    logger.info("Event names: %s", sorted(names))
    return names


__all__ = ["Events", "ERROR", "EventNames", "load_event_names"]
