class FanoutError(Exception):
    """Base exception for the fanout package."""


class ConfigError(FanoutError, ValueError):
    """Raised when registry configuration cannot be loaded or validated."""


class UnknownEventName(FanoutError, AttributeError):
    """Raised when an event-name constant is looked up but not defined."""


class UnhandledErrorEvent(FanoutError):
    """Raised when the error event is fired and nothing is listening for it."""

    def __init__(self, event: str, payload: object = None) -> None:
        self.event = event
        self.payload = payload
        super().__init__(f"Unhandled '{event}' event: {payload!r}")
