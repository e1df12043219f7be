import pytest

from fanout.config import RegistryConfig
from fanout.exceptions import UnhandledErrorEvent
from fanout.policy import fire_error, guard
from fanout.registry import EventRegistry


@pytest.fixture()
def registry() -> EventRegistry:
    return EventRegistry()


def test_fire_error_without_listener_escalates(registry: EventRegistry):
    cause = RuntimeError("disk full")

    with pytest.raises(UnhandledErrorEvent) as info:
        fire_error(registry, cause)

    assert info.value.event == "error"
    assert info.value.payload is cause
    assert info.value.__cause__ is cause


def test_fire_error_with_non_exception_payload(registry: EventRegistry):
    with pytest.raises(UnhandledErrorEvent) as info:
        fire_error(registry, "something odd")
    assert info.value.__cause__ is None
    assert "something odd" in str(info.value)


def test_fire_error_delivers_to_listeners(registry: EventRegistry):
    seen = []
    registry.register("error", lambda err, *rest: seen.append((err, rest)))

    fire_error(registry, "bad", 1, 2)

    assert seen == [("bad", (1, 2))]


def test_fire_error_uses_configured_event():
    registry = EventRegistry(RegistryConfig(error_event="failure"))
    seen = []
    registry.register("failure", seen.append)

    fire_error(registry, "x")
    with pytest.raises(UnhandledErrorEvent):
        fire_error(registry, "x", error_event="error")

    assert seen == ["x"]


def test_core_fire_does_not_special_case_error(registry: EventRegistry):
    assert registry.fire("error", RuntimeError("ignored")) is False


def test_guard_routes_listener_failure(registry: EventRegistry):
    calls = []
    errors = []

    def boom():
        raise ValueError("nope")

    registry.register("save", lambda: calls.append(1))
    registry.register("save", boom)
    registry.register("save", lambda: calls.append(3))
    registry.register("error", lambda exc, event: errors.append((type(exc), event)))

    assert guard(registry, "save") is True

    assert calls == [1]
    assert errors == [(ValueError, "save")]


def test_guard_unhandled_failure_escalates(registry: EventRegistry):
    registry.register("save", lambda: 1 / 0)

    with pytest.raises(UnhandledErrorEvent) as info:
        guard(registry, "save")

    assert isinstance(info.value.__cause__, ZeroDivisionError)


def test_guard_passes_through_without_failure(registry: EventRegistry):
    seen = []
    registry.register("save", seen.append)

    assert guard(registry, "save", "doc") is True
    assert guard(registry, "load") is False
    assert seen == ["doc"]
