import copy
import pickle
from pathlib import Path

import pytest

from fanout.events import ERROR, EventNames, Events, load_event_names
from fanout.exceptions import ConfigError, UnknownEventName
from fanout.registry import EventRegistry


def test_error_constant():
    assert ERROR == "error"
    assert Events.ERROR == "error"
    assert str(Events.GREET) == "greet"


def test_enum_member_and_string_share_listeners():
    registry = EventRegistry()
    calls = []
    registry.register(Events.GREET, lambda: calls.append("enum"))
    registry.register("greet", lambda: calls.append("str"))

    registry.fire("greet")
    registry.fire(Events.GREET)

    assert calls == ["enum", "str", "enum", "str"]
    assert registry.listener_count("greet") == 2


def test_default_event_names_resource():
    names = load_event_names()

    assert names.GREET == "greet"
    assert names.error == "error"
    assert "data" in names
    assert set(names) >= {e.value for e in Events}
    assert len(names) == len(names.as_dict())


def test_unknown_name_raises():
    names = EventNames({"greet": "greet"})
    with pytest.raises(UnknownEventName):
        names.GRET
    assert not hasattr(names, "missing")


def test_event_names_are_read_only():
    names = EventNames({"greet": "greet"})
    with pytest.raises(AttributeError):
        names.GREET = "other"


def test_load_event_names_from_path(tmp_path: Path):
    fp = tmp_path / "events.yaml"
    fp.write_text("user_created: user.created\norder_paid: order.paid\n", encoding="utf-8")

    names = load_event_names(str(fp))

    assert names.USER_CREATED == "user.created"
    assert list(names) == ["user.created", "order.paid"]


@pytest.mark.parametrize("content", ["- a\n- b\n", "greet: ''\n", "greet: 3\n"])
def test_invalid_event_names_raise(tmp_path: Path, content: str):
    fp = tmp_path / "events.yaml"
    fp.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_event_names(str(fp))


def test_missing_event_names_file_raises_config_error(tmp_path: Path):
    with pytest.raises(ConfigError):
        load_event_names(str(tmp_path / "absent.yaml"))


def test_case_colliding_keys_raise():
    with pytest.raises(ConfigError):
        EventNames({"greet": "greet", "GREET": "hello"})


def test_copy_and_pickle_round_trip():
    names = EventNames({"greet": "greet"})

    clone = copy.copy(names)
    restored = pickle.loads(pickle.dumps(names))

    assert clone.GREET == "greet"
    assert restored.GREET == "greet"
    assert not hasattr(names, "_missing")
