import logging
import queue

import pytest

from devicesdk.commandvalue import ValueType, new_uint8_value
from devicesdk.models import (
    AsyncValues,
    CommandRequest,
    Event,
    ProtocolDiscovery,
    ProtocolDriver,
    Reading,
)


class _EchoDriver(ProtocolDriver):
    def __init__(self):
        self.async_queue = None
        self.written = []
        self.stopped_with = None

    def initialize(self, logger, async_queue):
        self.async_queue = async_queue

    def handle_read_commands(self, device_name, protocols, reqs):
        return [new_uint8_value(req.device_resource_name, 0, 7) for req in reqs]

    def handle_write_commands(self, device_name, protocols, reqs, params):
        self.written.extend(zip((r.device_resource_name for r in reqs), params))

    def stop(self, force):
        self.stopped_with = force


class _Finder(ProtocolDiscovery):
    def discover(self):
        return [CommandRequest("device-a")]


def test_event_without_readings_has_no_binary_value():
    assert Event(device="dev").has_binary_value() is False


def test_event_with_only_text_readings_has_no_binary_value():
    event = Event(device="dev", readings=[Reading(name="a", value="1"), Reading(name="b", value="2")])
    assert event.has_binary_value() is False


def test_event_with_one_binary_reading_has_binary_value():
    event = Event(
        device="dev",
        readings=[Reading(name="a", value="1"), Reading(name="b", binary_value=b"\x01\x02")],
    )
    assert event.has_binary_value() is True


def test_async_values_default_lists_are_independent():
    first = AsyncValues("dev-1")
    second = AsyncValues("dev-2")
    first.command_values.append(new_uint8_value("r", 0, 1))
    assert second.command_values == []
    assert len(first.command_values) == 1


def test_command_request_holds_fields():
    req = CommandRequest("temperature", {"register": "3"}, ValueType.INT16)
    assert req.device_resource_name == "temperature"
    assert req.attributes == {"register": "3"}
    assert req.type == ValueType.INT16


def test_command_request_default_attributes_are_independent():
    a = CommandRequest("x")
    b = CommandRequest("y")
    a.attributes["k"] = "v"
    assert b.attributes == {}


def test_protocol_driver_cannot_be_instantiated():
    with pytest.raises(TypeError):
        ProtocolDriver()

    class Partial(ProtocolDriver):
        def stop(self, force):
            pass

    with pytest.raises(TypeError):
        Partial()


def test_protocol_discovery_cannot_be_instantiated():
    with pytest.raises(TypeError):
        ProtocolDiscovery()

    found = _Finder().discover()
    assert [req.device_resource_name for req in found] == ["device-a"]
    assert found[0].attributes == {}


def test_concrete_driver_round_trip():
    driver = _EchoDriver()
    q = queue.Queue()
    driver.initialize(logging.getLogger("test"), q)
    reqs = [CommandRequest("a", type=ValueType.UINT8), CommandRequest("b", type=ValueType.UINT8)]
    values = driver.handle_read_commands("dev", {}, reqs)
    assert [v.device_resource_name for v in values] == ["a", "b"]
    assert [v.uint8_value() for v in values] == [7, 7]

    driver.handle_write_commands("dev", {}, reqs, values)
    assert [name for name, _ in driver.written] == ["a", "b"]

    q.put(AsyncValues("dev", values))
    pushed = driver.async_queue.get_nowait()
    assert pushed.device_name == "dev"
    assert pushed.command_values == values

    driver.stop(True)
    assert driver.stopped_with is True