import json
import socket

import pytest

from homethings.lights.command import Action, Subject
from homethings.lights.thing import PulseForwarder, make_light, make_lights
from homethings.lights.writer import encode
from homethings.webthing import PropertyError, ThingServer


@pytest.fixture
def controller():
    server = socket.create_server(("127.0.0.1", 0))
    server.settimeout(5)
    with server:
        yield server


def _closed_address():
    probe = socket.socket()
    probe.bind(("127.0.0.1", 0))
    address = probe.getsockname()
    probe.close()
    return address


def _received(server):
    connection, _ = server.accept()
    with connection:
        connection.settimeout(5)
        return connection.recv(16)


def test_make_light_description():
    thing = make_light(("127.0.0.1", 23), Subject.LIVING_ROOM)
    assert thing.id == f"urn:dev:ops:light-{Subject.LIVING_ROOM.value}"
    assert thing.title == "Espace de vie"
    assert thing.types == ["Light"]
    prop = thing.find_property("pulse")
    assert prop.value is False
    assert prop.metadata["type"] == "boolean"
    assert prop.metadata["@type"] == "OnOffProperty"


def test_make_lights_covers_every_subject_in_order():
    things = make_lights(("127.0.0.1", 23))
    assert [thing.title for thing in things] == [s.label for s in Subject]
    assert len({thing.id for thing in things}) == len(Subject)


def test_forwarder_sends_pulse_and_returns_value(controller, capsys):
    forwarder = PulseForwarder(controller.getsockname(), Subject.KITCHEN)
    assert forwarder(True) is True
    assert _received(controller) == encode(Subject.KITCHEN, Action.PULSE)
    assert "Sending a Pulse to Kitchen (value `true`)" in capsys.readouterr().out


def test_setting_pulse_property_sends_signal(controller):
    thing = make_light(controller.getsockname(), Subject.HALL)
    thing.find_property("pulse").set_value(True)
    assert thing.find_property("pulse").value is True
    assert _received(controller) == encode(Subject.HALL, Action.PULSE)


def test_put_through_server(controller):
    things = make_lights(controller.getsockname())
    server = ThingServer(things, "Lights")
    status, payload = server.handle(
        "PUT", f"/{Subject.BATHROOM.value}/properties/pulse", json.dumps({"pulse": True})
    )
    assert (status, payload) == (200, {"pulse": True})
    assert _received(controller) == encode(Subject.BATHROOM, Action.PULSE)


def test_forwarder_reports_unreachable_light():
    forwarder = PulseForwarder(_closed_address(), Subject.HALL)
    with pytest.raises(PropertyError, match="Failed to connect to the light"):
        forwarder(True)


def test_server_answers_error_for_unreachable_light():
    server = ThingServer(make_lights(_closed_address()), "Lights")
    status, payload = server.handle("PUT", "/0/properties/pulse", '{"pulse": true}')
    assert status == 400
    assert payload == {"error": "Failed to connect to the light"}
    assert server.things[0].find_property("pulse").value is False


def test_invalid_pulse_value_is_rejected_before_sending():
    thing = make_light(_closed_address(), Subject.HALL)
    with pytest.raises(PropertyError, match="Invalid property value"):
        thing.find_property("pulse").set_value("on")