"""Exposing the charging station as a Web Thing, refreshed every ten seconds."""

from __future__ import annotations

import math
import struct
import threading
import time
from typing import Any

from homethings.alfen import modbus, reader
from homethings.alfen.state import SocketAvailability, SocketStatusKind, State
from homethings.alfen.units import Quantity
from homethings.webthing import Property, Thing, ThingServer, format_start_message

_REFRESH_INTERVAL = 10

_PROPERTIES: tuple[tuple[str, Any, dict[str, Any]], ...] = (
    ("station_temperature", 0, {
        "@type": "TemperatureProperty", "title": "Station inside temperature",
        "type": "integer",
        "description": "The temperature from inside the charging station",
        "unit": "celsius", "readOnly": True,
    }),
    ("max_current", 0, {
        "@type": "CurrentProperty", "title": "Max current for the station",
        "type": "integer",
        "description": "The maximum current the station can deliver",
        "unit": "ampere", "readOnly": True,
    }),
    ("socket_availability", False, {
        "@type": "BooleanProperty", "title": "Socket availability", "type": "boolean",
        "description": "Whether the socket available", "readOnly": True,
    }),
    ("socket_charging", False, {
        "@type": "BooleanProperty", "title": "Socket charging", "type": "boolean",
        "description": "Whether the socket is charging the car", "readOnly": True,
    }),
    ("socket_number_of_phases", 3, {
        "@type": "BooleanProperty", "title": "Socket charging", "type": "integer",
        "description": "Number of phases the socket is using", "readOnly": True,
        "minimum": 1, "maximum": 3,
    }),
    ("socket_power", 0, {
        "@type": "InstantaneousPowerProperty", "title": "Socket total power",
        "type": "integer", "description": "Total power given by the socket",
        "unit": "watt", "readOnly": True,
    }),
    ("socket_frequency", 50, {
        "@type": "FrequencyProperty", "title": "Socket frequency", "type": "hertz",
        "description": "Frequency of the socket", "readOnly": True,
    }),
    ("socket_current", 0, {
        "@type": "CurrentProperty", "title": "Socket current", "type": "integer",
        "description": "Actual applied max current of the socket",
        "unit": "ampere", "readOnly": True,
    }),
)


def make_charging_station() -> Thing:
    thing = Thing(
        id="urn:dev:ops:car-charging-station",
        title="Car Charging Station",
        types=["EnergyMonitor", "TemperatureSensor"],
    )
    for name, value, metadata in _PROPERTIES:
        thing.add_property(Property(name, value, dict(metadata)))
    return thing


def _single(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _number(value: float) -> float | None:
    """The shortest double that reads back to the single-precision ``value``."""
    if math.isnan(value) or math.isinf(value):
        return None
    for digits in range(1, 10):
        candidate = float(f"{value:.{digits}g}")
        if _single(candidate) == value:
            return candidate
    return value


def _quantity(quantity: Quantity) -> float | None:
    return _number(quantity.value)


def _round_half_away(value: float) -> float | None:
    if math.isnan(value) or math.isinf(value):
        return None
    return math.copysign(math.floor(abs(value) + 0.5), value)


def update_charging_station(thing: Thing, state: State) -> None:
    """Push the station status and the socket state into the thing."""
    status = state.station_status
    socket_state = state.socket
    values = {
        "station_temperature": _quantity(status.temperature),
        "max_current": _quantity(status.max_current),
        "socket_availability": socket_state.availability is SocketAvailability.OPERATIVE,
        "socket_charging": socket_state.status.kind is SocketStatusKind.CHARGING,
        "socket_number_of_phases": socket_state.number_of_phases.as_u8(),
        "socket_power": _round_half_away(socket_state.power.value),
        "socket_frequency": _quantity(socket_state.frequency),
        "socket_current": _quantity(socket_state.session.actual_applied_max_current),
    }
    for name, value in values.items():
        thing.update_property(name, value)


def _poll(address: tuple[str, int], thing: Thing) -> None:
    """Refresh the thing until the station cannot be reached any more."""
    while True:
        try:
            client = modbus.connect(address)
        except OSError:
            return
        with client:
            try:
                state = reader.read(client)
            except (OSError, ValueError):
                state = State()
        update_charging_station(thing, state)
        time.sleep(_REFRESH_INTERVAL)


def run(address: tuple[str, int], port: int | None) -> None:
    """Serve the charging station as a Web Thing."""
    charging_station = make_charging_station()

    threading.Thread(
        target=_poll,
        args=(address, charging_station),
        name="alfen-poller",
        daemon=True,
    ).start()

    print(format_start_message(port))
    ThingServer([charging_station], "Alfen", port).start()