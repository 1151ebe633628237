"""The state of a vehicle as reported by the connected-car service."""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, TypeVar

from homethings.kia.units import (
    Celsius,
    Coordinate,
    Kilometer,
    Meter,
    Percent,
    distance_to_km,
    temperature_to_celsius,
)

T = TypeVar("T")

_RANGE_POINTER = "/0/rangeByFuel/totalAvailableRange/value"
_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1


class DeserializationError(ValueError):
    """Raised when a service response does not have the expected shape."""


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise DeserializationError(f"expected an object for {what}")
    return data


def _field(data: Mapping[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise DeserializationError(f"missing field `{key}`") from None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise DeserializationError(f"invalid type for field `{key}`: expected a boolean")
    return value


def _unsigned(value: Any, key: str, maximum: int) -> int:
    if not _is_int(value) or not 0 <= value <= maximum:
        raise DeserializationError(
            f"invalid value for field `{key}`: expected an unsigned integer"
        )
    return value


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DeserializationError(f"invalid type for field `{key}`: expected a number")
    return float(value)


def _decode(convert: Callable[[Any], T], value: Any, key: str) -> T:
    try:
        return convert(value)
    except DeserializationError as error:
        raise DeserializationError(f"field `{key}`: {error}") from error
    except (ValueError, KeyError, TypeError) as error:
        raise DeserializationError(f"invalid value for field `{key}`: {error}") from error


def _flag(data: Mapping[str, Any], key: str) -> bool:
    return _decode(int_to_bool, _field(data, key), key)


def int_to_bool(value: Any) -> bool:
    """A 32-bit integer flag: anything but zero is true."""
    if not _is_int(value) or not _I32_MIN <= value <= _I32_MAX:
        raise DeserializationError(f"expected a 32-bit integer, got {value!r}")
    return value != 0


def parse_range(value: Any) -> int:
    """The total available range, found at ``/0/rangeByFuel/totalAvailableRange/value``."""
    current = value
    for token in _RANGE_POINTER.split("/")[1:]:
        if isinstance(current, Mapping) and token in current:
            current = current[token]
        elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
            current = current[int(token)]
        else:
            raise DeserializationError(f"missing field `{_RANGE_POINTER}`")
    if not _is_int(current) or not 0 <= current <= _U64_MAX:
        raise DeserializationError("invalid value: a number that is not a `u64`, expected a `u64`")
    return current & _U32_MAX


def parse_charging_duration(value: Any) -> timedelta:
    """The estimated duration of the current charge, given in minutes under ``atc``."""
    remaining = _mapping(value, "a remaining time")
    pair = _mapping(_field(remaining, "atc"), "an estimated charging duration")
    minutes = _unsigned(_field(pair, "value"), "value", _U64_MAX)
    return timedelta(seconds=minutes * 60)


@dataclass
class Doors:
    is_front_left_opened: bool
    is_front_right_opened: bool
    is_back_left_opened: bool
    is_back_right_opened: bool

    @classmethod
    def from_json(cls, data: Any) -> Doors:
        data = _mapping(data, "doors")
        return cls(
            is_front_left_opened=_flag(data, "frontLeft"),
            is_front_right_opened=_flag(data, "frontRight"),
            is_back_left_opened=_flag(data, "backLeft"),
            is_back_right_opened=_flag(data, "backRight"),
        )


@dataclass
class Windows:
    is_front_left_opened: bool
    is_front_right_opened: bool
    is_back_left_opened: bool
    is_back_right_opened: bool

    @classmethod
    def from_json(cls, data: Any) -> Windows:
        data = _mapping(data, "windows")
        return cls(
            is_front_left_opened=_flag(data, "frontLeft"),
            is_front_right_opened=_flag(data, "frontRight"),
            is_back_left_opened=_flag(data, "backLeft"),
            is_back_right_opened=_flag(data, "backRight"),
        )


@dataclass
class Battery:
    is_charging: bool
    state_of_charge: Percent
    remaining_range: int
    estimated_charging_duration: timedelta

    @classmethod
    def from_json(cls, data: Any) -> Battery:
        data = _mapping(data, "a battery status")
        charge = _unsigned(_field(data, "batteryStatus"), "batteryStatus", _U64_MAX)
        return cls(
            is_charging=_bool(_field(data, "batteryCharge"), "batteryCharge"),
            state_of_charge=Percent(charge),
            remaining_range=_decode(parse_range, _field(data, "drvDistance"), "drvDistance"),
            estimated_charging_duration=_decode(
                parse_charging_duration, _field(data, "remainTime2"), "remainTime2"
            ),
        )


@dataclass
class Status:
    battery: Battery
    doors: Doors
    windows: Windows
    targeted_temperature: Celsius
    is_air_conditionning_enabled: bool
    is_engine_running: bool
    is_locked: bool
    is_trunk_opened: bool
    is_frunk_opened: bool
    is_defrost_enabled: bool
    is_steer_wheel_heat_enabled: bool
    is_side_back_window_heat_enabled: bool
    is_hazard_detected: bool
    has_smart_key_battery_issue: bool
    has_washer_fluid_issue: bool
    has_break_oil_issue: bool
    has_tail_lamp_issue: bool

    @classmethod
    def from_json(cls, data: Any) -> Status:
        data = _mapping(data, "a vehicle status")

        def flag(key: str) -> bool:
            return _bool(_field(data, key), key)

        return cls(
            battery=Battery.from_json(_field(data, "evStatus")),
            doors=Doors.from_json(_field(data, "doorOpen")),
            windows=Windows.from_json(_field(data, "windowOpen")),
            targeted_temperature=_decode(
                temperature_to_celsius, _field(data, "airTemp"), "airTemp"
            ),
            is_air_conditionning_enabled=flag("airCtrlOn"),
            is_engine_running=flag("engine"),
            is_locked=flag("doorLock"),
            is_trunk_opened=flag("trunkOpen"),
            is_frunk_opened=flag("hoodOpen"),
            is_defrost_enabled=flag("defrost"),
            is_steer_wheel_heat_enabled=_flag(data, "steerWheelHeat"),
            is_side_back_window_heat_enabled=_flag(data, "sideBackWindowHeat"),
            is_hazard_detected=_flag(data, "hazardStatus"),
            has_smart_key_battery_issue=flag("smartKeyBatteryWarning"),
            has_washer_fluid_issue=flag("washerFluidStatus"),
            has_break_oil_issue=flag("breakOilStatus"),
            has_tail_lamp_issue=_flag(data, "tailLampStatus"),
        )


@dataclass
class Coordinates:
    latitude: Coordinate
    longitude: Coordinate
    altitude: Meter | None = None

    @classmethod
    def from_json(cls, data: Any) -> Coordinates:
        data = _mapping(data, "coordinates")
        altitude = data.get("alt")
        return cls(
            latitude=Coordinate(_number(_field(data, "lat"), "lat")),
            longitude=Coordinate(_number(_field(data, "lon"), "lon")),
            altitude=None if altitude is None else Meter(_number(altitude, "alt")),
        )


@dataclass
class PrecisionDilution:
    """Dilution of precision of the position fix."""

    horizontal: int
    position: int

    @classmethod
    def from_json(cls, data: Any) -> PrecisionDilution:
        data = _mapping(data, "a precision dilution")
        return cls(
            horizontal=_unsigned(_field(data, "hdop"), "hdop", _U32_MAX),
            position=_unsigned(_field(data, "pdop"), "pdop", _U32_MAX),
        )


@dataclass
class Location:
    coordinates: Coordinates
    precision_dilution: PrecisionDilution | None = None

    @classmethod
    def from_json(cls, data: Any) -> Location:
        data = _mapping(data, "a location")
        accuracy = data.get("accuracy")
        return cls(
            coordinates=Coordinates.from_json(_field(data, "coord")),
            precision_dilution=(
                None if accuracy is None else PrecisionDilution.from_json(accuracy)
            ),
        )


@dataclass
class State:
    status: Status
    location: Location
    odometer: Kilometer

    @classmethod
    def from_json(cls, data: Any) -> State:
        data = _mapping(data, "a vehicle state")
        return cls(
            status=Status.from_json(_field(data, "vehicleStatus")),
            location=Location.from_json(_field(data, "vehicleLocation")),
            odometer=_decode(distance_to_km, _field(data, "odometer"), "odometer"),
        )


def parse_state_response(text: str) -> State:
    """Parse the JSON answer to a latest-status request into a vehicle state."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as error:
        raise DeserializationError(f"invalid JSON: {error}") from error
    message = _mapping(_field(_mapping(document, "a response"), "resMsg"), "resMsg")
    return State.from_json(_field(message, "vehicleStatusInfo"))