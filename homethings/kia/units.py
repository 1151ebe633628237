"""Units found in the vehicle's status reports."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping

from homethings.alfen.units import Quantity

_MILE_IN_KILOMETERS = 1.609344
_TEMPERATURE_START = 14.0
_TEMPERATURE_END = 30.0
_TEMPERATURE_STEP = 0.5


@dataclass(frozen=True, order=True)
class Percent:
    value: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value < 0:
            raise ValueError(f"invalid percentage: {self.value!r}")

    def __repr__(self) -> str:
        return f"{self.value}%"

    __str__ = __repr__

    def __int__(self) -> int:
        return self.value


class Coordinate(Quantity):
    symbol = "°"


class Meter(Quantity):
    symbol = "m"


class Kilometer(Quantity):
    symbol = "km"


class Celsius(Quantity):
    symbol = "°C"


class _DistanceUnit(IntEnum):
    KILOMETERS = 1
    MILES = 3


class _TemperatureUnit(IntEnum):
    CELSIUS = 0
    FAHRENHEIT = 1


def _pair(data: Mapping[str, Any]) -> tuple[Any, Any]:
    if not isinstance(data, Mapping):
        raise ValueError("expected an object with `value` and `unit`")
    try:
        return data["value"], data["unit"]
    except KeyError as error:
        raise ValueError(f"missing field `{error.args[0]}`") from error


def distance_to_km(data: Mapping[str, Any]) -> Kilometer:
    """Convert a ``{"value": ..., "unit": ...}`` distance to kilometres."""
    value, unit = _pair(data)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"invalid distance: {value!r}")
    match _DistanceUnit(unit):
        case _DistanceUnit.KILOMETERS:
            return Kilometer(value)
        case _DistanceUnit.MILES:
            return Kilometer(value * _MILE_IN_KILOMETERS)


def temperature_to_celsius(data: Mapping[str, Any]) -> Celsius:
    """Convert a hexadecimal temperature index such as ``"0AH"`` to Celsius.

    The index counts half-degree steps from 14 and stops once 30 has been passed.
    """
    text, unit = _pair(data)
    if not isinstance(text, str):
        raise ValueError(f"invalid temperature index: {text!r}")
    unit = _TemperatureUnit(unit)
    index = int(text.rstrip("H"), 16)
    # The count of steps is bounded by the first one that takes the value past the end.
    max_steps = int((_TEMPERATURE_END - _TEMPERATURE_START) / _TEMPERATURE_STEP) + 1
    temperature = _TEMPERATURE_START + _TEMPERATURE_STEP * min(max(index, 0), max_steps)
    match unit:
        case _TemperatureUnit.CELSIUS:
            return Celsius(temperature)
        case _TemperatureUnit.FAHRENHEIT:
            return Celsius((temperature - 32.0) / 1.8)