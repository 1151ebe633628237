"""Physical quantities measured by the charging station, held at single precision."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar


def _to_f32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _format_f32(value: float) -> str:
    """Shortest decimal text that reads back to the same single-precision value."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = repr(value)
    for digits in range(1, 10):
        candidate = f"{value:.{digits}g}"
        if _to_f32(float(candidate)) == value:
            text = candidate
            break
    return format(Decimal(text), "f")


@dataclass(frozen=True, order=True)
class Quantity:
    """A single-precision value printed with its unit symbol."""

    value: float = 0.0
    symbol: ClassVar[str] = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _to_f32(float(self.value)))

    def __str__(self) -> str:
        return f"{_format_f32(self.value)}{self.symbol}"

    __repr__ = __str__

    def __float__(self) -> float:
        return self.value


class Degree(Quantity):
    symbol = "°C"


class Amp(Quantity):
    symbol = "A"


class Volt(Quantity):
    symbol = "V"


class Watt(Quantity):
    symbol = "W"


class WattHour(Quantity):
    symbol = "Wh"


class Hertz(Quantity):
    symbol = "Hz"