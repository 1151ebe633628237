"""The state of the charging station: identification, status and its socket."""

from __future__ import annotations

import dataclasses
import json
import math
import struct
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from homethings.alfen.units import Amp, Degree, Hertz, Quantity, Volt, Watt, WattHour

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class StationInformation:
    name: str = ""
    manufacturer: str = ""
    platform_type: str = ""
    serial_number: str = ""
    firmware_version: str = ""
    date: datetime = _EPOCH
    uptime: timedelta = timedelta(0)


@dataclass
class StationStatus:
    max_current: Amp = field(default_factory=Amp)
    temperature: Degree = field(default_factory=Degree)
    is_ocpp_connected: bool = False
    number_of_sockets: int = 0


@dataclass
class SocketPhase:
    voltage: Volt = field(default_factory=Volt)
    current: Amp = field(default_factory=Amp)


class PhaseNumber(Enum):
    UNKNOWN = "Unknown"
    ONE = "One"
    THREE = "Three"

    def as_u8(self) -> int:
        """The number of phases, 0 when unknown."""
        return {PhaseNumber.UNKNOWN: 0, PhaseNumber.ONE: 1, PhaseNumber.THREE: 3}[self]


class SocketAvailability(Enum):
    UNKNOWN = "Unknown"
    INOPERATIVE = "Inoperative"
    OPERATIVE = "Operative"


class SocketStatusKind(Enum):
    UNKNOWN = "Unknown"
    DISCONNECTED = "Disconnected"
    CONNECTED = "Connected"
    CHARGING = "Charging"
    ERROR = "Error"


@dataclass(frozen=True)
class SocketStatus:
    """The socket's status; ``pwm_signal`` only applies when connected."""

    kind: SocketStatusKind = SocketStatusKind.UNKNOWN
    pwm_signal: bool = False

    def __post_init__(self) -> None:
        if self.pwm_signal and self.kind is not SocketStatusKind.CONNECTED:
            raise ValueError("a PWM signal only applies to a connected socket")


@dataclass
class SocketSession:
    max_current: Amp = field(default_factory=Amp)
    actual_applied_max_current: Amp = field(default_factory=Amp)
    remaining_time_before_fallback_to_safe_current: int = 0


@dataclass
class Socket:
    availability: SocketAvailability = SocketAvailability.UNKNOWN
    status: SocketStatus = field(default_factory=SocketStatus)
    number_of_phases: PhaseNumber = PhaseNumber.UNKNOWN
    l1: SocketPhase = field(default_factory=SocketPhase)
    l2: SocketPhase = field(default_factory=SocketPhase)
    l3: SocketPhase = field(default_factory=SocketPhase)
    power: Watt = field(default_factory=Watt)
    frequency: Hertz = field(default_factory=Hertz)
    total_delivered_energy: WattHour = field(default_factory=WattHour)
    session: SocketSession = field(default_factory=SocketSession)


@dataclass
class State:
    station_information: StationInformation = field(default_factory=StationInformation)
    station_status: StationStatus = field(default_factory=StationStatus)
    socket: Socket = field(default_factory=Socket)

    def to_json(self) -> str:
        """Serialize the whole state as compact JSON."""
        return json.dumps(_jsonable(self), ensure_ascii=False, separators=(",", ":"))


def _single(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _shortest_single(value: float) -> float | None:
    """The double whose text is the shortest that reads back to ``value`` in single precision."""
    if math.isnan(value) or math.isinf(value):
        return None
    for digits in range(1, 10):
        candidate = float(f"{value:.{digits}g}")
        if _single(candidate) == value:
            return candidate
    return value


def _jsonable(value: Any) -> Any:
    if isinstance(value, Quantity):
        return _shortest_single(value.value)
    if isinstance(value, SocketStatus):
        if value.kind is SocketStatusKind.CONNECTED:
            return {"Connected": {"pwm_signal": value.pwm_signal}}
        return value.kind.value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, timedelta):
        microseconds = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
        seconds, rest = divmod(microseconds, 1_000_000)
        return {"secs": seconds, "nanos": rest * 1000}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            item.name: _jsonable(getattr(value, item.name))
            for item in dataclasses.fields(value)
        }
    return value