"""Reading the charging station's state from its holding registers."""

from __future__ import annotations

import math
import struct
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Protocol, TypeVar

from homethings.alfen.modbus import (
    DATE_DAY,
    DATE_MONTH,
    DATE_YEAR,
    FIRMWARE_VERSION,
    MANUFACTURER,
    NAME,
    NUMBER_OF_SOCKETS,
    OCPP_STATE,
    PLATFORM_TYPE,
    PRODUCT_IDENTIFICATION_SLAVE,
    SINGLE_SOCKET_SLAVE,
    SOCKET_ACTUAL_APPLIED_MAX_CURRENT,
    SOCKET_AVAILABILITY,
    SOCKET_FREQUENCY,
    SOCKET_L1_CURRENT,
    SOCKET_L1_VOLTAGE,
    SOCKET_L2_CURRENT,
    SOCKET_L2_VOLTAGE,
    SOCKET_L3_CURRENT,
    SOCKET_L3_VOLTAGE,
    SOCKET_MAX_CURRENT,
    SOCKET_MAX_CURRENT_VALID_TIME,
    SOCKET_NUMBER_OF_PHASES,
    SOCKET_POWER_SUM,
    SOCKET_REAL_ENERGY_DELIVERED_SUM,
    SOCKET_STATUS,
    STATION_ACTIVE_MAX_CURRENT,
    STATION_SERIAL_NUMBER,
    STATION_STATUS_SLAVE,
    TEMPERATURE,
    TIME_HOUR,
    TIME_MINUTE,
    TIME_SECOND,
    TIMEZONE,
)
from homethings.alfen.state import (
    PhaseNumber,
    Socket,
    SocketAvailability,
    SocketPhase,
    SocketSession,
    SocketStatus,
    SocketStatusKind,
    State,
    StationInformation,
    StationStatus,
)
from homethings.alfen.units import Amp, Degree, Hertz, Volt, Watt, WattHour

T = TypeVar("T")


class RegisterSource(Protocol):
    def read_holding_registers(self, slave: int, address: int, count: int) -> list[int]: ...


def _require(registers: Sequence[int], count: int) -> list[int]:
    if len(registers) < count:
        raise ValueError(f"expected at least {count} registers, got {len(registers)}")
    return list(registers[:count])


def _native_bytes(registers: Sequence[int]) -> bytes:
    # Registers laid out in memory as little-endian words.
    return struct.pack(f"<{len(registers)}H", *registers)


def decode_u16(registers: Sequence[int]) -> int:
    return _require(registers, 1)[0]


def decode_i16(registers: Sequence[int]) -> int:
    return struct.unpack("<h", struct.pack("<H", _require(registers, 1)[0]))[0]


def decode_u32(registers: Sequence[int]) -> int:
    """Two registers, each taken as little-endian bytes, read as a big-endian integer."""
    return int.from_bytes(_native_bytes(_require(registers, 2)), "big")


def decode_u64(registers: Sequence[int]) -> int:
    """Four registers, each taken as little-endian bytes, read as a big-endian integer."""
    return int.from_bytes(_native_bytes(_require(registers, 4)), "big")


def decode_f32(registers: Sequence[int]) -> float:
    """A single-precision float, most significant register first."""
    high, low = _require(registers, 2)
    return struct.unpack(">f", struct.pack(">HH", high, low))[0]


def decode_f64(registers: Sequence[int]) -> float:
    """A double from words ordered 0, 1, 3, 2 (most significant first), as single precision."""
    r0, r1, r2, r3 = _require(registers, 4)
    value = struct.unpack(">d", struct.pack(">HHHH", r0, r1, r3, r2))[0]
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def decode_string(registers: Sequence[int]) -> str:
    """Two characters per register, high byte first, ending at the first NUL."""
    data = struct.pack(f">{len(registers)}H", *registers)
    end = data.find(b"\0")
    if end >= 0:
        data = data[:end]
    return data.decode("utf-8", errors="replace")


def _reader(
    client: RegisterSource, slave: int
) -> Callable[[int, int, Callable[[Sequence[int]], T]], T]:
    def read_register(address: int, count: int, decode: Callable[[Sequence[int]], T]) -> T:
        return decode(client.read_holding_registers(slave, address, count))

    return read_register


def read_station_information(client: RegisterSource) -> StationInformation:
    read_register = _reader(client, PRODUCT_IDENTIFICATION_SLAVE)

    name = read_register(NAME, 17, decode_string)
    manufacturer = read_register(MANUFACTURER, 5, decode_string)
    platform_type = read_register(PLATFORM_TYPE, 17, decode_string)
    serial_number = read_register(STATION_SERIAL_NUMBER, 11, decode_string)
    firmware_version = read_register(FIRMWARE_VERSION, 17, decode_string)

    offset = read_register(TIMEZONE, 1, decode_i16)
    parts = [
        read_register(address, 1, decode_i16)
        for address in (DATE_YEAR, DATE_MONTH, DATE_DAY, TIME_HOUR, TIME_MINUTE, TIME_SECOND)
    ]
    try:
        date = datetime(*parts, tzinfo=timezone(timedelta(seconds=offset)))
    except ValueError as error:
        raise ValueError(f"invalid station date {parts} (offset {offset}s): {error}") from error

    uptime = timedelta(milliseconds=read_register(UPTIME_ADDRESS, 4, decode_u64))

    return StationInformation(
        name=name,
        manufacturer=manufacturer,
        platform_type=platform_type,
        serial_number=serial_number,
        firmware_version=firmware_version,
        date=date,
        uptime=uptime,
    )


def read_station_status(client: RegisterSource) -> StationStatus:
    read_register = _reader(client, STATION_STATUS_SLAVE)
    return StationStatus(
        max_current=Amp(read_register(STATION_ACTIVE_MAX_CURRENT, 2, decode_f32)),
        temperature=Degree(read_register(TEMPERATURE, 2, decode_f32)),
        is_ocpp_connected=read_register(OCPP_STATE, 1, decode_u16) == 1,
        number_of_sockets=read_register(NUMBER_OF_SOCKETS, 1, decode_u16),
    )


def _socket_status(code: str) -> SocketStatus:
    match code:
        case "B1" | "C1" | "D1":
            return SocketStatus(SocketStatusKind.CONNECTED, pwm_signal=False)
        case "B2":
            return SocketStatus(SocketStatusKind.CONNECTED, pwm_signal=True)
        case "C2" | "D2":
            return SocketStatus(SocketStatusKind.CHARGING)
        case "A" | "E":
            return SocketStatus(SocketStatusKind.DISCONNECTED)
        case "F":
            return SocketStatus(SocketStatusKind.ERROR)
        case _:
            return SocketStatus(SocketStatusKind.UNKNOWN)


def read_socket(client: RegisterSource) -> Socket:
    read_register = _reader(client, SINGLE_SOCKET_SLAVE)

    match read_register(SOCKET_AVAILABILITY, 1, decode_u16):
        case 0:
            availability = SocketAvailability.INOPERATIVE
        case 1:
            availability = SocketAvailability.OPERATIVE
        case _:
            availability = SocketAvailability.UNKNOWN

    status = _socket_status(read_register(SOCKET_STATUS, 5, decode_string))

    match read_register(SOCKET_NUMBER_OF_PHASES, 1, decode_u16):
        case 1:
            number_of_phases = PhaseNumber.ONE
        case 3:
            number_of_phases = PhaseNumber.THREE
        case _:
            number_of_phases = PhaseNumber.UNKNOWN

    def phase(voltage_address: int, current_address: int) -> SocketPhase:
        voltage = Volt(read_register(voltage_address, 2, decode_f32))
        current = Amp(read_register(current_address, 2, decode_f32))
        return SocketPhase(voltage=voltage, current=current)

    l1 = phase(SOCKET_L1_VOLTAGE, SOCKET_L1_CURRENT)
    l2 = phase(SOCKET_L2_VOLTAGE, SOCKET_L2_CURRENT)
    l3 = phase(SOCKET_L3_VOLTAGE, SOCKET_L3_CURRENT)
    power = Watt(read_register(SOCKET_POWER_SUM, 2, decode_f32))
    frequency = Hertz(read_register(SOCKET_FREQUENCY, 2, decode_f32))
    energy = WattHour(read_register(SOCKET_REAL_ENERGY_DELIVERED_SUM, 4, decode_f64))
    session = SocketSession(
        max_current=Amp(read_register(SOCKET_MAX_CURRENT, 2, decode_f32)),
        actual_applied_max_current=Amp(
            read_register(SOCKET_ACTUAL_APPLIED_MAX_CURRENT, 2, decode_f32)
        ),
        remaining_time_before_fallback_to_safe_current=read_register(
            SOCKET_MAX_CURRENT_VALID_TIME, 2, decode_u32
        ),
    )

    return Socket(
        availability=availability,
        status=status,
        number_of_phases=number_of_phases,
        l1=l1,
        l2=l2,
        l3=l3,
        power=power,
        frequency=frequency,
        total_delivered_energy=energy,
        session=session,
    )


def read(client: RegisterSource) -> State:
    """Read the station information, the station status and the socket, in that order."""
    return State(
        station_information=read_station_information(client),
        station_status=read_station_status(client),
        socket=read_socket(client),
    )


from homethings.alfen.modbus import UPTIME as UPTIME_ADDRESS  # noqa: E402