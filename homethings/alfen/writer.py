"""Changing the current applied by the charging station's socket."""

from __future__ import annotations

import struct
from typing import Protocol, Sequence

from homethings.alfen.modbus import SINGLE_SOCKET_SLAVE, SOCKET_MAX_CURRENT
from homethings.alfen.state import State
from homethings.alfen.units import Amp


class CurrentTooHighError(ValueError):
    """Raised when the requested current is not below the station's maximum."""


class RegisterSink(Protocol):
    def write_multiple_registers(
        self, slave: int, address: int, values: Sequence[int]
    ) -> None: ...


def encode_current(current: int) -> list[int]:
    """The two registers holding ``current`` as a float, most significant first."""
    if isinstance(current, bool) or not isinstance(current, int) or not 0 <= current <= 0xFFFF:
        raise ValueError(f"invalid current: {current!r}")
    high, low = struct.unpack(">HH", struct.pack(">f", float(current)))
    return [high, low]


def set_socket_current(client: RegisterSink, state: State, current: int) -> None:
    """Set the socket's maximum current; it must be lower than the station's."""
    registers = encode_current(current)
    max_current = state.station_status.max_current
    if Amp(current) >= max_current:
        raise CurrentTooHighError(
            f"New current value ({float(current)!r}) must be lower than {max_current}"
        )
    client.write_multiple_registers(SINGLE_SOCKET_SLAVE, SOCKET_MAX_CURRENT, registers)