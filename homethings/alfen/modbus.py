"""Modbus TCP access to the charging station, and its register map."""

from __future__ import annotations

import socket
import struct
import threading
from collections.abc import Sequence
from typing import Any

PRODUCT_IDENTIFICATION_SLAVE = 200

NAME = 100
MANUFACTURER = 117
PLATFORM_TYPE = 140
STATION_SERIAL_NUMBER = 157
FIRMWARE_VERSION = 123
DATE_YEAR = 168
DATE_MONTH = 169
DATE_DAY = 170
TIME_HOUR = 171
TIME_MINUTE = 172
TIME_SECOND = 173
UPTIME = 174
TIMEZONE = 178

STATION_STATUS_SLAVE = 200

STATION_ACTIVE_MAX_CURRENT = 1100
TEMPERATURE = 1102
OCPP_STATE = 1104
NUMBER_OF_SOCKETS = 1105

SINGLE_SOCKET_SLAVE = 1

SOCKET_L1_VOLTAGE = 306
SOCKET_L2_VOLTAGE = 308
SOCKET_L3_VOLTAGE = 310
SOCKET_L1_CURRENT = 320
SOCKET_L2_CURRENT = 322
SOCKET_L3_CURRENT = 324
SOCKET_POWER_SUM = 344
SOCKET_FREQUENCY = 336
SOCKET_REAL_ENERGY_DELIVERED_SUM = 374
SOCKET_AVAILABILITY = 1200
SOCKET_STATUS = 1201
SOCKET_ACTUAL_APPLIED_MAX_CURRENT = 1206
SOCKET_MAX_CURRENT_VALID_TIME = 1208
SOCKET_MAX_CURRENT = 1210
SOCKET_NUMBER_OF_PHASES = 1215

_READ_HOLDING_REGISTERS = 0x03
_WRITE_MULTIPLE_REGISTERS = 0x10
_EXCEPTION_FLAG = 0x80
_MAX_READ_COUNT = 125
_MAX_WRITE_COUNT = 123
_CONNECT_TIMEOUT = 10
_HEADER = struct.Struct(">HHHB")

_EXCEPTION_NAMES = {
    1: "illegal function",
    2: "illegal data address",
    3: "illegal data value",
    4: "server device failure",
    5: "acknowledge",
    6: "server device busy",
    8: "memory parity error",
    10: "gateway path unavailable",
    11: "gateway target device failed to respond",
}


class ModbusError(OSError):
    """Raised on a malformed reply, a closed connection or a Modbus exception."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


def _check_range(value: Any, low: int, high: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
        raise ValueError(f"invalid {what}: {value!r}")
    return value


class ModbusClient:
    """A Modbus TCP client over a connected stream socket."""

    def __init__(self, sock: socket.socket):
        self._sock = sock
        self._transaction = 0
        self._lock = threading.Lock()

    def _receive_exactly(self, size: int) -> bytes:
        data = bytearray()
        while len(data) < size:
            chunk = self._sock.recv(size - len(data))
            if not chunk:
                raise ModbusError("connection closed by the Modbus server")
            data += chunk
        return bytes(data)

    def _request(self, slave: int, pdu: bytes) -> bytes:
        with self._lock:
            self._transaction = (self._transaction + 1) & 0xFFFF
            transaction = self._transaction
            self._sock.sendall(_HEADER.pack(transaction, 0, len(pdu) + 1, slave) + pdu)
            reply_transaction, protocol, length, unit = _HEADER.unpack(
                self._receive_exactly(_HEADER.size)
            )
            if length < 2:
                raise ModbusError(f"invalid Modbus frame length {length}")
            body = self._receive_exactly(length - 1)

        if reply_transaction != transaction:
            raise ModbusError(
                f"unexpected transaction id {reply_transaction}, expected {transaction}"
            )
        if protocol != 0:
            raise ModbusError(f"unexpected protocol id {protocol}")
        if unit != slave:
            raise ModbusError(f"unexpected unit id {unit}, expected {slave}")

        function = body[0]
        if function == pdu[0] | _EXCEPTION_FLAG:
            code = body[1] if len(body) > 1 else None
            name = _EXCEPTION_NAMES.get(code, "unknown exception") if code is not None else "unknown exception"
            raise ModbusError(f"Modbus exception {code}: {name}", code)
        if function != pdu[0]:
            raise ModbusError(f"unexpected function code {function:#04x}")
        return body[1:]

    def read_holding_registers(self, slave: int, address: int, count: int) -> list[int]:
        """Read ``count`` holding registers starting at ``address``."""
        _check_range(slave, 0, 0xFF, "slave")
        _check_range(address, 0, 0xFFFF, "register address")
        _check_range(count, 1, _MAX_READ_COUNT, "register count")

        data = self._request(
            slave, struct.pack(">BHH", _READ_HOLDING_REGISTERS, address, count)
        )
        if not data or data[0] != 2 * count or len(data) != 1 + 2 * count:
            raise ModbusError("unexpected size of the holding registers reply")
        return list(struct.unpack(f">{count}H", data[1:]))

    def write_multiple_registers(
        self, slave: int, address: int, values: Sequence[int]
    ) -> None:
        """Write ``values`` to consecutive registers starting at ``address``."""
        _check_range(slave, 0, 0xFF, "slave")
        _check_range(address, 0, 0xFFFF, "register address")
        values = list(values)
        _check_range(len(values), 1, _MAX_WRITE_COUNT, "register count")
        for value in values:
            _check_range(value, 0, 0xFFFF, "register value")

        count = len(values)
        pdu = struct.pack(
            f">BHHB{count}H", _WRITE_MULTIPLE_REGISTERS, address, count, 2 * count, *values
        )
        data = self._request(slave, pdu)
        if len(data) != 4 or struct.unpack(">HH", data) != (address, count):
            raise ModbusError("unexpected reply to a multiple registers write")

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> ModbusClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


def connect(address: tuple[str, int]) -> ModbusClient:
    """Open a Modbus TCP connection to ``address``."""
    return ModbusClient(socket.create_connection(address, timeout=_CONNECT_TIMEOUT))