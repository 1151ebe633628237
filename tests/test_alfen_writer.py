import pytest

from homethings.alfen.reader import decode_f32
from homethings.alfen.state import State, StationStatus
from homethings.alfen.units import Amp
from homethings.alfen.writer import CurrentTooHighError, encode_current, set_socket_current


class FakeWriter:
    def __init__(self):
        self.writes = []

    def write_multiple_registers(self, slave, address, values):
        self.writes.append((slave, address, list(values)))


def _state(max_current):
    return State(station_status=StationStatus(max_current=Amp(max_current)))


def test_encode_current_is_big_endian_float():
    assert encode_current(16) == [0x4180, 0x0000]
    assert encode_current(0) == [0x0000, 0x0000]


@pytest.mark.parametrize("current", [1, 6, 10, 16, 31])
def test_encode_current_round_trip(current):
    assert decode_f32(encode_current(current)) == float(current)


@pytest.mark.parametrize("current", [-1, 0x10000, True, 1.5])
def test_encode_current_rejects_invalid(current):
    with pytest.raises(ValueError):
        encode_current(current)


def test_set_socket_current_writes_register():
    writer = FakeWriter()
    set_socket_current(writer, _state(32), 16)
    assert writer.writes == [(1, 1210, [0x4180, 0x0000])]


def test_set_socket_current_too_high():
    writer = FakeWriter()
    with pytest.raises(CurrentTooHighError) as excinfo:
        set_socket_current(writer, _state(32), 40)
    assert writer.writes == []
    assert isinstance(excinfo.value, ValueError)


def test_set_socket_current_equal_to_maximum_is_refused():
    writer = FakeWriter()
    with pytest.raises(CurrentTooHighError) as excinfo:
        set_socket_current(writer, _state(32), 32)
    assert str(excinfo.value) == "New current value (32.0) must be lower than 32A"
    assert writer.writes == []


def test_set_socket_current_invalid_value():
    writer = FakeWriter()
    with pytest.raises(ValueError):
        set_socket_current(writer, _state(32), -3)
    assert writer.writes == []