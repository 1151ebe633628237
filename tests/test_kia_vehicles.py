import copy
import json
from datetime import timedelta

import pytest

from homethings.kia.units import Celsius, Kilometer
from homethings.kia.vehicles import (
    Battery,
    Coordinates,
    DeserializationError,
    Doors,
    Location,
    PrecisionDilution,
    State,
    Status,
    Windows,
    int_to_bool,
    parse_charging_duration,
    parse_range,
    parse_state_response,
)

SAMPLE_STATE = {
    "vehicleStatus": {
        "airCtrlOn": False,
        "engine": False,
        "doorLock": True,
        "doorOpen": {"frontLeft": 0, "frontRight": 1, "backLeft": 0, "backRight": 0},
        "trunkOpen": False,
        "airTemp": {"value": "10H", "unit": 0, "hvacTempType": 1},
        "defrost": False,
        "hoodOpen": False,
        "steerWheelHeat": 0,
        "sideBackWindowHeat": 2,
        "hazardStatus": 0,
        "tailLampStatus": 0,
        "smartKeyBatteryWarning": False,
        "washerFluidStatus": False,
        "breakOilStatus": False,
        "windowOpen": {"frontLeft": 0, "frontRight": 0, "backLeft": 1, "backRight": 0},
        "evStatus": {
            "batteryCharge": True,
            "batteryStatus": 80,
            "drvDistance": [
                {
                    "rangeByFuel": {
                        "evModeRange": {"value": 320, "unit": 1},
                        "totalAvailableRange": {"value": 320, "unit": 1},
                    },
                    "type": 2,
                }
            ],
            "remainTime2": {
                "atc": {"value": 95, "unit": 1},
                "etc1": {"value": 1500, "unit": 1},
            },
        },
    },
    "vehicleLocation": {
        "coord": {"lat": 46.5, "lon": 6.5, "alt": 450.0, "type": 0},
        "accuracy": {"hdop": 1, "pdop": 2},
        "head": 90,
        "speed": {"value": 0, "unit": 0},
    },
    "odometer": {"value": 12345.0, "unit": 1},
}


def _response(state):
    return json.dumps({"retCode": "S", "resMsg": {"vehicleStatusInfo": state}})


def test_parse_sample_response():
    state = parse_state_response(_response(SAMPLE_STATE))
    assert state.status.battery.is_charging is True
    assert state.status.battery.remaining_range == 320
    assert state.status.battery.estimated_charging_duration == timedelta(minutes=95)
    assert state.status.is_locked is True
    assert state.status.is_engine_running is False
    assert state.status.is_side_back_window_heat_enabled is True
    assert state.status.is_steer_wheel_heat_enabled is False
    assert state.location.precision_dilution == PrecisionDilution(horizontal=1, position=2)
    assert isinstance(state.odometer, Kilometer)
    assert isinstance(state.status.targeted_temperature, Celsius)


def test_doors_and_windows_flags():
    state = State.from_json(SAMPLE_STATE)
    assert state.status.doors == Doors(False, True, False, False)
    assert state.status.windows == Windows(False, False, True, False)


def test_missing_accuracy_is_none():
    data = copy.deepcopy(SAMPLE_STATE["vehicleLocation"])
    del data["accuracy"]
    location = Location.from_json(data)
    assert location.precision_dilution is None


def test_missing_altitude_is_none():
    coordinates = Coordinates.from_json({"lat": 1.0, "lon": 2.0})
    assert coordinates.altitude is None


def test_missing_field_raises():
    data = copy.deepcopy(SAMPLE_STATE)
    del data["vehicleStatus"]["engine"]
    with pytest.raises(DeserializationError):
        State.from_json(data)


def test_plain_boolean_rejects_integer():
    data = copy.deepcopy(SAMPLE_STATE["vehicleStatus"])
    data["doorLock"] = 1
    with pytest.raises(DeserializationError):
        Status.from_json(data)


def test_battery_rejects_negative_charge():
    data = copy.deepcopy(SAMPLE_STATE["vehicleStatus"]["evStatus"])
    data["batteryStatus"] = -1
    with pytest.raises(DeserializationError):
        Battery.from_json(data)


@pytest.mark.parametrize("value, expected", [(0, False), (1, True), (-3, True), (2, True)])
def test_int_to_bool(value, expected):
    assert int_to_bool(value) is expected


@pytest.mark.parametrize("value", [True, 1.5, "1", None, 2**31])
def test_int_to_bool_rejects(value):
    with pytest.raises(DeserializationError):
        int_to_bool(value)


def test_parse_range():
    value = [{"rangeByFuel": {"totalAvailableRange": {"value": 412, "unit": 1}}}]
    assert parse_range(value) == 412


def test_parse_range_truncates_to_32_bits():
    value = [{"rangeByFuel": {"totalAvailableRange": {"value": 2**32 + 7}}}]
    assert parse_range(value) == 7


def test_parse_range_rejects_float():
    value = [{"rangeByFuel": {"totalAvailableRange": {"value": 12.5}}}]
    with pytest.raises(DeserializationError):
        parse_range(value)


@pytest.mark.parametrize("value", [[], [{}], [{"rangeByFuel": {}}], {}])
def test_parse_range_missing_path(value):
    with pytest.raises(DeserializationError):
        parse_range(value)


def test_parse_charging_duration():
    assert parse_charging_duration({"atc": {"value": 0}}) == timedelta(0)
    assert parse_charging_duration({"atc": {"value": 2}}) == timedelta(seconds=120)


def test_parse_charging_duration_missing_atc():
    with pytest.raises(DeserializationError):
        parse_charging_duration({"etc1": {"value": 10}})


def test_invalid_json_raises():
    with pytest.raises(DeserializationError):
        parse_state_response("{not json")


def test_response_without_message_raises():
    with pytest.raises(DeserializationError):
        parse_state_response(json.dumps({"retCode": "S"}))


def test_error_is_value_error():
    with pytest.raises(ValueError):
        parse_state_response("[]")