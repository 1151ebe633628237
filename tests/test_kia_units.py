import pytest

from homethings.kia.units import (
    Celsius,
    Coordinate,
    Kilometer,
    Meter,
    Percent,
    distance_to_km,
    temperature_to_celsius,
)


def test_debug_forms():
    assert repr(Percent(80)) == "80%"
    assert repr(Kilometer(12.5)) == "12.5km"
    assert repr(Meter(3)) == "3m"
    assert repr(Coordinate(46.5)) == "46.5°"
    assert repr(Celsius(21.5)) == "21.5°C"


def test_percent_rejects_negative():
    with pytest.raises(ValueError):
        Percent(-1)


def test_distance_in_kilometers_is_kept():
    assert distance_to_km({"value": 100.0, "unit": 1}) == Kilometer(100.0)


def test_distance_in_miles_is_converted():
    assert distance_to_km({"value": 1.0, "unit": 3}) == Kilometer(1.609344)


def test_distance_unit_unknown():
    with pytest.raises(ValueError):
        distance_to_km({"value": 1.0, "unit": 2})


def test_distance_missing_value():
    with pytest.raises(ValueError):
        distance_to_km({"unit": 1})


def test_temperature_index_zero_is_start():
    assert temperature_to_celsius({"value": "0H", "unit": 0}) == Celsius(14.0)
    assert temperature_to_celsius({"value": "00H", "unit": 0}) == Celsius(14.0)


def test_temperature_grows_with_index():
    values = [
        temperature_to_celsius({"value": f"{index:02X}H", "unit": 0}).value
        for index in range(34)
    ]
    assert values == sorted(values)
    assert len(set(values)) == len(values)


def test_temperature_is_capped():
    capped = temperature_to_celsius({"value": "21H", "unit": 0})
    assert temperature_to_celsius({"value": "FFH", "unit": 0}) == capped
    assert temperature_to_celsius({"value": "22H", "unit": 0}) == capped


def test_temperature_in_fahrenheit():
    assert temperature_to_celsius({"value": "0H", "unit": 1}) == Celsius(-10.0)


@pytest.mark.parametrize("text", ["H", "", "ZZH"])
def test_temperature_invalid_index(text):
    with pytest.raises(ValueError):
        temperature_to_celsius({"value": text, "unit": 0})


def test_temperature_unknown_unit():
    with pytest.raises(ValueError):
        temperature_to_celsius({"value": "0AH", "unit": 2})