import json
from datetime import datetime, timezone

import pytest

from homethings.weather.state import (
    Precipitation,
    State,
    Weather,
    WeatherCondition,
    WeatherConditionId,
)
from homethings.weather.thing import make_current_weather, make_forecast, update_things

PROPERTY_NAMES = {
    "clouds", "temperature", "apparent_temperature", "humidity", "dew_point",
    "pressure", "sunrise", "sunset", "uv_index", "visibility", "wind_degree",
    "wind_speed", "wind_gust", "condition", "snow", "rain",
}


def _state(**overrides):
    weather = Weather(
        clouds=40,
        datetime=datetime.fromtimestamp(1_700_000_000, tz=timezone.utc),
        temperature=12.5,
        apparent_temperature=11.0,
        humidity=60,
        dew_point=4.5,
        pressure=1020,
        sunrise=1_699_990_000,
        uv_index=3.0,
        wind_degree=90,
        wind_speed=2.5,
        rain=Precipitation(one_hour=1.25),
        conditions=[WeatherCondition("pluie", WeatherConditionId.LIGHT_RAIN)],
    )
    for key, value in overrides.items():
        setattr(weather, key, value)
    return State(current_weather=weather, hourly_weather=[weather])


def test_current_weather_properties():
    thing = make_current_weather()
    assert thing.id == "urn:dev:ops:current_weather"
    assert set(thing.properties) == PROPERTY_NAMES
    assert thing.find_property("condition").value == 800
    assert all(prop.metadata["readOnly"] for prop in thing.properties.values())


def test_forecast_properties():
    thing = make_forecast()
    assert thing.id == "urn:dev:ops:forecast"
    assert list(thing.properties) == ["hourly"]
    assert thing.find_property("hourly").value == {}


def test_update_things_sets_values():
    current, forecast = make_current_weather(), make_forecast()
    update_things(current, forecast, _state())
    value = lambda name: current.find_property(name).value
    assert value("clouds") == 40
    assert value("temperature") == 12.5
    assert value("sunrise") == 1_699_990_000
    assert value("sunset") == 0
    assert value("visibility") == 0
    assert value("wind_gust") == 0.0
    assert value("rain") == 1.25
    assert value("snow") == 0.0
    assert value("condition") == int(WeatherConditionId.LIGHT_RAIN)


def test_uv_index_is_capped():
    current, forecast = make_current_weather(), make_forecast()
    update_things(current, forecast, _state(uv_index=15.0))
    assert current.find_property("uv_index").value == 12.0


def test_forecast_hourly_is_json_ready():
    current, forecast = make_current_weather(), make_forecast()
    update_things(current, forecast, _state())
    hourly = forecast.find_property("hourly").value
    assert len(hourly) == 1
    assert hourly[0]["datetime"] == 1_700_000_000
    assert hourly[0]["apparent_temperature"] == 11.0
    assert hourly[0]["rain"] == {"one_hour": 1.25, "three_hour": None}
    assert json.loads(json.dumps(hourly))[0]["conditions"][0]["id"] == 500


def test_subscribers_are_notified():
    current, forecast = make_current_weather(), make_forecast()
    events = []
    forecast.subscribers.append(lambda name, value: events.append(name))
    update_things(current, forecast, _state())
    assert events == ["hourly"]


def test_missing_condition_raises_after_partial_update():
    current, forecast = make_current_weather(), make_forecast()
    with pytest.raises(IndexError):
        update_things(current, forecast, State())
    assert current.find_property("clouds").value == 0
    assert current.find_property("condition").value == 800