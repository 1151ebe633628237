"""Exposing the current weather and the hourly forecast as Web Things."""

from __future__ import annotations

import dataclasses
import threading
import time
from typing import Any

import requests

from homethings.weather import reader
from homethings.weather.state import State, Weather
from homethings.webthing import Property, Thing, ThingServer, format_start_message

_REFRESH_INTERVAL = 60 * 30
_MAX_UV_INDEX = 12.0

_CURRENT_WEATHER_PROPERTIES: tuple[tuple[str, Any, dict[str, Any]], ...] = (
    ("clouds", 0, {
        "@type": "LevelProperty", "title": "Clouds", "type": "number",
        "description": "Cloudiness of the sky", "minimum": 0, "maximum": 100,
        "unit": "percent", "readOnly": True,
    }),
    ("temperature", 0, {
        "@type": "TemperatureProperty", "title": "Temperature", "type": "number",
        "description": "The measured temperature", "unit": "celsius", "readOnly": True,
    }),
    ("apparent_temperature", 0, {
        "@type": "TemperatureProperty", "title": "The apparent temperature",
        "type": "number", "description": "The apparent temperature",
        "unit": "celsius", "readOnly": True,
    }),
    ("humidity", 0, {
        "@type": "HumidityProperty", "title": "Humidity", "type": "integer",
        "description": "The measured humidity", "unit": "percent", "readOnly": True,
    }),
    ("dew_point", 0, {
        "@type": "TemperatureProperty", "title": "Dew point", "type": "number",
        "description": "The dew point", "unit": "percent", "readOnly": True,
    }),
    ("pressure", 0, {
        "@type": "BarometricPressureProperty", "title": "Pressure", "type": "integer",
        "description": "The barometric pressure", "unit": "hectopascal", "readOnly": True,
    }),
    ("sunrise", 0, {
        "@type": "DateProperty", "title": "Sunrise", "type": "integer",
        "description": "The sunrise timestamp", "readOnly": True,
    }),
    ("sunset", 0, {
        "@type": "DateProperty", "title": "Sunset", "type": "integer",
        "description": "The sunset timestamp", "readOnly": True,
    }),
    ("uv_index", 0, {
        "@type": "LevelProperty", "title": "UV index", "type": "number",
        "description": "The UV index", "minimum": 0, "maximum": 12, "readOnly": True,
    }),
    ("visibility", 0, {
        "@type": "LevelProperty", "title": "Visibility distance", "type": "integer",
        "description": "The visibility range", "minimum": 0, "unit": "meter",
        "readOnly": True,
    }),
    ("wind_degree", 0, {
        "@type": "LevelProperty", "title": "Wind orientation", "type": "integer",
        "description": "The wind orientation", "minimum": 0, "maximum": 360,
        "unit": "degree", "readOnly": True,
    }),
    ("wind_speed", 0, {
        "@type": "LevelProperty", "title": "Wind orientation", "type": "number",
        "description": "The wind speed", "minimum": 0, "unit": "m/sec", "readOnly": True,
    }),
    ("wind_gust", 0, {
        "@type": "LevelProperty", "title": "Wind gust", "type": "number",
        "description": "The wind gust", "minimum": 0, "unit": "m/sec", "readOnly": True,
    }),
    ("condition", 800, {
        "@type": "LevelProperty", "title": "Condition ID", "type": "integer",
        "description": "The weather condition ID", "minimum": 200, "maximum": 900,
        "readOnly": True,
    }),
    ("snow", 0.0, {
        "@type": "LevelProperty", "title": "Snow precipitation", "type": "number",
        "description": "The snow precipitation", "minimum": 0, "unit": "mm",
        "readOnly": True,
    }),
    ("rain", 0.0, {
        "@type": "LevelProperty", "title": "Rain precipitation", "type": "number",
        "description": "The rain precipitation", "minimum": 0, "unit": "mm",
        "readOnly": True,
    }),
)


def make_current_weather() -> Thing:
    thing = Thing(
        id="urn:dev:ops:current_weather",
        title="Current Weather",
        types=[
            "MultiLevelSensor",
            "HumiditySensor",
            "TemperatureSensor",
            "BarometricPressureSensor",
        ],
    )
    for name, value, metadata in _CURRENT_WEATHER_PROPERTIES:
        thing.add_property(Property(name, value, dict(metadata)))
    return thing


def make_forecast() -> Thing:
    thing = Thing(
        id="urn:dev:ops:forecast",
        title="Forecast",
        types=["ForecastSensor"],
    )
    thing.add_property(
        Property(
            "hourly",
            {},
            {
                "@type": "HeterogeneousCollectionProperty",
                "title": "Forecast",
                "type": "object",
                "description": "Hourly forecast",
                "readOnly": True,
            },
        )
    )
    return thing


def _weather_to_json(weather: Weather) -> dict[str, Any]:
    data = dataclasses.asdict(weather)
    data["datetime"] = int(weather.datetime.timestamp())
    for condition in data["conditions"]:
        condition["id"] = int(condition["id"])
    return data


def update_things(current_weather: Thing, forecast: Thing, state: State) -> None:
    """Push a weather state into the two things.

    Raises IndexError when the current weather carries no condition; the
    properties before ``condition`` have then already been updated.
    """
    weather = state.current_weather
    uv_index = weather.uv_index if weather.uv_index < _MAX_UV_INDEX else _MAX_UV_INDEX
    values = {
        "clouds": weather.clouds,
        "temperature": weather.temperature,
        "apparent_temperature": weather.apparent_temperature,
        "humidity": weather.humidity,
        "dew_point": weather.dew_point,
        "pressure": weather.pressure,
        "sunrise": weather.sunrise or 0,
        "sunset": weather.sunset or 0,
        "uv_index": uv_index,
        "visibility": weather.visibility or 0,
        "wind_degree": weather.wind_degree,
        "wind_speed": weather.wind_speed,
        "wind_gust": weather.wind_gust or 0.0,
        "snow": weather.snow.one_hour if weather.snow is not None else 0.0,
        "rain": weather.rain.one_hour if weather.rain is not None else 0.0,
    }
    for name, value in values.items():
        current_weather.update_property(name, value)
    current_weather.update_property("condition", int(weather.conditions[0].id))

    forecast.update_property(
        "hourly", [_weather_to_json(hour) for hour in state.hourly_weather]
    )


def _poll(api_key: str, current_weather: Thing, forecast: Thing) -> None:
    while True:
        try:
            state = reader.read(api_key)
        except (requests.RequestException, ValueError):
            state = State()
        update_things(current_weather, forecast, state)
        time.sleep(_REFRESH_INTERVAL)


def run(api_key: str, port: int | None) -> None:
    """Serve the weather things, refreshing them every half hour."""
    current_weather = make_current_weather()
    forecast = make_forecast()

    threading.Thread(
        target=_poll,
        args=(api_key, current_weather, forecast),
        name="weather-poller",
        daemon=True,
    ).start()

    print(format_start_message(port))
    ThingServer([current_weather, forecast], "Weather", port).start()