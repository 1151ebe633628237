"""Weather reports as returned by the one-call forecast service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Callable, Mapping, TypeVar

HOME_LATITUDE = 46.78657339107215
HOME_LONGITUDE = 6.806581635522576
HOME_LANGUAGE = "fr"

T = TypeVar("T")


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"expected an object for {what}")
    return data


def _field(data: Mapping[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field `{key}`") from None


def _int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"invalid type for field `{key}`: expected an integer")
    return value


def _float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"invalid type for field `{key}`: expected a number")
    return float(value)


def _str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"invalid type for field `{key}`: expected a string")
    return value


def _list(value: Any, key: str, convert: Callable[[Any], T]) -> list[T]:
    if not isinstance(value, list):
        raise ValueError(f"invalid type for field `{key}`: expected a list")
    return [convert(item) for item in value]


def _timestamp(value: Any, key: str) -> datetime:
    seconds = _int(value, key)
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as error:
        raise ValueError(f"invalid timestamp for field `{key}`") from error


def _optional(
    data: Mapping[str, Any], key: str, convert: Callable[[Any, str], T]
) -> T | None:
    value = data.get(key)
    return None if value is None else convert(value, key)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Precipitation:
    """Precipitation volume in millimetres."""

    one_hour: float = 0.0
    three_hour: float | None = None

    @classmethod
    def from_json(cls, data: Any) -> Precipitation:
        data = _mapping(data, "a precipitation")
        return cls(
            one_hour=_float(_field(data, "1h"), "1h"),
            three_hour=_optional(data, "3h", _float),
        )


class WeatherConditionId(IntEnum):
    THUNDERSTORM_WITH_LIGHT_RAIN = 200
    THUNDERSTORM_WITH_RAIN = 201
    THUNDERSTORM_WITH_HEAVY_RAIN = 202
    LIGHT_THUNDERSTORM = 210
    THUNDERSTORM = 211
    HEAVY_THUNDERSTORM = 212
    RAGGED_THUNDERSTORM = 221
    THUNDERSTORM_WITH_LIGHT_DRIZZLE = 230
    THUNDERSTORM_WITH_DRIZZLE = 231
    THUNDERSTORM_WITH_HEAVY_DRIZZLE = 232

    LIGHT_INTENSITY_DRIZZLE = 300
    DRIZZLE = 301
    HEAVY_INTENSITY_DRIZZLE = 302
    LIGHT_INTENSITY_DRIZZLE_RAIN = 310
    DRIZZLE_RAIN = 311
    HEAVY_INTENSITY_DRIZZLE_RAIN = 312
    SHOWER_RAIN_AND_DRIZZLE = 313
    HEAVY_SHOWER_RAIN_AND_DRIZZLE = 314
    SHOWER_DRIZZLE = 321

    LIGHT_RAIN = 500
    MODERATE_RAIN = 501
    HEAVY_INTENSITY_RAIN = 502
    VERY_HEAVY_RAIN = 503
    EXTREME_RAIN = 504
    FREEZING_RAIN = 511
    LIGHT_INTENSITY_SHOWER_RAIN = 520
    SHOWER_RAIN = 521
    HEAVY_INTENSITY_SHOWER_RAIN = 522
    RAGGED_SHOWER_RAIN = 531

    LIGHT_SNOW = 600
    SNOW = 601
    HEAVY_SNOW = 602
    SLEET = 611
    LIGHT_SHOWER_SLEET = 612
    SHOWER_SLEET = 613
    LIGHT_RAIN_AND_SNOW = 615
    RAIN_AND_SNOW = 616
    LIGHT_SHOWER_SNOW = 620
    SHOWER_SNOW = 621
    HEAVY_SHOWER_SNOW = 622

    MIST = 701
    SMOKE = 711
    HAZE = 721
    SAND_OR_DUST_WHIRLS = 731
    FOG = 741
    SAND = 751
    DUST = 761
    VOLCANIC_ASH = 762
    SQUALLS = 771
    TORNADO = 781

    CLEAR_SKY = 800

    FEW_CLOUDS = 801
    SCATTERED_CLOUDS = 802
    BROKEN_CLOUDS = 803
    OVERCAST_CLOUDS = 804


@dataclass
class WeatherCondition:
    description: str = ""
    id: WeatherConditionId = WeatherConditionId.CLEAR_SKY

    @classmethod
    def from_json(cls, data: Any) -> WeatherCondition:
        data = _mapping(data, "a weather condition")
        raw_id = _int(_field(data, "id"), "id")
        try:
            condition_id = WeatherConditionId(raw_id)
        except ValueError:
            raise ValueError(f"unknown weather condition id {raw_id}") from None
        return cls(
            description=_str(_field(data, "description"), "description"),
            id=condition_id,
        )


@dataclass
class Weather:
    """Measurements at one point in time."""

    clouds: int = 0
    datetime: datetime = field(default_factory=_utc_now)
    temperature: float = 0.0
    apparent_temperature: float = 0.0
    humidity: int = 0
    dew_point: float = 0.0
    pressure: int = 0
    sunrise: int | None = None
    sunset: int | None = None
    uv_index: float = 0.0
    visibility: int | None = None
    wind_degree: int = 0
    wind_speed: float = 0.0
    wind_gust: float | None = None
    snow: Precipitation | None = None
    rain: Precipitation | None = None
    conditions: list[WeatherCondition] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> Weather:
        data = _mapping(data, "a weather report")
        return cls(
            clouds=_int(_field(data, "clouds"), "clouds"),
            datetime=_timestamp(_field(data, "dt"), "dt"),
            temperature=_float(_field(data, "temp"), "temp"),
            apparent_temperature=_float(_field(data, "feels_like"), "feels_like"),
            humidity=_int(_field(data, "humidity"), "humidity"),
            dew_point=_float(_field(data, "dew_point"), "dew_point"),
            pressure=_int(_field(data, "pressure"), "pressure"),
            sunrise=_optional(data, "sunrise", _int),
            sunset=_optional(data, "sunset", _int),
            uv_index=_float(_field(data, "uvi"), "uvi"),
            visibility=_optional(data, "visibility", _int),
            wind_degree=_int(_field(data, "wind_deg"), "wind_deg"),
            wind_speed=_float(_field(data, "wind_speed"), "wind_speed"),
            wind_gust=_optional(data, "wind_gust", _float),
            snow=_optional(data, "snow", lambda v, _: Precipitation.from_json(v)),
            rain=_optional(data, "rain", lambda v, _: Precipitation.from_json(v)),
            conditions=_list(
                _field(data, "weather"), "weather", WeatherCondition.from_json
            ),
        )


@dataclass
class Alert:
    description: str = ""
    start: datetime = field(default_factory=_utc_now)
    end: datetime = field(default_factory=_utc_now)
    sender: str = ""
    event: str = ""
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> Alert:
        data = _mapping(data, "an alert")
        return cls(
            description=_str(_field(data, "description"), "description"),
            start=_timestamp(_field(data, "start"), "start"),
            end=_timestamp(_field(data, "end"), "end"),
            sender=_str(_field(data, "sender_name"), "sender_name"),
            event=_str(_field(data, "event"), "event"),
            tags=_list(_field(data, "tags"), "tags", lambda tag: _str(tag, "tags")),
        )


@dataclass
class State:
    """The current weather, the hourly forecast and the active alerts."""

    alerts: list[Alert] | None = None
    current_weather: Weather = field(default_factory=Weather)
    hourly_weather: list[Weather] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Any) -> State:
        data = _mapping(data, "a weather state")
        return cls(
            alerts=_optional(
                data, "alerts", lambda v, key: _list(v, key, Alert.from_json)
            ),
            current_weather=Weather.from_json(_field(data, "current")),
            hourly_weather=_list(_field(data, "hourly"), "hourly", Weather.from_json),
        )