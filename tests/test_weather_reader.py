from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from homethings.weather.reader import build_url, read
from homethings.weather.state import HOME_LATITUDE, HOME_LONGITUDE, WeatherConditionId

CURRENT = {
    "dt": 1_700_000_000,
    "temp": 8.5,
    "feels_like": 6.25,
    "pressure": 1013,
    "humidity": 81,
    "dew_point": 5.5,
    "uvi": 0.5,
    "clouds": 75,
    "wind_speed": 3.5,
    "wind_deg": 230,
    "weather": [{"id": 800, "description": "ciel dégagé"}],
}


def test_build_url_query():
    url = build_url("placeholder")
    parts = urlsplit(url)
    assert f"{parts.scheme}://{parts.netloc}{parts.path}" == (
        "https://api.openweathermap.org/data/3.0/onecall"
    )
    query = parse_qs(parts.query)
    assert query["appid"] == ["placeholder"]
    assert query["units"] == ["metric"]
    assert query["lang"] == ["fr"]
    assert query["exclude"] == ["daily,minutely"]
    assert float(query["lat"][0]) == pytest.approx(HOME_LATITUDE, abs=1e-5)
    assert float(query["lon"][0]) == pytest.approx(HOME_LONGITUDE, abs=1e-5)


def test_build_url_escapes_the_key():
    query = parse_qs(urlsplit(build_url("token&lang=en")).query)
    assert query["appid"] == ["token&lang=en"]
    assert query["lang"] == ["fr"]


def test_read_parses_response():
    response = MagicMock()
    response.json.return_value = {"current": CURRENT, "hourly": [CURRENT]}
    with patch("homethings.weather.reader.requests.get", return_value=response) as get:
        state = read("placeholder")
    assert get.call_args.args[0] == build_url("placeholder")
    assert state.current_weather.clouds == 75
    assert state.hourly_weather[0].conditions[0].id is WeatherConditionId.CLEAR_SKY


def test_read_propagates_network_errors():
    with patch(
        "homethings.weather.reader.requests.get",
        side_effect=requests.ConnectionError("down"),
    ):
        with pytest.raises(requests.ConnectionError):
            read("placeholder")


def test_read_rejects_unexpected_body():
    response = MagicMock()
    response.json.return_value = {"cod": 401, "message": "Invalid API key."}
    with patch("homethings.weather.reader.requests.get", return_value=response):
        with pytest.raises(ValueError, match="current"):
            read("placeholder")