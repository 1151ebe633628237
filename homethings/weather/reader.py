"""Fetching the weather of home from the one-call forecast service."""

from __future__ import annotations

from urllib.parse import quote

import requests

from homethings.alfen.units import Quantity
from homethings.weather.state import HOME_LANGUAGE, HOME_LATITUDE, HOME_LONGITUDE, State

API_URL = "https://api.openweathermap.org/data/3.0/onecall"
_TIMEOUT = 30


def build_url(api_key: str) -> str:
    """Return the request URL for home's current weather and hourly forecast."""
    # Coordinates are sent at single precision.
    latitude = str(Quantity(HOME_LATITUDE))
    longitude = str(Quantity(HOME_LONGITUDE))
    return (
        f"{API_URL}?appid={quote(api_key, safe='')}&lat={latitude}&lon={longitude}"
        f"&units=metric&lang={HOME_LANGUAGE}&exclude=daily,minutely"
    )


def read(api_key: str) -> State:
    """Fetch and parse the weather state; network and decoding errors propagate."""
    response = requests.get(build_url(api_key), timeout=_TIMEOUT)
    return State.from_json(response.json())