"""Current weather and daily rainfall from Open-Meteo."""

import logging

import requests

from .constants import WEATHER_URL, HTTP_USER_AGENT, HTTP_TIMEOUT
from .models import CurrentWeather, SceneConfig, WeatherReport

logger = logging.getLogger(__name__)


def parse_weather(data: dict) -> WeatherReport:
    """Build a report from an Open-Meteo forecast payload.

    Raises KeyError when the ``current`` block is missing, and
    AttributeError, TypeError or ValueError when it is malformed.
    """
    current = data['current']
    daily = data.get('daily') or {}
    temperature = current.get('temperature_2m')
    weather_code = current.get('weather_code')
    return WeatherReport(
        current=CurrentWeather(
            temperature=float(temperature) if temperature is not None else None,
            rain=float(current.get('rain') or 0.0),
            showers=float(current.get('showers') or 0.0),
            weather_code=int(weather_code) if weather_code is not None else None,
        ),
        daily_precipitation=[float(v) if v is not None else None
                             for v in daily.get('precipitation_sum') or []],
    )


def fetch_weather(config: SceneConfig):
    """Current conditions at the scene center, or None if unavailable."""
    params = {
        'latitude': config.center_lat,
        'longitude': config.center_lon,
        'current': 'temperature_2m,rain,showers,weather_code',
        'daily': 'precipitation_sum',
        'timezone': 'Asia/Bangkok',
    }
    try:
        response = requests.get(WEATHER_URL, params=params,
                                headers={'User-Agent': HTTP_USER_AGENT},
                                timeout=HTTP_TIMEOUT)
        response.raise_for_status()
        return parse_weather(response.json())
    except (requests.RequestException, AttributeError, KeyError,
            TypeError, ValueError) as e:
        logger.error(f"Weather fetch failed: {e}")
        return None
