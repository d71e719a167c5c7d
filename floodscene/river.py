"""River discharge forecast from the Open-Meteo flood API."""

import logging

import requests

from .constants import RIVER_URL, HTTP_USER_AGENT, HTTP_TIMEOUT
from .models import RiverReport, SceneConfig

logger = logging.getLogger(__name__)


def parse_river(data: dict) -> RiverReport:
    """First day of ``daily.river_discharge``; 0 when the value is missing."""
    values = (data.get('daily') or {}).get('river_discharge') or []
    discharge = values[0] if values else None
    return RiverReport(discharge=float(discharge or 0.0))


def fetch_river_data(config: SceneConfig) -> RiverReport:
    """Today's river discharge (m³/s) near the center; 0 on any failure."""
    params = {
        'latitude': config.center_lat,
        'longitude': config.center_lon,
        'daily': 'river_discharge',
        'forecast_days': 1,
    }
    try:
        response = requests.get(RIVER_URL, params=params,
                                headers={'User-Agent': HTTP_USER_AGENT},
                                timeout=HTTP_TIMEOUT)
        response.raise_for_status()
        return parse_river(response.json())
    except (requests.RequestException, AttributeError, TypeError, ValueError) as e:
        logger.warning(f"River discharge fetch failed: {e}")
        return RiverReport(discharge=0.0)
