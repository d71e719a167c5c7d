"""OpenStreetMap base tile for texturing the ground plane."""

import math
import logging
from io import BytesIO

import requests
from PIL import Image

from .constants import TILE_URL, HTTP_USER_AGENT, HTTP_TIMEOUT

logger = logging.getLogger(__name__)


def lat_lon_to_tile(lat, lon, zoom):
    """Convert WGS84 lat/lon to Slippy Map tile indices."""
    n = 2 ** zoom
    x = int((lon + 180.0) / 360.0 * n)
    lat_rad = math.radians(lat)
    y = int((1.0 - math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad))
             / math.pi) / 2.0 * n)
    x = max(0, min(x, n - 1))
    y = max(0, min(y, n - 1))
    return x, y


def tile_url(lat, lon, zoom):
    x, y = lat_lon_to_tile(lat, lon, zoom)
    return TILE_URL.format(z=zoom, x=x, y=y)


def fetch_ground_tile(lat, lon, zoom):
    """Download the map tile under (lat, lon); None when it can't be had."""
    url = tile_url(lat, lon, zoom)
    try:
        response = requests.get(url, headers={'User-Agent': HTTP_USER_AGENT},
                                timeout=HTTP_TIMEOUT)
        response.raise_for_status()
        image = Image.open(BytesIO(response.content)).convert("RGB")
    except (requests.RequestException, OSError) as e:
        logger.warning(f"Failed to download ground tile {url}: {e}")
        return None

    logger.info(f"Ground tile {url}: {image.width}x{image.height}px")
    return image
