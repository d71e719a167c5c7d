import io

import pytest
import requests
from PIL import Image

from floodscene.constants import CENTER_LAT, CENTER_LON
from floodscene.projection import GeoProjection

# Roughly 55 m on a side at the default center
SQUARE_DEG = 0.0005


def square_ring(lat=CENTER_LAT, lon=CENTER_LON, size=SQUARE_DEG):
    """Closed GeoJSON ring ([lon, lat]) of a square with its SW corner at lat/lon."""
    return [
        [lon, lat],
        [lon + size, lat],
        [lon + size, lat + size],
        [lon, lat + size],
        [lon, lat],
    ]


class FakeResponse:
    def __init__(self, payload=None, status_code=200, content=b""):
        self._payload = payload
        self.status_code = status_code
        self.content = content

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")


class _Handle:
    def __init__(self, callback):
        self.callback = callback
        self.cancelled = False


class ManualScheduler:
    """Frame scheduler driven by hand from a test."""

    def __init__(self):
        self.pending = []
        self.requested = 0
        self.cancelled = []

    def request(self, callback):
        handle = _Handle(callback)
        self.pending.append(handle)
        self.requested += 1
        return handle

    def cancel(self, handle):
        handle.cancelled = True
        self.cancelled.append(handle)

    def tick(self, frames=1):
        for _ in range(frames):
            pending, self.pending = self.pending, []
            for handle in pending:
                if not handle.cancelled:
                    handle.callback()


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def uniform(self, a, b):
        return self.value


@pytest.fixture
def projection():
    return GeoProjection(CENTER_LAT, CENTER_LON)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (256, 256), (200, 220, 200)).save(buf, format="PNG")
    return buf.getvalue()
