"""Data classes shared across the scene pipeline."""

from dataclasses import dataclass, field
from typing import List, Optional

from .constants import (CENTER_LAT, CENTER_LON, METERS_PER_DEGREE,
                        TILE_ZOOM, PLANE_SIZE, BUILDING_RADIUS, FRAME_RATE,
                        GISTDA_TOKEN)


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float


@dataclass(frozen=True)
class LocalPosition:
    x: float
    z: float


@dataclass
class SceneConfig:
    """Everything a scene needs to know about where and how it is built."""
    center_lat: float = CENTER_LAT
    center_lon: float = CENTER_LON
    meters_per_degree: float = METERS_PER_DEGREE
    tile_zoom: int = TILE_ZOOM
    plane_size: float = PLANE_SIZE
    building_radius: int = BUILDING_RADIUS
    frame_rate: float = FRAME_RATE
    gistda_token: str = GISTDA_TOKEN

    @property
    def center(self) -> Coordinate:
        return Coordinate(self.center_lat, self.center_lon)


@dataclass(frozen=True)
class CurrentWeather:
    temperature: float
    rain: float
    showers: float
    weather_code: Optional[int] = None


@dataclass(frozen=True)
class WeatherReport:
    current: CurrentWeather
    daily_precipitation: List[float] = field(default_factory=list)

    @property
    def is_raining(self) -> bool:
        return self.current.rain > 0 or self.current.showers > 0


@dataclass(frozen=True)
class RiverReport:
    discharge: float = 0.0


@dataclass(frozen=True)
class FloodResponse:
    """Outcome of a GISTDA flood-extent fetch."""
    success: bool
    data: Optional[dict] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class ImpactSummary:
    area_name: str
    count: int

    def to_dict(self) -> dict:
        return {'areaName': self.area_name, 'count': self.count}


@dataclass
class BuildingRecord:
    """One OSM building way with its resolved footprint."""
    osm_id: int
    points: List[Coordinate]
    tags: dict
    height: float = 0.0
    label: Optional[str] = None
