"""Equirectangular lat/lon to local scene coordinates."""

import math

from .constants import METERS_PER_DEGREE
from .models import Coordinate, LocalPosition, SceneConfig


class GeoProjection:
    """Fixed-scale tangent-plane approximation around a center point.

    x grows east and z grows south, so the result can be dropped straight
    into a Y-up scene viewed from +Z.  The scale factors are computed once
    at the center latitude; points far from the center drift, which is an
    accepted limit of the approximation.
    """

    def __init__(self, center_lat: float, center_lon: float,
                 meters_per_degree: float = METERS_PER_DEGREE):
        self.center_lat = center_lat
        self.center_lon = center_lon
        self.meters_per_deg_lat = meters_per_degree
        self.meters_per_deg_lon = meters_per_degree * math.cos(math.radians(center_lat))

    @classmethod
    def from_config(cls, config: SceneConfig) -> "GeoProjection":
        return cls(config.center_lat, config.center_lon, config.meters_per_degree)

    def project(self, lat: float, lon: float) -> LocalPosition:
        x = (lon - self.center_lon) * self.meters_per_deg_lon
        z = (self.center_lat - lat) * self.meters_per_deg_lat
        return LocalPosition(x, z)

    def unproject(self, x: float, z: float) -> Coordinate:
        lon = self.center_lon + x / self.meters_per_deg_lon
        lat = self.center_lat - z / self.meters_per_deg_lat
        return Coordinate(lat, lon)

    def __repr__(self):
        return f"GeoProjection(center=({self.center_lat}, {self.center_lon}))"
