from typing import List, Optional

from pydantic import BaseModel, Field

from floodscene.constants import WATER_LEVEL_MIN, WATER_LEVEL_MAX, WATER_LEVEL_STEP


class WaterLevelRequest(BaseModel):
    level: float = Field(..., ge=WATER_LEVEL_MIN, le=WATER_LEVEL_MAX,
                         multiple_of=WATER_LEVEL_STEP)


class WaterLevelResponse(BaseModel):
    level: float
    status: str
    label: str


class WeatherInfo(BaseModel):
    temperature: Optional[float] = None
    rain: float
    showers: float
    weather_code: Optional[int] = None
    is_raining: bool
    summary: Optional[str] = None
    daily_precipitation: List[Optional[float]] = []


class ImpactItem(BaseModel):
    areaName: str
    count: int


class DashboardResponse(BaseModel):
    state: str
    loading_step: int
    is_loading: bool
    weather: Optional[WeatherInfo] = None
    river_discharge: Optional[float] = None
    flood_feature_count: Optional[int] = None
    flood_error: Optional[str] = None
    impact: List[ImpactItem] = []
    building_count: int
    water_level: float
    water_status: str
    water_status_label: str
