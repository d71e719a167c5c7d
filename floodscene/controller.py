"""Scene lifecycle: initialization, frame loop, data loading, teardown."""

import asyncio
import functools
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .buildings import BuildingLayer, load_buildings
from .camera import OrbitCamera
from .constants import GROUND_Y, TILE_REPEAT, SCENE_STYLE
from .geometry import build_plane, paint
from .gistda import FloodLayer, build_flood_layer, fetch_gistda_data
from .impact import summarize_impact, water_status, weather_summary
from .models import FloodResponse, RiverReport, SceneConfig, WeatherReport
from .projection import GeoProjection
from .rain import RainSystem
from .river import fetch_river_data
from .scene import MeshScene
from .tiles import fetch_ground_tile
from .weather import fetch_weather

logger = logging.getLogger(__name__)


class SceneState(str, Enum):
    uninitialized = "uninitialized"
    initializing = "initializing"
    ready = "ready"
    disposed = "disposed"


# ── Results posted to FloodSceneController.apply ────────────────────────

@dataclass(frozen=True)
class WeatherLoaded:
    report: Optional[WeatherReport]


@dataclass(frozen=True)
class FloodLoaded:
    response: FloodResponse
    layer: Optional[FloodLayer] = None


@dataclass(frozen=True)
class GroundTileLoaded:
    image: object


@dataclass
class DataSources:
    """Blocking fetch callables; each returns its source's result or sentinel."""
    weather: Callable[[], Optional[WeatherReport]]
    flood: Callable[[], FloodResponse]
    river: Callable[[], RiverReport]
    buildings: Callable[[], BuildingLayer]
    ground_tile: Callable[[], object]

    @classmethod
    def live(cls, config: SceneConfig, projection, rng=None) -> "DataSources":
        return cls(
            weather=functools.partial(fetch_weather, config),
            flood=functools.partial(fetch_gistda_data, config),
            river=functools.partial(fetch_river_data, config),
            buildings=functools.partial(load_buildings, config, projection, rng),
            ground_tile=functools.partial(fetch_ground_tile, config.center_lat,
                                          config.center_lon, config.tile_zoom),
        )

    @classmethod
    def offline(cls) -> "DataSources":
        return cls(
            weather=lambda: None,
            flood=lambda: FloodResponse(success=False, error="offline"),
            river=RiverReport,
            buildings=BuildingLayer,
            ground_tile=lambda: None,
        )


# ── Frame scheduling and rendering ──────────────────────────────────────

class FrameScheduler:
    """Display-rate callbacks on the running asyncio loop."""

    def __init__(self, frame_rate: float = 60.0):
        self.interval = 1.0 / frame_rate

    def request(self, callback):
        return asyncio.get_running_loop().call_later(self.interval, callback)

    def cancel(self, handle):
        handle.cancel()


class HeadlessRenderer:
    """Pushes the camera into the scene graph every frame.

    Pixels are drawn by whichever viewer loads the exported GLB; this side
    only keeps the graph current and counts frames.
    """

    def __init__(self):
        self.frames = 0
        self.last_frame_at = None
        self.attached = True

    def render(self, scene, camera):
        scene.set_camera(camera)
        self.frames += 1
        self.last_frame_at = time.monotonic()

    def dispose(self):
        self.attached = False


# ── Controller ──────────────────────────────────────────────────────────

class FloodSceneController:
    """Owns the scene and everything that mutates it.

    ``start()`` must be called from inside a running event loop.  The frame
    loop begins immediately; remote data arrives later through ``apply()``,
    the single entry point for scene changes, which drops anything that
    shows up after ``dispose()``.
    """

    def __init__(self, config: SceneConfig = None, sources: DataSources = None,
                 scene_factory=MeshScene, scheduler=None, renderer=None,
                 rng=None):
        self.config = config or SceneConfig()
        self.projection = GeoProjection.from_config(self.config)
        self.sources = sources or DataSources.live(self.config, self.projection, rng)
        self.scene_factory = scene_factory
        self.scheduler = scheduler or FrameScheduler(self.config.frame_rate)
        self.renderer = renderer or HeadlessRenderer()
        self.camera = OrbitCamera()

        self.state = SceneState.uninitialized
        self.scene = None
        self.rain = None
        self.water_level = 0.0
        self.loading_step = 0

        self.weather = None
        self.river = None
        self.flood = None
        self.impact = []
        self.building_count = 0

        self.data_task = None
        self.tile_task = None
        self._frame_handle = None

    # ── Lifecycle ───────────────────────────────────────────────────────

    @property
    def disposed(self) -> bool:
        return self.state is SceneState.disposed

    @property
    def is_loading(self) -> bool:
        return self.loading_step < 4

    def start(self):
        """Build the static scene, start rendering, and kick off loading."""
        if self.state is not SceneState.uninitialized:
            raise RuntimeError(f"Cannot start a scene that is {self.state.value}")

        self.state = SceneState.initializing
        self.scene = self.scene_factory()

        size = self.config.plane_size
        ground = build_plane(size, y=GROUND_Y, uv_repeat=TILE_REPEAT)
        paint(ground, SCENE_STYLE['ground'],
              roughness=SCENE_STYLE['ground_roughness'])
        ground.metadata['receive_shadow'] = True
        self.scene.add_mesh('ground', ground)

        water = build_plane(size)
        paint(water, SCENE_STYLE['water'],
              roughness=SCENE_STYLE['water_roughness'],
              metallic=SCENE_STYLE['water_metalness'])
        self.scene.add_mesh('water', water, y_offset=self.water_level)

        loop = asyncio.get_running_loop()
        self.data_task = loop.create_task(self._load_data())
        self.tile_task = loop.create_task(self._load_ground_tile())

        self.state = SceneState.ready
        logger.info(f"Scene ready around {self.projection}")
        self._animate()

    def dispose(self):
        """Stop the frame loop and release graphics resources.  Idempotent."""
        if self.state is SceneState.disposed:
            return
        self.state = SceneState.disposed

        if self._frame_handle is not None:
            self.scheduler.cancel(self._frame_handle)
            self._frame_handle = None
        if self.scene is not None:
            self.scene.dispose()
        self.renderer.dispose()
        self.rain = None
        logger.info("Scene torn down")

    def _animate(self):
        if self.state is not SceneState.ready:
            return
        self._frame_handle = self.scheduler.request(self._animate)

        self.camera.update()
        if self.rain is not None:
            self.rain.step()
            self.scene.set_points('rain', self.rain.positions)
        self.renderer.render(self.scene, self.camera)

    # ── Data loading ────────────────────────────────────────────────────

    async def _load_data(self):
        """Fetch every source in turn and apply it.

        A source that raises is logged and replaced by its failure sentinel,
        so the remaining sources still load.
        """
        steps = (
            (1, self._load_weather, lambda e: WeatherLoaded(None)),
            (2, self._load_flood, lambda e: FloodLoaded(
                FloodResponse(success=False, error=str(e) or "Unknown Error"))),
            (2, self.sources.river, lambda e: RiverReport()),
            (3, self.sources.buildings, lambda e: BuildingLayer(
                success=False, error=str(e))),
        )
        for step, fetch, fallback in steps:
            self.loading_step = step
            try:
                result = await asyncio.to_thread(fetch)
            except Exception as e:
                logger.exception(f"Scene data source failed at loading step {step}")
                result = fallback(e)
            if not self.apply(result):
                return
        self.loading_step = 4

    def _load_weather(self) -> WeatherLoaded:
        return WeatherLoaded(self.sources.weather())

    def _load_flood(self) -> FloodLoaded:
        response = self.sources.flood()
        if not response.success:
            return FloodLoaded(response)
        return FloodLoaded(response, build_flood_layer(response.data, self.projection))

    async def _load_ground_tile(self):
        try:
            image = await asyncio.to_thread(self.sources.ground_tile)
        except Exception:
            logger.exception("Ground tile loading failed")
            return
        if image is not None:
            self.apply(GroundTileLoaded(image))

    def apply(self, result) -> bool:
        """Apply one finished fetch to the live scene.

        Returns False, leaving the scene untouched, once the scene has been
        disposed.
        """
        if self.state is SceneState.disposed:
            logger.debug(f"Discarding {type(result).__name__}: scene disposed")
            return False
        if self.scene is None:
            raise RuntimeError("Scene has not been started")

        if isinstance(result, WeatherLoaded):
            self.weather = result.report
            if result.report is not None and result.report.is_raining:
                self._start_rain()
        elif isinstance(result, FloodLoaded):
            self.flood = result.response
            if result.response.success:
                self.impact = summarize_impact(result.response.data)
            if result.layer is not None:
                for name, mesh in result.layer.meshes:
                    self.scene.add_mesh(name, mesh)
        elif isinstance(result, RiverReport):
            self.river = result
        elif isinstance(result, BuildingLayer):
            for name, mesh in result.meshes:
                self.scene.add_mesh(name, mesh)
            for name, sprite in result.sprites:
                self.scene.add_sprite(name, sprite)
            self.building_count += len(result.meshes)
        elif isinstance(result, GroundTileLoaded):
            ground = self.scene.geometry('ground')
            paint(ground, SCENE_STYLE['ground'],
                  roughness=SCENE_STYLE['ground_roughness'],
                  texture=result.image)
        else:
            raise TypeError(f"Unsupported scene update: {type(result).__name__}")
        return True

    def _start_rain(self):
        if self.rain is not None:
            return
        self.rain = RainSystem()
        self.scene.add_mesh('rain', self.rain.to_point_cloud())
        logger.info(f"Rain started with {len(self.rain)} drops")

    # ── User controls ───────────────────────────────────────────────────

    def set_water_level(self, level: float):
        self.water_level = float(level)
        if self.state is SceneState.ready:
            self.scene.set_offset('water', self.water_level)

    def resize(self, width: int, height: int):
        self.camera.set_aspect(width, height)

    def snapshot(self) -> bytes:
        """The current scene as GLB bytes."""
        if self.scene is None:
            raise RuntimeError("Scene has not been started")
        return self.scene.export_glb()

    def dashboard(self) -> dict:
        """Everything the overlay panel shows."""
        status_key, status_label = water_status(self.water_level)
        flood_data = self.flood.data if self.flood and self.flood.success else None
        weather = None
        if self.weather is not None:
            current = self.weather.current
            weather = {
                'temperature': current.temperature,
                'rain': current.rain,
                'showers': current.showers,
                'weather_code': current.weather_code,
                'is_raining': self.weather.is_raining,
                'summary': weather_summary(self.weather),
                'daily_precipitation': list(self.weather.daily_precipitation),
            }
        return {
            'state': self.state.value,
            'loading_step': self.loading_step,
            'is_loading': self.is_loading,
            'weather': weather,
            'river_discharge': self.river.discharge if self.river else None,
            'flood_feature_count': len(flood_data.get('features') or []) if flood_data else None,
            'flood_error': self.flood.error if self.flood and not self.flood.success else None,
            'impact': [s.to_dict() for s in self.impact],
            'building_count': self.building_count,
            'water_level': self.water_level,
            'water_status': status_key,
            'water_status_label': status_label,
        }
