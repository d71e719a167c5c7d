"""Configuration constants, endpoints, and scene styling."""

import os
import logging

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# ── Scene anchor (Hat Yai, Songkhla) ─────────────────────────────────────
CENTER_LAT = 7.0075
CENTER_LON = 100.4705
METERS_PER_DEGREE = 111320.0

# ── Upstream endpoints ───────────────────────────────────────────────────
WEATHER_URL = "https://api.open-meteo.com/v1/forecast"
RIVER_URL = "https://flood-api.open-meteo.com/v1/flood"
GISTDA_URL = ("https://api-gateway.gistda.or.th/api/2.0/resources/stac/flood/"
              "collections/flood1day_r2/items/items_flood1day_r2")
OVERPASS_URL = "https://overpass-api.de/api/interpreter"
TILE_URL = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"

GISTDA_TOKEN = os.environ.get("GISTDA_TOKEN", "").strip()
HTTP_USER_AGENT = "FloodScene/0.1 (flood visualization)"
HTTP_TIMEOUT = 60            # seconds

# ── Scene layout ─────────────────────────────────────────────────────────
TILE_ZOOM = 16
TILE_REPEAT = 4
PLANE_SIZE = 2000.0          # meters, ground and water planes
GROUND_Y = -0.1
FLOOD_OVERLAY_Y = 2.0
BUILDING_RADIUS = 450        # meters, Overpass "around" filter
WATER_LEVEL_MIN = 0.0
WATER_LEVEL_MAX = 30.0
WATER_LEVEL_STEP = 0.5
FRAME_RATE = 60.0

# ── Building height heuristic ────────────────────────────────────────────
METERS_PER_LEVEL = 4.0
FALLBACK_HEIGHT_RANGE = (6.0, 18.0)
NAMED_MIN_HEIGHT = 25.0
NAME_TAGS = ('name:th', 'name', 'name:en')

# ── Rain particles ───────────────────────────────────────────────────────
RAIN_COUNT = 15000
RAIN_SPREAD = 1000.0
RAIN_CEILING = 600.0
RAIN_FALL_SPEED = 4.0

# ── Labels ───────────────────────────────────────────────────────────────
LABEL_CANVAS_SIZE = (512, 128)
LABEL_FONT_SIZE = 40
LABEL_FONTS = (
    'Sarabun-Bold.ttf',
    'NotoSansThai-Bold.ttf',
    'Garuda-Bold.ttf',
    'Loma-Bold.ttf',
    'tahomabd.ttf',
)
# No Thai glyphs in these
LABEL_FALLBACK_FONTS = ('DejaVuSans-Bold.ttf',)
LABEL_SCALE = (40.0, 10.0, 1.0)
LABEL_OFFSET_Y = 15.0
LABEL_RENDER_ORDER = 999

# Layer styling, RGBA in 0-1 floats
SCENE_STYLE = {
    'sky': [0.529, 0.808, 0.922, 1.0],      # #87CEEB
    'fog_density': 0.0015,
    'ground': [1.0, 1.0, 1.0, 1.0],
    'ground_roughness': 0.9,
    'water': [0.231, 0.510, 0.965, 0.6],    # #3b82f6
    'water_roughness': 0.1,
    'water_metalness': 0.1,
    'flood': [1.0, 0.0, 0.0, 0.3],
    'building': [0.898, 0.906, 0.922, 1.0], # #e5e7eb
    'building_roughness': 0.5,
    'rain': [0.667, 0.667, 0.667, 0.6],     # #aaaaaa
}

# Light rig handed to the viewer alongside the GLB
LIGHTS = (
    {'type': 'hemisphere', 'sky': '#ffffff', 'ground': '#444444',
     'intensity': 0.6, 'position': (0.0, 200.0, 0.0)},
    {'type': 'directional', 'color': '#ffffff', 'intensity': 1.0,
     'position': (100.0, 500.0, 100.0), 'cast_shadow': True,
     'shadow_map_size': 2048, 'shadow_extent': 500.0},
    {'type': 'ambient', 'color': '#404040', 'intensity': 0.5},
)

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)
