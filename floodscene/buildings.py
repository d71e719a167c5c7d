"""OSM building footprints: Overpass download, heights, meshes, labels."""

import re
import random
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import requests

from .constants import (OVERPASS_URL, HTTP_USER_AGENT, HTTP_TIMEOUT,
                        METERS_PER_LEVEL, FALLBACK_HEIGHT_RANGE,
                        NAMED_MIN_HEIGHT, NAME_TAGS, SCENE_STYLE)
from .geometry import build_polygon_mesh, paint
from .labels import create_label
from .models import BuildingRecord, Coordinate, SceneConfig

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')
LABEL_CLEARANCE = 5.0


@dataclass(frozen=True)
class BuildingLayer:
    """Finished building meshes and labels, ready to drop into a scene."""
    meshes: Tuple = ()
    sprites: Tuple = ()
    success: bool = True
    error: Optional[str] = None


# ── Height heuristic ────────────────────────────────────────────────────

def parse_levels(value) -> int:
    """Leading integer of a ``building:levels`` tag, 0 when there is none.

    Mirrors the lenient parsing editors apply to OSM: "5" and "5.5" and
    "5 floors" all give 5.
    """
    if value is None:
        return 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def building_label(tags: dict):
    """Display name for a building, Thai name first."""
    for key in NAME_TAGS:
        name = tags.get(key)
        if name:
            return name
    return None


def building_height(tags: dict, rng=None) -> float:
    """Extrusion height in meters for a building's tag bag.

    ``building:levels`` gives 4 m per level.  Without usable levels the
    height is drawn from 6-18 m (pass a seeded ``random.Random`` as *rng*
    for repeatable output).  Named buildings are raised to at least 25 m.
    """
    rng = rng or random
    levels = parse_levels(tags.get('building:levels'))
    if levels > 0:
        height = levels * METERS_PER_LEVEL
    else:
        height = rng.uniform(*FALLBACK_HEIGHT_RANGE)

    if building_label(tags):
        height = max(height, NAMED_MIN_HEIGHT)
    return float(height)


# ── Overpass ────────────────────────────────────────────────────────────

def overpass_query(config: SceneConfig) -> str:
    radius = config.building_radius
    lat, lon = config.center_lat, config.center_lon
    return f"""
        [out:json];
        (
          way["building"](around:{radius},{lat},{lon});
          relation["building"](around:{radius},{lat},{lon});
        );
        out body;
        >;
        out skel qt;
    """


def fetch_building_elements(config: SceneConfig) -> list:
    """Raw Overpass elements (nodes and ways) around the scene center."""
    logger.info("Fetching 3D buildings from Overpass...")
    response = requests.post(
        OVERPASS_URL,
        data={'data': overpass_query(config)},
        headers={'User-Agent': HTTP_USER_AGENT},
        timeout=HTTP_TIMEOUT,
    )
    response.raise_for_status()
    return response.json().get('elements', [])


def parse_osm_elements(elements, rng=None):
    """Resolve building ways to coordinate rings.

    Nodes are indexed by id first; way node ids with no matching node are
    dropped, and ways left with fewer than 3 points are skipped.
    """
    nodes = {}
    for el in elements:
        if el.get('type') == 'node':
            nodes[el['id']] = Coordinate(el['lat'], el['lon'])

    records = []
    for el in elements:
        tags = el.get('tags') or {}
        if el.get('type') != 'way' or not tags.get('building'):
            continue

        points = [nodes[nid] for nid in el.get('nodes', []) if nid in nodes]
        if len(points) < 3:
            continue

        records.append(BuildingRecord(
            osm_id=el['id'],
            points=points,
            tags=tags,
            height=building_height(tags, rng),
            label=building_label(tags),
        ))
    return records


# ── Meshes ──────────────────────────────────────────────────────────────

def build_building_layer(records, projection) -> BuildingLayer:
    """Extrude every building record and create labels for named ones."""
    meshes = []
    sprites = []
    for rec in records:
        ring = [(p.lon, p.lat) for p in rec.points]
        mesh = build_polygon_mesh(ring, projection, height=rec.height)
        if mesh is None:
            continue

        paint(mesh, SCENE_STYLE['building'],
              roughness=SCENE_STYLE['building_roughness'])
        mesh.metadata.update({
            'osm_id': rec.osm_id,
            'height': rec.height,
            'cast_shadow': True,
            'receive_shadow': True,
        })
        meshes.append((f"building_{rec.osm_id}", mesh))

        if rec.label:
            center = mesh.bounds.mean(axis=0)
            sprite = create_label(rec.label, float(center[0]),
                                  rec.height + LABEL_CLEARANCE,
                                  float(center[2]))
            sprites.append((f"label_{rec.osm_id}", sprite))

    logger.info(f"Built {len(meshes)} building meshes, {len(sprites)} labels")
    return BuildingLayer(meshes=tuple(meshes), sprites=tuple(sprites))


def load_buildings(config: SceneConfig, projection, rng=None) -> BuildingLayer:
    """Download, parse, and mesh the district's buildings.

    Any network or parse failure gives an empty, unsuccessful layer.
    """
    try:
        elements = fetch_building_elements(config)
        records = parse_osm_elements(elements, rng)
    except (requests.RequestException, ValueError, KeyError) as e:
        logger.error(f"Failed to fetch buildings: {e}")
        return BuildingLayer(success=False, error=str(e))

    layer = build_building_layer(records, projection)
    logger.info("Buildings loaded successfully")
    return layer
