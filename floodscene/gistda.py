"""GISTDA satellite flood extent: STAC download and overlay meshes."""

import time
import logging
from dataclasses import dataclass
from typing import Tuple

import requests

from .constants import (GISTDA_URL, HTTP_USER_AGENT, HTTP_TIMEOUT,
                        FLOOD_OVERLAY_Y, SCENE_STYLE)
from .geometry import build_polygon_mesh, outer_rings, paint
from .models import FloodResponse, SceneConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FloodLayer:
    """Flat flood-extent meshes plus the collection they came from."""
    collection: dict
    meshes: Tuple = ()


def normalize_feature_collection(data: dict) -> dict:
    """Wrap a lone GeoJSON Feature into a one-element FeatureCollection."""
    if data.get('type') == 'Feature' and 'features' not in data:
        return {'type': 'FeatureCollection', 'features': [data]}
    return data


def fetch_gistda_data(config: SceneConfig) -> FloodResponse:
    """Latest one-day flood extent from GISTDA.

    ``_t`` is a millisecond cache-busting timestamp.
    """
    if not config.gistda_token:
        logger.warning("GISTDA_TOKEN is not set; the request will likely be rejected")

    params = {'token': config.gistda_token, '_t': int(time.time() * 1000)}
    try:
        logger.info("Fetching GISTDA flood extent...")
        response = requests.get(GISTDA_URL, params=params,
                                headers={'User-Agent': HTTP_USER_AGENT},
                                timeout=HTTP_TIMEOUT)
        if not response.ok:
            raise RuntimeError(f"HTTP error! status: {response.status_code}")
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("GISTDA response is not a GeoJSON object")
        data = normalize_feature_collection(payload)
        if not isinstance(data.get('features') or [], list):
            raise ValueError("GISTDA features is not a list")
    except (requests.RequestException, RuntimeError, ValueError) as e:
        logger.warning(f"GISTDA API error: {e}")
        return FloodResponse(success=False, error=str(e) or "Unknown Error")

    logger.info(f"GISTDA data processed: {len(data.get('features') or [])} features")
    return FloodResponse(success=True, data=data)


def build_flood_meshes(collection: dict, projection,
                       base_y: float = FLOOD_OVERLAY_Y):
    """Flat translucent overlay meshes, one per polygon outer ring.

    Features without geometry and rings that cannot be triangulated are
    skipped.
    """
    meshes = []
    for i, feature in enumerate(collection.get('features') or []):
        if not isinstance(feature, dict):
            continue
        geometry = feature.get('geometry')
        for j, ring in enumerate(outer_rings(geometry)):
            mesh = build_polygon_mesh(ring, projection, base_y=base_y)
            if mesh is None:
                continue
            paint(mesh, SCENE_STYLE['flood'], double_sided=True)
            mesh.metadata['depth_write'] = False
            meshes.append((f"flood_{i}_{j}", mesh))
    return meshes


def build_flood_layer(collection: dict, projection) -> FloodLayer:
    return FloodLayer(collection=collection,
                      meshes=tuple(build_flood_meshes(collection, projection)))
