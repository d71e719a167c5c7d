"""GeoJSON ring projection, triangulation, and extrusion."""

import math
import logging

import numpy as np
import trimesh
from shapely.geometry import Polygon
from shapely.validation import explain_validity

logger = logging.getLogger(__name__)

# Rotate the shape plane (x, z-as-y) so it lies horizontal in a Y-up scene.
_LAY_FLAT = trimesh.transformations.rotation_matrix(math.pi / 2, [1, 0, 0])
_PLANE_TO_GROUND = trimesh.transformations.rotation_matrix(-math.pi / 2, [1, 0, 0])


# ── Rings ───────────────────────────────────────────────────────────────

def clean_ring(ring):
    """Return the usable ``(lon, lat)`` points of a GeoJSON ring.

    Malformed and NaN points are dropped, consecutive repeats collapse to
    one point, and the closing point is removed when it repeats the first.
    """
    if not isinstance(ring, (list, tuple)):
        return []
    points = []
    for pt in ring:
        try:
            lon, lat = float(pt[0]), float(pt[1])
        except (TypeError, ValueError, IndexError):
            continue
        if math.isnan(lon) or math.isnan(lat):
            continue
        if points and points[-1] == (lon, lat):
            continue
        points.append((lon, lat))

    if len(points) > 1 and points[0] == points[-1]:
        points.pop()
    return points


def ring_to_polygon(ring, projection):
    """Project a ``[lon, lat]`` ring into a shapely polygon in (x, z).

    Returns None for rings with fewer than 3 usable points, no area, or a
    self-intersecting outline.
    """
    points = clean_ring(ring)
    if len(points) < 3:
        return None

    outline = []
    for lon, lat in points:
        p = projection.project(lat, lon)
        outline.append((p.x, p.z))

    polygon = Polygon(outline)
    if not polygon.is_valid:
        logger.warning(f"Skipping invalid ring with {len(outline)} points: "
                       f"{explain_validity(polygon)}")
        return None
    if polygon.is_empty or polygon.area <= 0:
        return None
    return polygon


def outer_rings(geometry):
    """Yield the outer ring of every polygon in a GeoJSON geometry.

    Inner rings (holes) are ignored.  Unsupported or missing geometry
    yields nothing.
    """
    if not isinstance(geometry, dict):
        return
    coords = geometry.get('coordinates')
    if not coords or not isinstance(coords, list):
        return

    geom_type = geometry.get('type')
    if geom_type == 'Polygon':
        polygons = [coords]
    elif geom_type == 'MultiPolygon':
        polygons = coords
    else:
        return
    for polygon in polygons:
        if polygon and isinstance(polygon, list):
            yield polygon[0]


# ── Mesh building ───────────────────────────────────────────────────────

def build_polygon_mesh(ring, projection, height: float = 0.0,
                       base_y: float = 0.0):
    """Turn a GeoJSON ring into a horizontal mesh.

    With ``height > 0`` the outline is extruded into a solid spanning
    ``[base_y, base_y + height]``; otherwise a flat triangulated surface is
    placed at ``base_y``.  Returns a ``trimesh.Trimesh`` or None when the
    ring cannot form a polygon.
    """
    polygon = ring_to_polygon(ring, projection)
    if polygon is None:
        return None

    try:
        if height > 0:
            mesh = trimesh.creation.extrude_polygon(polygon, height=height)
        else:
            verts_2d, faces = trimesh.creation.triangulate_polygon(polygon)
            verts = np.column_stack([verts_2d, np.zeros(len(verts_2d))])
            mesh = trimesh.Trimesh(vertices=verts, faces=faces, process=False)
    except Exception as e:
        logger.warning(f"Polygon triangulation failed: {e}")
        return None

    if len(mesh.faces) == 0:
        return None

    mesh.apply_transform(_LAY_FLAT)
    # Extrusion runs along +Z, which the rotation maps to -Y.
    mesh.apply_translation([0.0, base_y + max(height, 0.0), 0.0])
    return mesh


def build_plane(size: float, y: float = 0.0, uv_repeat: float = 1.0):
    """Square horizontal plane centred on the origin with UVs.

    Built in the XY plane and rotated flat, so texture rows run north to
    south the same way as a slippy-map tile.
    """
    half = size / 2.0
    verts = np.array([
        [-half, -half, 0.0],
        [half, -half, 0.0],
        [half, half, 0.0],
        [-half, half, 0.0],
    ])
    faces = np.array([[0, 1, 2], [0, 2, 3]])
    uv = np.array([
        [0.0, 0.0],
        [uv_repeat, 0.0],
        [uv_repeat, uv_repeat],
        [0.0, uv_repeat],
    ])

    mesh = trimesh.Trimesh(vertices=verts, faces=faces, process=False)
    mesh.apply_transform(_PLANE_TO_GROUND)
    mesh.apply_translation([0.0, y, 0.0])
    mesh.visual = trimesh.visual.TextureVisuals(uv=uv)
    return mesh


# ── Materials ───────────────────────────────────────────────────────────

def paint(mesh, color, roughness=None, metallic=None, double_sided=False,
          texture=None):
    """Attach a solid (optionally textured) PBR material to *mesh*."""
    alpha_mode = 'BLEND' if len(color) > 3 and color[3] < 1.0 else 'OPAQUE'
    material = trimesh.visual.material.PBRMaterial(
        baseColorFactor=color,
        baseColorTexture=texture,
        roughnessFactor=roughness,
        metallicFactor=metallic,
        alphaMode=alpha_mode,
        doubleSided=double_sided,
    )
    uv = getattr(mesh.visual, 'uv', None)
    mesh.visual = trimesh.visual.TextureVisuals(uv=uv, material=material)
    return mesh
