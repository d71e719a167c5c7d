"""Text labels rendered to Pillow images and shown as billboard sprites."""

import functools
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import trimesh
from PIL import Image, ImageDraw, ImageFont

from .constants import (LABEL_CANVAS_SIZE, LABEL_FONT_SIZE, LABEL_FONTS,
                        LABEL_FALLBACK_FONTS, LABEL_SCALE, LABEL_OFFSET_Y,
                        LABEL_RENDER_ORDER)

logger = logging.getLogger(__name__)

_OUTLINE_RGBA = (0, 0, 0, 204)   # rgba(0,0,0,0.8)
_FILL_RGBA = (255, 255, 255, 255)
_STROKE_WIDTH = 4                # half of an 8 px centred canvas stroke


@dataclass
class Sprite:
    """A camera-facing textured quad.

    An inert sprite (``visible=False``, no texture) stands in when the label
    could not be rasterized; scenes accept it and draw nothing.
    """
    text: str = ""
    texture: Optional[Image.Image] = None
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    scale: Tuple[float, float, float] = LABEL_SCALE
    render_order: int = 0
    depth_test: bool = True
    transparent: bool = True
    visible: bool = True

    @classmethod
    def inert(cls, text: str = "") -> "Sprite":
        return cls(text=text, visible=False)

    def to_mesh(self):
        """Textured quad facing +Z at the sprite position, or None if inert."""
        if not self.visible or self.texture is None:
            return None

        hw, hh = self.scale[0] / 2.0, self.scale[1] / 2.0
        x, y, z = self.position
        verts = np.array([
            [x - hw, y - hh, z],
            [x + hw, y - hh, z],
            [x + hw, y + hh, z],
            [x - hw, y + hh, z],
        ])
        faces = np.array([[0, 1, 2], [0, 2, 3]])
        uv = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])

        material = trimesh.visual.material.PBRMaterial(
            baseColorTexture=self.texture,
            alphaMode='BLEND',
            doubleSided=True,
        )
        mesh = trimesh.Trimesh(vertices=verts, faces=faces, process=False)
        mesh.visual = trimesh.visual.TextureVisuals(uv=uv, material=material)
        mesh.metadata.update({
            'billboard': True,
            'render_order': self.render_order,
            'depth_test': self.depth_test,
            'text': self.text,
        })
        return mesh

    def dispose(self):
        if self.texture is not None:
            self.texture.close()
            self.texture = None
        self.visible = False


@functools.lru_cache(maxsize=None)
def _load_font(size: int = LABEL_FONT_SIZE):
    """First available bold font that can draw Thai.

    Without one, labels fall back to a Latin font and Thai names render as
    empty boxes, so that case is logged once as a warning.
    """
    for name in LABEL_FONTS:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    logger.warning(f"No Thai-capable label font found (tried {', '.join(LABEL_FONTS)}); "
                   f"Thai building names will not render")
    for name in LABEL_FALLBACK_FONTS:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def _new_canvas(size):
    return Image.new('RGBA', size, (0, 0, 0, 0))


def create_label(text: str, x: float, y: float, z: float,
                 canvas_factory=_new_canvas, font=None) -> Sprite:
    """Rasterize *text* and return a sprite hovering above (x, y, z).

    The text is centred on a 512x128 canvas, stroked dark first and then
    filled white so it reads against both sky and rooftops.  The sprite
    ignores the depth buffer and draws after everything else so nearby
    buildings never hide it.
    """
    try:
        canvas = canvas_factory(LABEL_CANVAS_SIZE)
    except (OSError, ValueError, MemoryError) as e:
        logger.warning(f"Label canvas unavailable for {text!r}: {e}")
        canvas = None
    if canvas is None:
        return Sprite.inert(text)

    draw = ImageDraw.Draw(canvas)
    font = font or _load_font()

    width, height = LABEL_CANVAS_SIZE
    left, top, right, bottom = draw.textbbox(
        (0, 0), text, font=font, stroke_width=_STROKE_WIDTH)
    origin = ((width - (right - left)) / 2 - left,
              (height - (bottom - top)) / 2 - top)

    draw.text(origin, text, font=font, fill=_FILL_RGBA,
              stroke_width=_STROKE_WIDTH, stroke_fill=_OUTLINE_RGBA)

    return Sprite(
        text=text,
        texture=canvas,
        position=(x, y + LABEL_OFFSET_Y, z),
        scale=LABEL_SCALE,
        render_order=LABEL_RENDER_ORDER,
        depth_test=False,
    )
