import logging

import numpy as np
import pytest

from floodscene import labels
from floodscene.labels import Sprite, create_label
from floodscene.scene import MeshScene


def test_label_sprite_layout():
    sprite = create_label("วัดหาดใหญ่", 10.0, 25.0, -4.0)
    assert sprite.visible
    assert sprite.texture.size == (512, 128)
    assert sprite.texture.mode == 'RGBA'
    assert sprite.position == (10.0, 40.0, -4.0)
    assert sprite.scale == (40, 10, 1)
    assert sprite.render_order == 999
    assert sprite.depth_test is False


def test_label_draws_white_text_with_dark_outline():
    sprite = create_label("Hat Yai", 0.0, 0.0, 0.0)
    pixels = np.asarray(sprite.texture)
    drawn = pixels[pixels[:, :, 3] > 0]
    assert len(drawn) > 0
    # Fill pixels are white, stroke pixels are black
    assert (drawn[:, :3] == 255).all(axis=1).any()
    assert (drawn[:, :3] == 0).all(axis=1).any()
    # Text sits roughly in the middle of the canvas
    rows, cols = np.nonzero(pixels[:, :, 3])
    assert abs(cols.mean() - 256) < 40
    assert abs(rows.mean() - 64) < 30


def test_label_without_canvas_is_inert():
    sprite = create_label("ตลาด", 1.0, 2.0, 3.0, canvas_factory=lambda size: None)
    assert not sprite.visible
    assert sprite.texture is None
    assert sprite.to_mesh() is None


def test_label_canvas_error_is_inert():
    def broken(size):
        raise MemoryError("no canvas")

    sprite = create_label("ตลาด", 1.0, 2.0, 3.0, canvas_factory=broken)
    assert not sprite.visible


def test_sprite_mesh_is_textured_quad():
    sprite = create_label("A", 5.0, 0.0, 5.0)
    mesh = sprite.to_mesh()
    assert len(mesh.faces) == 2
    assert mesh.bounds[0] == pytest.approx([-15.0, 10.0, 5.0])
    assert mesh.bounds[1] == pytest.approx([25.0, 20.0, 5.0])
    assert mesh.metadata['billboard'] is True
    assert mesh.metadata['render_order'] == 999
    assert mesh.metadata['depth_test'] is False
    assert mesh.visual.material.baseColorTexture is not None


def test_scene_accepts_inert_sprite():
    scene = MeshScene()
    assert scene.add_sprite('label_1', Sprite.inert("x")) is None
    assert 'label_1' not in scene

    assert scene.add_sprite('label_2', create_label("y", 0, 0, 0)) == 'label_2'
    assert 'label_2' in scene


def test_sprite_dispose_releases_texture():
    sprite = create_label("z", 0, 0, 0)
    sprite.dispose()
    assert sprite.texture is None
    assert not sprite.visible
    sprite.dispose()


def test_missing_thai_font_is_warned_once(monkeypatch, caplog):
    monkeypatch.setattr(labels, 'LABEL_FONTS', ('NoSuchThaiFont-Bold.ttf',))
    monkeypatch.setattr(labels, 'LABEL_FALLBACK_FONTS', ('NoSuchLatinFont-Bold.ttf',))
    labels._load_font.cache_clear()
    try:
        with caplog.at_level(logging.WARNING, logger='floodscene.labels'):
            first = create_label("ตลาด", 0, 0, 0)
            create_label("วัด", 0, 0, 0)
    finally:
        labels._load_font.cache_clear()

    assert first.visible
    warnings = [r for r in caplog.records if 'Thai-capable' in r.getMessage()]
    assert len(warnings) == 1
    assert warnings[0].levelno == logging.WARNING
