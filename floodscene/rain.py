"""Falling-rain particle system."""

import numpy as np
import trimesh

from .constants import (RAIN_COUNT, RAIN_SPREAD, RAIN_CEILING,
                        RAIN_FALL_SPEED, SCENE_STYLE)


class RainSystem:
    """Fixed set of drops spread over the district that fall and wrap.

    Positions live in one ``(count, 3)`` float32 array that is updated in
    place each frame.
    """

    def __init__(self, count=RAIN_COUNT, spread=RAIN_SPREAD,
                 ceiling=RAIN_CEILING, speed=RAIN_FALL_SPEED, rng=None):
        rng = rng or np.random.default_rng()
        self.ceiling = ceiling
        self.speed = speed
        self.positions = np.empty((count, 3), dtype=np.float32)
        self.positions[:, 0] = (rng.random(count) - 0.5) * spread
        self.positions[:, 1] = rng.random(count) * ceiling
        self.positions[:, 2] = (rng.random(count) - 0.5) * spread

    def __len__(self):
        return len(self.positions)

    def step(self):
        y = self.positions[:, 1]
        y -= self.speed
        y[y < 0] = self.ceiling

    def to_point_cloud(self):
        colors = np.tile(np.round(np.array(SCENE_STYLE['rain']) * 255).astype(np.uint8),
                         (len(self.positions), 1))
        cloud = trimesh.PointCloud(self.positions, colors=colors)
        cloud.metadata.update({'point_size': 0.5, 'transparent': True})
        return cloud
