"""Damped orbit camera around the scene center."""

import math

import numpy as np

_EPS = 1e-6


class OrbitCamera:
    """Perspective camera orbiting a target point with inertial damping.

    Input (``rotate``/``zoom``) accumulates deltas; each ``update`` applies a
    ``damping`` fraction of the pending rotation and decays the rest, so the
    view keeps gliding for a few frames after input stops.  The polar angle
    is capped just above the horizon so the camera never dips below ground.
    """

    def __init__(self, position=(0.0, 400.0, 500.0), target=(0.0, 0.0, 0.0),
                 fov=45.0, aspect=16 / 9, near=1.0, far=5000.0,
                 damping=0.05, max_polar_angle=math.pi / 2 - 0.05):
        self.target = np.asarray(target, dtype=np.float64)
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far
        self.damping = damping
        self.max_polar_angle = max_polar_angle

        offset = np.asarray(position, dtype=np.float64) - self.target
        self.radius = float(np.linalg.norm(offset))
        self.theta = math.atan2(offset[0], offset[2])
        self.phi = math.acos(max(-1.0, min(1.0, offset[1] / self.radius)))

        self._delta_theta = 0.0
        self._delta_phi = 0.0
        self._scale = 1.0

    @property
    def position(self):
        sin_phi = math.sin(self.phi)
        offset = np.array([
            self.radius * sin_phi * math.sin(self.theta),
            self.radius * math.cos(self.phi),
            self.radius * sin_phi * math.cos(self.theta),
        ])
        return self.target + offset

    def rotate(self, d_theta: float, d_phi: float):
        self._delta_theta += d_theta
        self._delta_phi += d_phi

    def zoom(self, factor: float):
        if factor <= 0:
            raise ValueError(f"Zoom factor must be positive, got {factor}")
        self._scale *= factor

    def update(self) -> bool:
        """Advance one frame.  Returns True if the view changed."""
        moved = (abs(self._delta_theta) > _EPS or abs(self._delta_phi) > _EPS
                 or self._scale != 1.0)

        self.theta += self._delta_theta * self.damping
        self.phi += self._delta_phi * self.damping
        self.phi = max(_EPS, min(self.max_polar_angle, self.phi))
        self.radius = max(self.near, self.radius * self._scale)

        self._delta_theta *= 1.0 - self.damping
        self._delta_phi *= 1.0 - self.damping
        self._scale = 1.0
        return moved

    def set_aspect(self, width: int, height: int):
        if width > 0 and height > 0:
            self.aspect = width / height

    def transform(self):
        """Camera-to-world matrix looking from ``position`` at ``target``."""
        eye = self.position
        forward = eye - self.target
        z_axis = forward / np.linalg.norm(forward)
        x_axis = np.cross([0.0, 1.0, 0.0], z_axis)
        x_axis /= np.linalg.norm(x_axis)
        y_axis = np.cross(z_axis, x_axis)

        matrix = np.eye(4)
        matrix[:3, 0] = x_axis
        matrix[:3, 1] = y_axis
        matrix[:3, 2] = z_axis
        matrix[:3, 3] = eye
        return matrix

    def to_dict(self):
        return {
            'position': self.position.tolist(),
            'target': self.target.tolist(),
            'fov': self.fov,
            'aspect': self.aspect,
            'near': self.near,
            'far': self.far,
        }
