"""Scene graph held in a ``trimesh.Scene`` and exported as GLB."""

import logging
from abc import ABC, abstractmethod

import trimesh

from .constants import SCENE_STYLE, LIGHTS

logger = logging.getLogger(__name__)


class SceneDisposedError(RuntimeError):
    """Raised when a disposed scene is asked to change."""


class Scene(ABC):
    """What the scene builder needs from a scene graph."""

    @abstractmethod
    def add_mesh(self, name, mesh, y_offset=0.0):
        ...

    @abstractmethod
    def add_sprite(self, name, sprite):
        ...

    @abstractmethod
    def dispose(self):
        ...


class MeshScene(Scene):
    """Y-up scene of named trimesh nodes.

    Every object gets its own node so it can be moved (the water plane) or
    swapped (the rain cloud) without touching the others.  Sprites are kept
    alongside the meshes so their textures can be released on dispose.
    """

    def __init__(self, background=None, fog_density=None):
        self._scene = trimesh.Scene()
        self._sprites = {}
        self.disposed = False
        self._scene.metadata.update({
            'background': list(background or SCENE_STYLE['sky']),
            'fog': {'type': 'exp2', 'density': fog_density or SCENE_STYLE['fog_density']},
            'lights': [dict(light) for light in LIGHTS],
        })

    def _check(self):
        if self.disposed:
            raise SceneDisposedError("Scene has been disposed")

    def __contains__(self, name):
        return name in self._scene.graph.nodes

    def __len__(self):
        return len(self._scene.geometry)

    @property
    def names(self):
        return sorted(self._scene.geometry.keys())

    @property
    def metadata(self):
        return self._scene.metadata

    def geometry(self, name):
        return self._scene.geometry.get(name)

    def add_mesh(self, name, mesh, y_offset=0.0):
        self._check()
        transform = trimesh.transformations.translation_matrix([0.0, y_offset, 0.0])
        self._scene.add_geometry(mesh, geom_name=name, node_name=name,
                                 transform=transform)
        return name

    def add_sprite(self, name, sprite):
        """Add a label sprite; inert sprites are accepted and not drawn."""
        self._check()
        self._sprites[name] = sprite
        mesh = sprite.to_mesh()
        if mesh is None:
            return None
        return self.add_mesh(name, mesh)

    def set_offset(self, name, y):
        """Move node *name* vertically to ``y``."""
        self._check()
        matrix = trimesh.transformations.translation_matrix([0.0, y, 0.0])
        self._scene.graph.update(frame_to=name, matrix=matrix)

    def offset(self, name):
        matrix, _ = self._scene.graph.get(name)
        return float(matrix[1, 3])

    def set_points(self, name, positions):
        self._check()
        self._scene.geometry[name].vertices = positions

    def set_camera(self, camera):
        self._check()
        info = camera.to_dict()
        info['transform'] = camera.transform().tolist()
        self._scene.metadata['camera'] = info

    def export_glb(self) -> bytes:
        self._check()
        return self._scene.export(file_type='glb')

    def dispose(self):
        """Release geometry buffers, materials, and textures.  Runs once."""
        if self.disposed:
            return
        released = 0
        for geom in list(self._scene.geometry.values()):
            material = getattr(getattr(geom, 'visual', None), 'material', None)
            texture = getattr(material, 'baseColorTexture', None)
            if texture is not None:
                texture.close()
                material.baseColorTexture = None
                released += 1
        for sprite in self._sprites.values():
            sprite.dispose()

        names = list(self._scene.geometry.keys())
        if names:
            self._scene.delete_geometry(names)
        self._sprites.clear()
        self.disposed = True
        logger.info(f"Scene disposed: {len(names)} geometries, "
                    f"{released} textures released")
