#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/scene.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

from typing import Optional

from .math_utils import Vec3, Quat
from .mesh import Mesh

DEFAULT_LAYER = "Default"


class SceneObject:
    """
    A mesh instance placed in the world.

    Transform order is scale, then rotation, then translation.  `color` is
    the palette index the renderer writes (0 is reserved for transparent).
    `texture` is the slot a mirror binds its render target to.
    """
    __slots__ = ('name', 'mesh', 'position', 'rotation', 'scale', 'layer', 'color', 'texture')

    def __init__(self, name: str, mesh: Optional[Mesh] = None,
                 position: Vec3 = Vec3(0, 0, 0), rotation: Optional[Quat] = None,
                 scale: Vec3 = Vec3(1, 1, 1), layer: str = DEFAULT_LAYER, color: int = 1):
        self.name = name
        self.mesh = mesh
        self.position = position
        self.rotation = rotation if rotation is not None else Quat.identity()
        self.scale = scale
        self.layer = layer
        self.color = color
        self.texture = None

    def __repr__(self):
        return f"SceneObject({self.name!r}, position={self.position!r})"

    def transform_point(self, local: Vec3) -> Vec3:
        return self.position + self.rotation.rotate(local.scaled(self.scale))

    def world_vertices(self):
        if self.mesh is None:
            return []
        return [self.transform_point(Vec3.of(v)) for v in self.mesh.vertices]

    @property
    def up(self) -> Vec3:
        return self.rotation.up

    @property
    def forward(self) -> Vec3:
        return self.rotation.forward


class Scene:
    """Container for renderable objects, drawn in insertion order."""

    def __init__(self):
        self.objects = []

    def add(self, obj: SceneObject) -> SceneObject:
        self.objects.append(obj)
        return obj

    def add_mesh(self, name: str, mesh: Mesh, translation=(0.0, 0.0, 0.0), **kwargs) -> SceneObject:
        """Add a mesh instance at the given world position."""
        return self.add(SceneObject(name, mesh, position=Vec3.of(translation), **kwargs))

    def remove(self, obj: SceneObject):
        if obj in self.objects:
            self.objects.remove(obj)

    def find(self, name: str) -> Optional[SceneObject]:
        for obj in self.objects:
            if obj.name == name:
                return obj
        return None

    def visible_to(self, camera):
        """Objects on layers the camera draws."""
        hidden = camera.hidden_layers
        return [obj for obj in self.objects if obj.mesh is not None and obj.layer not in hidden]

    def clear(self):
        """Remove all objects from the scene."""
        self.objects.clear()
