#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/mesh.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

import logging
from typing import NamedTuple

from .math_utils import Vec3

logger = logging.getLogger(__name__)


class Bounds(NamedTuple):
    """Axis-aligned box in mesh-local space."""
    min: Vec3
    max: Vec3

    @property
    def center(self) -> Vec3:
        return (self.min + self.max) * 0.5

    def corners(self):
        lo, hi = self.min, self.max
        return [Vec3(x, y, z)
                for x in (lo.x, hi.x)
                for y in (lo.y, hi.y)
                for z in (lo.z, hi.z)]


class Mesh:
    """
    Vertex list plus faces given as index lists.

    Faces of 3+ indices are polygons (front face = clockwise seen from
    outside, as in the demo cube); 2-index faces are bare line segments,
    which are never culled.
    """

    def __init__(self, vertices=None, faces=None):
        self.vertices = [list(map(float, v)) for v in vertices] if vertices else []
        self.faces = [list(f) for f in faces] if faces else []

    def load_from_obj(self, filename):
        try:
            with open(filename, 'r') as f:
                for line in f:
                    if line.startswith('v '):
                        self.vertices.append([float(x) for x in line.split()[1:4]])
                    elif line.startswith('f '):
                        # v/vt/vn -> v
                        face = [int(x.split('/')[0]) - 1 for x in line.split()[1:]]
                        self.faces.append(face)
        except (OSError, ValueError) as e:
            logger.warning("could not load %r: %s", filename, e)
            self.vertices, self.faces = [], []

        if not self.vertices or not self.faces:
            self._make_demo_cube()

    def _make_demo_cube(self):
        """Unit cube centered at origin, the fallback geometry."""
        self.vertices = [
            [-1, -1, -1], [ 1, -1, -1], [ 1,  1, -1], [-1,  1, -1],
            [-1, -1,  1], [ 1, -1,  1], [ 1,  1,  1], [-1,  1,  1],
        ]
        self.faces = [
            [0, 1, 2, 3],  # front
            [5, 4, 7, 6],  # back
            [4, 0, 3, 7],  # left
            [1, 5, 6, 2],  # right
            [3, 2, 6, 7],  # top
            [4, 5, 1, 0],  # bottom
        ]

    def bounds(self) -> Bounds:
        if not self.vertices:
            zero = Vec3(0, 0, 0)
            return Bounds(zero, zero)
        xs, ys, zs = zip(*self.vertices)
        return Bounds(Vec3(min(xs), min(ys), min(zs)), Vec3(max(xs), max(ys), max(zs)))

    @classmethod
    def cube(cls):
        mesh = cls()
        mesh._make_demo_cube()
        return mesh

    @classmethod
    def from_obj(cls, filename):
        mesh = cls()
        mesh.load_from_obj(filename)
        return mesh

    @classmethod
    def plane(cls, width: float = 2.0, depth: float = 2.0):
        """
        Flat rectangle in the local XZ plane whose front face looks along
        +Y, the mirror surface convention (local up = surface normal).
        """
        hw, hd = width / 2.0, depth / 2.0
        return cls(
            vertices=[[-hw, 0, -hd], [hw, 0, -hd], [hw, 0, hd], [-hw, 0, hd]],
            faces=[[0, 1, 2, 3]],
        )

    @classmethod
    def wire(cls, vertices, edges):
        """Line-only mesh (debug geometry)."""
        return cls(vertices=vertices, faces=[list(e) for e in edges])
