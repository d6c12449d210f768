#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/frustum.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

"""
Viewing volumes used to decide which mirrors a camera can see.

A frustum is a convex set of inward-facing planes.  Two flavours exist:

* CameraFrustum - the ordinary pyramid of a camera (side planes from its
  projection, near and far planes from its clip distances).
* MirrorFrustum - the pyramid from a mirror's reflection camera through
  the mirror's rectangle, clipped by the mirror surface itself, i.e. what
  is visible *in* the mirror.

Containment is conservative: a box is rejected only when all of its
corners lie outside a single plane, so a box that might be visible is
never dropped.  Degenerate planes (zero area) are skipped, which only
widens the volume.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from .math_utils import Vec3, Plane
from .mesh import Mesh
from .scene import SceneObject

logger = logging.getLogger(__name__)

# Outside-tolerance for containment tests
CONTAINS_EPSILON = 1e-6
# Keeps a mirror's own surface outside its frustum
NEAR_OFFSET = 1e-3

_BOX_EDGES = [
    (0, 1), (1, 2), (2, 3), (3, 0),
    (4, 5), (5, 6), (6, 7), (7, 4),
    (0, 4), (1, 5), (2, 6), (3, 7),
]


class Frustum(ABC):
    """
    Volume built from a camera (or a mirror's camera).

    `planes` is only valid for the pose the source camera had at the last
    refresh(); callers must refresh after moving the camera.
    """

    def __init__(self, camera, debug_object: Optional[SceneObject] = None, color: int = 1):
        self.camera = camera
        self.planes: List[Plane] = []
        self.debug_object = debug_object
        self.color = color

    @abstractmethod
    def _compute(self):
        """Return (planes, debug vertices, debug edges) for the current pose."""

    def refresh(self) -> 'Frustum':
        planes, vertices, edges = self._compute()
        self.planes = planes
        if self.debug_object is not None:
            self.debug_object.mesh = Mesh.wire(vertices, edges)
            self.debug_object.color = self.color
        return self

    def contains_point(self, p: Vec3) -> bool:
        return all(plane.signed_distance(p) >= -CONTAINS_EPSILON for plane in self.planes)

    def contains_points(self, points) -> bool:
        """False only if every point is outside one and the same plane."""
        for plane in self.planes:
            if all(plane.signed_distance(p) < -CONTAINS_EPSILON for p in points):
                return False
        return True

    def contains_mirror(self, mirror) -> bool:
        return self.contains_points(mirror.world_bounds_corners())


class CameraFrustum(Frustum):

    def _compute(self):
        cam = self.camera
        pos = cam.position
        right, up, fwd = cam.right, cam.up, cam.forward
        # Half-angle tangents straight from the projection, so a mirrored
        # (negative X) projection yields the same volume
        tan_x = 1.0 / abs(cam.projection.m[0][0])
        tan_y = 1.0 / abs(cam.projection.m[1][1])

        planes = [
            Plane(right + fwd * tan_x, pos),      # left
            Plane(fwd * tan_x - right, pos),      # right
            Plane(up + fwd * tan_y, pos),         # bottom
            Plane(fwd * tan_y - up, pos),         # top
            Plane(fwd, pos + fwd * cam.near),     # near
            Plane(-fwd, pos + fwd * cam.far),     # far
        ]

        vertices = []
        for dist in (cam.near, cam.far):
            c = pos + fwd * dist
            hx, hy = right * (tan_x * dist), up * (tan_y * dist)
            vertices += [c - hx - hy, c + hx - hy, c + hx + hy, c - hx + hy]
        return planes, [list(v) for v in vertices], _BOX_EDGES


class MirrorFrustum(Frustum):
    """What `camera` (normally the mirror's reflection camera) sees through `mirror`."""

    def __init__(self, mirror, camera, debug_object: Optional[SceneObject] = None, color: int = 1):
        super().__init__(camera, debug_object, color)
        self.mirror = mirror

    def _compute(self):
        eye = self.camera.position
        corners = self.mirror.surface_corners()
        center = sum(corners[1:], corners[0]) / len(corners)

        planes = []
        for a, b in zip(corners, corners[1:] + corners[:1]):
            n = (a - eye).cross(b - eye)
            side = Plane(n, eye)
            inside = side.signed_distance(center)
            # Zero-length edge, or the eye lies in the mirror plane
            if n.is_zero() or abs(inside) <= CONTAINS_EPSILON:
                logger.debug("%s: degenerate side plane dropped", self.mirror.name)
                continue
            if inside < 0:
                side = side.flipped()
            planes.append(side)

        # Near plane: the mirror surface, keeping the side away from the eye
        normal = self.mirror.normal
        if not normal.is_zero():
            near = Plane(normal, center)
            eye_side = near.signed_distance(eye)
            if eye_side > 0:
                near = near.flipped()
            if abs(eye_side) > CONTAINS_EPSILON:
                planes.append(Plane(near.normal, center + near.normal * NEAR_OFFSET))

        axis = center - eye
        far_dist = self.camera.far
        if not axis.is_zero():
            axis = axis.normalize()
            planes.append(Plane(-axis, eye + axis * far_dist))

        vertices = [list(eye)] + [list(c) for c in corners]
        for c in corners:
            ray = (c - eye).normalize()
            vertices.append(list(c + ray * far_dist))
        edges = [(0, 1), (0, 2), (0, 3), (0, 4),
                 (1, 2), (2, 3), (3, 4), (4, 1),
                 (1, 5), (2, 6), (3, 7), (4, 8),
                 (5, 6), (6, 7), (7, 8), (8, 5)]
        return planes, vertices, edges


def build_from_camera(camera, debug_object: Optional[SceneObject] = None, color: int = 1) -> Frustum:
    return CameraFrustum(camera, debug_object, color).refresh()


def build_from_mirror(mirror, viewpoint_camera, debug_object: Optional[SceneObject] = None,
                      color: int = 1) -> Frustum:
    """
    Volume visible through `mirror` from `viewpoint_camera`.  Rebuild (do not
    just refresh) whenever the camera the mirror reflects changes.
    """
    return MirrorFrustum(mirror, viewpoint_camera, debug_object, color).refresh()


def refresh(frustum: Frustum) -> Frustum:
    return frustum.refresh()


def contains_mirror(frustum: Frustum, mirror) -> bool:
    return frustum.contains_mirror(mirror)
