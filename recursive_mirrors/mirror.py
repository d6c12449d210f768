#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/mirror.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

"""
Planar mirror rendered with a second camera on the far side of its plane.

A mirror reflects whichever camera is currently its `source_camera`: the
viewer's camera, or the reflection camera of another mirror.  Only meshes
whose local +Y axis is the surface normal (planes) are supported.

Lifecycle: idle -> initialized -> active -> destroyed.
"""

import logging
from typing import Optional

from .camera import Camera
from .frustum import Frustum, build_from_mirror
from .math_utils import Plane, Quat, Vec3
from .mesh import Bounds
from .reflection import is_mirrored, reflect_camera
from .render_target import RenderTarget, RenderTargetPool
from .scene import Scene, SceneObject

logger = logging.getLogger(__name__)

IDLE = "idle"
INITIALIZED = "initialized"
ACTIVE = "active"
DESTROYED = "destroyed"


class MirrorStateError(RuntimeError):
    """A mirror operation was used outside the lifecycle state it needs."""


class MirrorVisibility:
    """
    Frustum-aware capability of a mirror: the surface's bounding box and
    the frustum of what is currently visible in the mirror.
    """

    def __init__(self, bounds: Bounds, debug_object: SceneObject, color: int):
        self.bounds = bounds
        self.debug_object = debug_object
        self.color = color
        self.frustum: Optional[Frustum] = None

    def rebuild(self, mirror: 'Mirror', camera: Camera) -> Frustum:
        self.frustum = build_from_mirror(mirror, camera, self.debug_object, self.color)
        return self.frustum


class Mirror:

    def __init__(self, name: str, surface: SceneObject, resolution: int = 512):
        self.name = name
        self.surface = surface
        self.resolution = resolution
        self.source_camera: Optional[Camera] = None
        self.reflection_camera: Optional[Camera] = None
        self.target: Optional[RenderTarget] = None
        self.visibility: Optional[MirrorVisibility] = None
        self.state = IDLE
        self._pool: Optional[RenderTargetPool] = None
        self._frustum_container: Optional[Scene] = None

    def __repr__(self):
        return f"Mirror({self.name!r}, {self.state})"

    # ------------------------------------------------------------------ #
    # Geometry                                                           #
    # ------------------------------------------------------------------ #
    @property
    def normal(self) -> Vec3:
        return self.surface.up

    def plane(self) -> Plane:
        return Plane(self.normal, self.surface.position)

    @property
    def bounds(self) -> Bounds:
        if self.visibility is None:
            raise MirrorStateError(f"{self.name} has no bounding box (not frustum-aware)")
        return self.visibility.bounds

    @property
    def frustum(self) -> Frustum:
        if self.visibility is None or self.visibility.frustum is None:
            raise MirrorStateError(f"{self.name} has no frustum")
        return self.visibility.frustum

    def world_bounds_corners(self):
        return [self.surface.transform_point(c) for c in self.bounds.corners()]

    def surface_corners(self):
        """The mirror rectangle in world space, in winding order."""
        lo, hi = self.bounds
        y = (lo.y + hi.y) * 0.5
        local = [Vec3(lo.x, y, lo.z), Vec3(hi.x, y, lo.z), Vec3(hi.x, y, hi.z), Vec3(lo.x, y, hi.z)]
        return [self.surface.transform_point(c) for c in local]

    # ------------------------------------------------------------------ #
    # Lifecycle                                                          #
    # ------------------------------------------------------------------ #
    def _require_resources(self, operation: str):
        if self.state in (IDLE, DESTROYED):
            raise MirrorStateError(f"cannot {operation} {self.name}: mirror is {self.state}")

    def initialize(self, source_camera: Camera, pool: Optional[RenderTargetPool] = None,
                   frustum_container: Optional[Scene] = None, frustum_color: int = 1,
                   frustum_layer: str = "Frustums"):
        """
        Create the reflection camera and its render target for reflecting
        `source_camera`.  Passing `frustum_container` makes the mirror
        frustum-aware: its bounding box is captured and its frustum's debug
        geometry is added to that scene on `frustum_layer`.
        """
        if self.state != IDLE:
            raise MirrorStateError(f"{self.name} is already {self.state}")

        self.source_camera = source_camera

        camera = source_camera.clone(f"{self.name} Camera")
        # Look out of the mirror until the first pose update
        camera.position = self.surface.position
        camera.rotation = Quat.look_rotation(self.surface.up, self.surface.forward)
        camera.depth = source_camera.depth - 1
        camera.enabled = False
        self.reflection_camera = camera

        self._pool = pool if pool is not None else RenderTargetPool()
        self.target = self._pool.acquire(self.resolution, self.resolution, label=camera.name)
        camera.target = self.target
        self.surface.texture = self.target
        self.state = INITIALIZED

        if frustum_container is not None:
            debug_object = frustum_container.add(
                SceneObject(f"{self.name} Frustum", layer=frustum_layer, color=frustum_color))
            self._frustum_container = frustum_container
            self.visibility = MirrorVisibility(self.surface.mesh.bounds(), debug_object, frustum_color)
            self.update_pose()
            self.update_frustum()

        logger.info("initialized %s reflecting %s", self.name, source_camera.name)

    def update_pose(self):
        """Move the reflection camera to the source camera mirrored across this plane."""
        self._require_resources("update pose of")
        pose = reflect_camera(self.source_camera, self.plane())
        camera = self.reflection_camera
        camera.position = pose.position
        camera.rotation = pose.rotation
        camera.projection = pose.projection
        self.state = ACTIVE

    def update_frustum(self) -> Frustum:
        """Rebuild the frustum from the current reflection camera pose."""
        self._require_resources("update frustum of")
        if self.visibility is None:
            raise MirrorStateError(f"{self.name} is not frustum-aware")
        return self.visibility.rebuild(self, self.reflection_camera)

    def clear_render_target(self):
        self._require_resources("clear render target of")
        self.target.clear()

    def render(self, renderer):
        """Draw the reflection camera's view into the render target."""
        self._require_resources("render")
        camera = self.reflection_camera
        with renderer.state.inverted_culling(is_mirrored(camera.projection)):
            renderer.render_camera(camera)

    def destroy(self):
        """Release the render target.  Repeated calls are no-ops."""
        if self.state == DESTROYED:
            return
        if self.state == IDLE:
            raise MirrorStateError(f"cannot destroy {self.name}: never initialized")

        self._pool.release(self.target)
        self.target = None
        self.reflection_camera.target = None
        self.surface.texture = None
        if self.visibility is not None:
            self._frustum_container.remove(self.visibility.debug_object)
        self.state = DESTROYED
        logger.info("destroyed %s", self.name)
