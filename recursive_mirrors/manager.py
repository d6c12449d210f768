#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/manager.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

"""
Per-frame orchestration of every mirror in a scene.

ChainMirrorManager
    Each mirror reflects the previous mirror's camera in a fixed order
    (mirror 0 reflects the viewer).  Poses update front to back, renders
    run back to front so every texture a mirror shows is already drawn.

MirrorManager
    Mirrors reflect whatever their frustums reveal.  Starting from the
    mirrors the viewer can see, a depth-bounded depth-first traversal
    points each visible mirror at the reflection camera of the mirror that
    sees it, recurses, and renders on the way back out (post-order), so the
    deepest reflection is drawn first.  Cameras are shared mutable objects,
    so every level restores the source camera it started with before it
    renders or tests the next sibling.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .camera import Camera, CameraPose
from .config import MirrorConfig
from .frustum import Frustum, build_from_camera
from .math_utils import Mat4
from .mirror import Mirror
from .render_target import RenderTargetPool
from .scene import SceneObject

logger = logging.getLogger(__name__)

# Palette indices cycled through for frustum debug geometry
FRUSTUM_COLORS = (2, 3, 4, 5, 6)


@dataclass(frozen=True)
class SourceSnapshot:
    """
    Restore point: which camera a mirror reflects, and that camera's pose
    and projection.  A nested update_pose() on a mirror already higher up
    the traversal rewrites both.
    """
    mirror: Mirror
    camera: Camera
    pose: CameraPose
    projection: Mat4

    @classmethod
    def capture(cls, mirror: Mirror) -> 'SourceSnapshot':
        camera = mirror.source_camera
        return cls(mirror, camera, camera.pose(), camera.projection.copy())

    def restore(self):
        self.mirror.source_camera = self.camera
        self.camera.set_pose(self.pose)
        self.camera.projection = self.projection.copy()


class VisibilityReport:
    """'<camera> can see <mirror>' pairs found during one frame."""

    def __init__(self):
        self.pairs = []

    def __len__(self):
        return len(self.pairs)

    def reset(self):
        self.pairs = []

    def add(self, camera_name: str, mirror_name: str):
        self.pairs.append((camera_name, mirror_name))

    def lines(self) -> List[str]:
        return [f"{cam} can see {mirror}" for cam, mirror in self.pairs]

    def text(self) -> str:
        return "".join(line + "\n" for line in self.lines())


class ChainMirrorManager:
    """Fixed chain: mirror i reflects mirror i-1 (mirror 0 the viewer)."""

    def __init__(self, main_camera: Camera, mirrors: Sequence[Mirror], renderer,
                 pool: Optional[RenderTargetPool] = None):
        self.main_camera = main_camera
        self.mirrors = list(mirrors)
        self.renderer = renderer
        self.pool = pool if pool is not None else RenderTargetPool()

    def start(self):
        source = self.main_camera
        for mirror in self.mirrors:
            mirror.initialize(source, self.pool)
            source = mirror.reflection_camera

    def update(self):
        for mirror in self.mirrors:
            mirror.update_pose()

    def draw(self):
        for mirror in reversed(self.mirrors):
            mirror.render(self.renderer)

    def frame(self):
        self.update()
        self.draw()

    def shutdown(self):
        for mirror in self.mirrors:
            mirror.destroy()
        return self.pool.report_leaks()


class MirrorManager:
    """Flexible mirrors: visibility decided per camera, rendered recursively."""

    def __init__(self, main_camera: Camera, mirrors: Sequence[Mirror], renderer,
                 config: Optional[MirrorConfig] = None,
                 pool: Optional[RenderTargetPool] = None):
        self.main_camera = main_camera
        self.mirrors = list(mirrors)
        self.renderer = renderer
        self.config = config if config is not None else MirrorConfig()
        self.pool = pool if pool is not None else RenderTargetPool()
        self.main_frustum: Optional[Frustum] = None
        self.report = VisibilityReport()
        self._visible: List[Mirror] = []

    @property
    def max_recursion_depth(self) -> int:
        return self.config.max_recursion_depth

    def start(self):
        layer = self.config.frustum_layer
        container = self.renderer.scene
        # Reflection cameras are cloned from the viewer, so hide the layer first
        self.main_camera.hidden_layers.add(layer)
        for i, mirror in enumerate(self.mirrors):
            mirror.initialize(self.main_camera, self.pool, container,
                              frustum_color=FRUSTUM_COLORS[i % len(FRUSTUM_COLORS)],
                              frustum_layer=layer)

        storer = container.add(SceneObject("FrustumStorer", layer=layer))
        self.main_frustum = build_from_camera(self.main_camera, storer, color=FRUSTUM_COLORS[-1])

    def update(self):
        """Pose/visibility phase: refresh the viewer frustum, clear targets, pick visible mirrors."""
        if self.main_frustum is None:
            raise RuntimeError("MirrorManager.start() has not been called")
        self.report.reset()
        self.main_frustum.refresh()

        for mirror in self.mirrors:
            mirror.clear_render_target()

        self._visible = []
        for mirror in self.mirrors:
            if self.main_frustum.contains_mirror(mirror):
                self.report.add(self.main_camera.name, mirror.name)
                self._visible.append(mirror)

    def draw(self):
        """Draw phase: render every visible mirror and whatever it reflects."""
        for mirror in self._visible:
            mirror.source_camera = self.main_camera
            self.draw_recursive(mirror, self.max_recursion_depth)

    def frame(self):
        self.update()
        self.draw()

    def draw_recursive(self, mirror: Mirror, depth_remaining: int):
        """
        Render `mirror` after rendering every mirror visible inside it.

        `depth_remaining` bounds the nesting; at 0 the mirror renders
        without looking for further reflections.
        """
        logger.debug("enter %s (depth remaining %d)", mirror.name, depth_remaining)
        mirror.update_pose()
        mirror.update_frustum()

        snapshot = SourceSnapshot.capture(mirror)
        try:
            if depth_remaining > 0:
                for other in self.mirrors:
                    if other is mirror:
                        continue
                    if not mirror.frustum.contains_mirror(other):
                        continue

                    logger.debug("%s can see %s", mirror.reflection_camera.name, other.name)
                    # Names the seen mirror, not its reflection camera
                    self.report.add(mirror.reflection_camera.name, other.name)
                    other.source_camera = mirror.reflection_camera
                    self.draw_recursive(other, depth_remaining - 1)

                    snapshot.restore()
                    # The nested draw moved cameras this frustum was built from
                    mirror.update_frustum()
        finally:
            snapshot.restore()

        mirror.render(self.renderer)

    def shutdown(self):
        for mirror in self.mirrors:
            mirror.destroy()
        return self.pool.report_leaks()
