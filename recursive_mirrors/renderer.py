#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/renderer.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

from contextlib import contextmanager
from typing import Optional

from .camera import Camera
from .config import MirrorConfig
from .math_utils import Vec3
from .rasterizer import draw_line, fill_triangle_depth
from .render_target import RenderTarget, render_cell_ascii, render_cell_braille
from .scene import Scene


class RenderState:
    """Process-wide raster state shared by every camera draw."""

    def __init__(self):
        self.invert_culling = False

    @contextmanager
    def inverted_culling(self, invert: bool):
        """Set the culling sense for the duration of one draw, then restore it."""
        previous = self.invert_culling
        self.invert_culling = invert
        try:
            yield self
        finally:
            self.invert_culling = previous


class Renderer:
    """
    Wireframe renderer drawing a Scene from a Camera into a RenderTarget.

    Pipeline per object:
      world transform -> camera space -> near clip -> projection ->
      side culling -> backface culling -> depth pre-pass -> edges

    Backface culling compares the screen-space winding against
    `state.invert_culling`, so a camera whose projection mirrors X must be
    drawn with the culling sense inverted.
    """

    def __init__(self, scene: Scene, config: Optional[MirrorConfig] = None,
                 state: Optional[RenderState] = None):
        self.scene = scene
        self.config = config if config is not None else MirrorConfig()
        self.state = state if state is not None else RenderState()
        self.draw_count = 0

    def render_camera(self, camera: Camera, target: Optional[RenderTarget] = None):
        """Draw the scene as seen by `camera` into `target` (default: camera.target)."""
        target = target if target is not None else camera.target
        if target is None:
            raise ValueError(f"{camera.name} has no render target")
        self.draw_count += 1

        W, H = target.w, target.h
        half_w = W * 0.5
        half_h = H * 0.5
        near_clip = max(camera.near, self.config.near_clip)
        far_clip = min(camera.far, self.config.far_plane)
        use_culling = self.config.use_culling
        use_zbuffer = self.config.use_zbuffer
        invert = self.state.invert_culling

        cam_pos = camera.position
        right, up, forward = camera.right, camera.up, camera.forward
        proj = camera.projection

        for obj in self.scene.visible_to(camera):
            proj_v = []
            for w in obj.world_vertices():
                d = w - cam_pos
                rz = d.dot(forward)
                if rz <= near_clip or rz > far_clip:
                    proj_v.append(None)
                    continue
                ndc = proj.mul_vec3_project(Vec3(d.dot(right), d.dot(up), rz))
                proj_v.append((ndc.x * half_w + half_w, (1.0 - ndc.y) * half_h, rz))

            for face in obj.mesh.faces:
                pts = [proj_v[i] for i in face]
                if any(p is None for p in pts):
                    continue

                if len(pts) == 2:
                    draw_line(target, pts[0], pts[1], obj.color)
                    continue
                if len(pts) < 3:
                    continue

                # Side culling: every point beyond the same screen edge
                if (all(p[0] < 0 for p in pts) or all(p[0] > W for p in pts) or
                        all(p[1] < 0 for p in pts) or all(p[1] > H for p in pts)):
                    continue

                p0, p1, p2 = pts[0], pts[1], pts[2]
                cross = ((p1[0] - p0[0]) * (p2[1] - p0[1]) -
                         (p1[1] - p0[1]) * (p2[0] - p0[0]))
                if use_culling and not ((cross < 0) ^ invert):
                    continue

                if use_zbuffer:
                    for i in range(1, len(pts) - 1):
                        fill_triangle_depth(target, pts[0], pts[i], pts[i + 1])

                for i in range(len(pts)):
                    draw_line(target, pts[i], pts[(i + 1) % len(pts)], obj.color)


def present(stdscr, target: RenderTarget, color_pairs=None, use_braille: bool = True,
            top: int = 1):
    """
    Blit a render target onto the curses screen below `top` rows of HUD.
    `color_pairs` maps palette index -> curses color pair number.
    """
    import curses

    th, tw = stdscr.getmaxyx()
    rows, cols = th - top - 1, tw - 1
    if rows <= 0 or cols <= 0:
        return
    draw_cell = render_cell_braille if use_braille else render_cell_ascii
    for y, x, mask, c_idx in target.cells(cols, rows):
        attr = curses.color_pair(0)
        if color_pairs and c_idx in color_pairs:
            attr = curses.color_pair(color_pairs[c_idx])
        try:
            stdscr.addstr(y + top, x, draw_cell(mask), attr)
        except curses.error:
            pass
