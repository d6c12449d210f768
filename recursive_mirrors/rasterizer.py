#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/rasterizer.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

import math

from .render_target import RenderTarget

# Pushes the solid pre-pass behind the wireframe edges drawn on top of it
DEPTH_BIAS = 0.05


def fill_triangle_depth(target: RenderTarget, p1, p2, p3):
    """
    Rasterize a triangle into the depth buffer only (occlusion pre-pass).
    p1, p2, p3 are (x, y, z) screen-space points, z being camera depth.
    """
    min_x = max(0, int(math.floor(min(p1[0], p2[0], p3[0]))))
    max_x = min(target.w - 1, int(math.ceil(max(p1[0], p2[0], p3[0]))))
    min_y = max(0, int(math.floor(min(p1[1], p2[1], p3[1]))))
    max_y = min(target.h - 1, int(math.ceil(max(p1[1], p2[1], p3[1]))))
    if min_x > max_x or min_y > max_y:
        return

    area = (p2[0] - p1[0]) * (p3[1] - p1[1]) - (p2[1] - p1[1]) * (p3[0] - p1[0])
    if area == 0:
        return
    inv_area = 1.0 / area

    for y in range(min_y, max_y + 1):
        py = y + 0.5
        for x in range(min_x, max_x + 1):
            px = x + 0.5
            w1 = ((p2[0] - px) * (p3[1] - py) - (p2[1] - py) * (p3[0] - px)) * inv_area
            w2 = ((p3[0] - px) * (p1[1] - py) - (p3[1] - py) * (p1[0] - px)) * inv_area
            w3 = 1.0 - w1 - w2
            if w1 < 0 or w2 < 0 or w3 < 0:
                continue
            z = w1 * p1[2] + w2 * p2[2] + w3 * p3[2] + DEPTH_BIAS
            target.write_depth(x, y, z)


def draw_line(target: RenderTarget, p1, p2, color_idx: int):
    """DDA line with per-pixel depth test."""
    x1, y1, z1 = p1
    x2, y2, z2 = p2
    dx = x2 - x1
    dy = y2 - y1
    steps = int(max(abs(dx), abs(dy)))
    if steps == 0:
        target.set_pixel(int(x1), int(y1), z1, color_idx)
        return

    x_inc = dx / steps
    y_inc = dy / steps
    z_inc = (z2 - z1) / steps
    cx, cy, cz = x1, y1, z1
    for _ in range(steps + 1):
        target.set_pixel(int(cx), int(cy), cz, color_idx)
        cx += x_inc; cy += y_inc; cz += z_inc
