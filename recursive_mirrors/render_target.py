#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/render_target.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

import logging

logger = logging.getLogger(__name__)

TRANSPARENT = 0
FAR_DEPTH = float('inf')


class RenderTarget:
    """
    Off-screen color + depth buffer.

    `color` holds one palette index per pixel; index 0 is fully
    transparent, so a cleared target shows nothing when composited.
    A released target refuses further drawing.
    """
    __slots__ = ['w', 'h', 'color', 'depth', 'released', 'label']

    # Braille dot mapping for 2x4 grid
    #  1 4
    #  2 5
    #  3 6
    #  7 8
    BRAILLE_REMAP = [0x01, 0x02, 0x04, 0x40, 0x08, 0x10, 0x20, 0x80]

    def __init__(self, w: int, h: int, label: str = ""):
        if w <= 0 or h <= 0:
            raise ValueError(f"render target size must be positive, got {w}x{h}")
        self.w, self.h = w, h
        self.label = label
        self.released = False
        self.color = [[TRANSPARENT] * w for _ in range(h)]
        self.depth = [[FAR_DEPTH] * w for _ in range(h)]

    def __repr__(self):
        state = "released" if self.released else "live"
        return f"RenderTarget({self.label!r}, {self.w}x{self.h}, {state})"

    def _check_live(self):
        if self.released:
            raise RuntimeError(f"{self!r} has been released")

    def clear(self, color_idx: int = TRANSPARENT):
        """Reset every pixel to `color_idx` (transparent by default) and depth to far."""
        self._check_live()
        for y in range(self.h):
            self.color[y] = [color_idx] * self.w
            self.depth[y] = [FAR_DEPTH] * self.w

    def is_clear(self) -> bool:
        return all(px == TRANSPARENT for row in self.color for px in row)

    def set_pixel(self, x, y, z, color_idx):
        if x < 0 or x >= self.w or y < 0 or y >= self.h:
            return
        if z < self.depth[y][x]:
            self.depth[y][x] = z
            if color_idx != TRANSPARENT:
                self.color[y][x] = color_idx

    def write_depth(self, x, y, z):
        """Depth-only write (occlusion pre-pass)."""
        if z < self.depth[y][x]:
            self.depth[y][x] = z

    def cells(self, cols: int, rows: int):
        """
        Downsample onto a grid of 2x4-dot terminal cells.

        Yields (row, col, mask, color_idx) for every non-empty cell; the
        color is taken from the nearest lit pixel in the cell.
        """
        dots_w, dots_h = cols * 2, rows * 4
        sx = self.w / dots_w
        sy = self.h / dots_h
        for cy in range(rows):
            for cx in range(cols):
                mask = 0
                best_z = FAR_DEPTH
                best_c = TRANSPARENT
                for bit in range(8):
                    dx, dy = bit // 4, bit % 4
                    px = int((cx * 2 + dx) * sx)
                    py = int((cy * 4 + dy) * sy)
                    c = self.color[py][px]
                    if c != TRANSPARENT:
                        mask |= 1 << bit
                        if self.depth[py][px] <= best_z:
                            best_z = self.depth[py][px]
                            best_c = c
                if mask:
                    yield cy, cx, mask, best_c


def render_cell_ascii(mask: int) -> str:
    """ASCII density character for a 2x4 cell mask (no Braille available)."""
    if not mask:
        return ' '
    chars = " .:-=+*#%@"
    density = bin(mask).count('1')
    return chars[density] if density < len(chars) else '@'


def render_cell_braille(mask: int) -> str:
    """Unicode Braille character for a 2x4 cell mask."""
    if not mask:
        return ' '
    b = sum(RenderTarget.BRAILLE_REMAP[i] for i in range(8) if mask & (1 << i))
    return chr(0x2800 + b)


class RenderTargetPool:
    """
    Allocator for temporary render targets.

    Every `acquire` must be paired with a `release`; `live` counts the
    outstanding ones so teardown can detect leaked buffers.
    """

    def __init__(self):
        self._live = []

    @property
    def live(self) -> int:
        return len(self._live)

    def acquire(self, w: int, h: int, label: str = "") -> RenderTarget:
        target = RenderTarget(w, h, label)
        self._live.append(target)
        logger.info("allocated render target %s (%dx%d)", label or "<anonymous>", w, h)
        return target

    def release(self, target: RenderTarget):
        if not any(t is target for t in self._live):
            raise ValueError(f"{target!r} is not held by this pool")
        self._live = [t for t in self._live if t is not target]
        target.released = True
        logger.info("released render target %s", target.label or "<anonymous>")

    def report_leaks(self):
        """Log and return the targets still outstanding."""
        leaked = list(self._live)
        for target in leaked:
            logger.warning("render target leaked: %r", target)
        return leaked
