#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/demo.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

import curses
import logging
import math
import time

from .config import MirrorConfig, SceneDescription
from .manager import ChainMirrorManager, MirrorManager
from .math_utils import Vec3
from .render_target import RenderTarget
from .renderer import Renderer, present

logger = logging.getLogger(__name__)

# palette index -> curses color
PALETTE = {
    1: curses.COLOR_YELLOW,
    2: curses.COLOR_CYAN,
    3: curses.COLOR_MAGENTA,
    4: curses.COLOR_GREEN,
    5: curses.COLOR_RED,
    6: curses.COLOR_BLUE,
}


class Orbit:
    """Orbital rig (pitch/yaw/distance around a target) driving a camera's pose."""

    def __init__(self, camera, target: Vec3):
        self.target = target
        offset = camera.position - target
        self.distance = max(0.5, offset.magnitude())
        self.pitch = math.asin(max(-1.0, min(1.0, offset.y / self.distance)))
        self.yaw = math.atan2(offset.x, -offset.z)

    def orbit(self, dyaw: float, dpitch: float):
        self.yaw += dyaw
        # Stay off the poles, where look-at loses its up reference
        self.pitch = max(-1.5, min(1.5, self.pitch + dpitch))

    def zoom(self, delta: float):
        """Positive = further, negative = closer."""
        self.distance = max(0.5, self.distance + delta)

    def apply(self, camera):
        cp = math.cos(self.pitch)
        offset = Vec3(math.sin(self.yaw) * cp, math.sin(self.pitch), -math.cos(self.yaw) * cp)
        camera.position = self.target + offset * self.distance
        camera.look_at(self.target)


class DemoApp:
    """
    Interactive viewer: orbit the viewer camera around a mirror room while
    the manager renders every reflection each frame.  The screen shows the
    viewer's camera or, cycling with 'm', any mirror's render target.
    """

    def __init__(self, stdscr, args):
        self.stdscr = stdscr
        self.running = True

        curses.curs_set(0)
        stdscr.nodelay(True)

        config = MirrorConfig.detect_terminal(
            max_recursion_depth=args.depth,
            target_resolution=args.resolution,
            variant=args.variant,
        )
        if args.no_color:
            config.use_color = False
        if args.ascii:
            config.use_braille = False
        if args.no_cull:
            config.use_culling = False

        desc = SceneDescription.load(args.scene) if args.scene else SceneDescription.demo_room()
        config = desc.apply(config)
        self.config = config

        scene, camera, mirrors = desc.build(config)
        self.scene = scene
        self.camera = camera
        self.mirrors = mirrors
        self.renderer = Renderer(scene, config)

        if config.variant == 'chain':
            self.manager = ChainMirrorManager(camera, mirrors, self.renderer)
        else:
            self.manager = MirrorManager(camera, mirrors, self.renderer, config)
        self.manager.start()

        self.orbit = Orbit(camera, desc.camera_target)
        self.view_index = 0      # 0 = viewer camera, i = mirrors[i - 1]
        self.show_report = True

        self.color_pairs = {}
        if config.use_color and curses.has_colors():
            curses.start_color()
            for idx, color in PALETTE.items():
                curses.init_pair(idx, color, curses.COLOR_BLACK)
                self.color_pairs[idx] = idx

        self.frame_count = 0
        self.fps = 0
        self.last_fps_time = time.time()

    def handle_input(self):
        try:
            key = self.stdscr.getch()
        except curses.error:
            key = -1

        if key == -1:
            return

        if key == ord('q'):
            self.running = False
        elif key == curses.KEY_UP:
            self.orbit.orbit(0.0, 0.1)
        elif key == curses.KEY_DOWN:
            self.orbit.orbit(0.0, -0.1)
        elif key == curses.KEY_RIGHT:
            self.orbit.orbit(0.1, 0.0)
        elif key == curses.KEY_LEFT:
            self.orbit.orbit(-0.1, 0.0)
        elif key in (ord('='), ord('+')):
            self.orbit.zoom(-0.5)
        elif key == ord('-'):
            self.orbit.zoom(0.5)
        elif key == ord('['):
            self.camera.adjust_fov(-5)
        elif key == ord(']'):
            self.camera.adjust_fov(5)
        elif key == ord('m'):
            self.view_index = (self.view_index + 1) % (len(self.mirrors) + 1)
        elif key == ord('v'):
            self.camera.hidden_layers ^= {self.config.frustum_layer}
        elif key == ord('l'):
            self.show_report = not self.show_report
        elif key in (ord('<'), ord(',')):
            self._set_depth(self.config.max_recursion_depth - 1)
        elif key in (ord('>'), ord('.')):
            self._set_depth(self.config.max_recursion_depth + 1)
        elif key == ord('c'):
            self.config.use_culling = not self.config.use_culling
        elif key == ord('b'):
            self.config.use_braille = not self.config.use_braille

    def _set_depth(self, depth: int):
        self.config.max_recursion_depth = max(0, min(30, depth))
        logger.info("max recursion depth -> %d", self.config.max_recursion_depth)

    def _screen_target(self, th: int, tw: int):
        w, h = (tw - 1) * 2, (th - 2) * 4
        if w <= 0 or h <= 0:
            return None
        return RenderTarget(w, h, label="screen")

    def draw_hud(self, start_time: float):
        th, tw = self.stdscr.getmaxyx()

        self.frame_count += 1
        now = time.time()
        if now - self.last_fps_time >= 1.0:
            self.fps = self.frame_count
            self.frame_count = 0
            self.last_fps_time = now

        ms = (now - start_time) * 1000
        view = "VIEWER" if self.view_index == 0 else self.mirrors[self.view_index - 1].name
        hdr = (f" {self.config.variant.upper()}"
               f" | DEPTH:{self.config.max_recursion_depth}"
               f" | MIRRORS:{len(self.mirrors)}"
               f" | VIEW:{view}"
               f" | FPS:{self.fps}"
               f" | {ms:.1f}ms ")
        try:
            self.stdscr.addstr(0, 0, hdr.center(tw - 1, '=')[:tw - 1],
                               curses.color_pair(0) | curses.A_BOLD)
        except curses.error:
            pass

        report = getattr(self.manager, 'report', None)
        if self.show_report and report is not None:
            for i, line in enumerate(report.lines()[:max(0, th - 2)]):
                try:
                    self.stdscr.addstr(i + 1, 0, line[:tw - 1])
                except curses.error:
                    pass

    def run(self):
        try:
            while self.running:
                start_time = time.time()
                self.handle_input()

                th, tw = self.stdscr.getmaxyx()
                screen = self._screen_target(th, tw)
                if screen is not None:
                    self.orbit.apply(self.camera)
                    self.camera.set_perspective(aspect=screen.w / screen.h)

                    self.manager.frame()

                    if self.view_index == 0:
                        self.renderer.render_camera(self.camera, screen)
                        shown = screen
                    else:
                        shown = self.mirrors[self.view_index - 1].target

                    self.stdscr.erase()
                    present(self.stdscr, shown, self.color_pairs, self.config.use_braille)
                    self.draw_hud(start_time)
                self.stdscr.refresh()
        finally:
            self.manager.shutdown()


def main(stdscr, args):
    """Entry point called from curses.wrapper."""
    app = DemoApp(stdscr, args)
    app.run()
