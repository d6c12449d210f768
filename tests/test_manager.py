from __future__ import annotations

import math

import pytest

from recursive_mirrors.camera import Camera
from recursive_mirrors.config import MirrorConfig
from recursive_mirrors.manager import (
    ChainMirrorManager,
    MirrorManager,
    SourceSnapshot,
    VisibilityReport,
)
from recursive_mirrors.math_utils import Vec3
from recursive_mirrors.reflection import MIRROR_X, is_mirrored
from recursive_mirrors.scene import Scene

from conftest import RecordingRenderer, add_mirror, assert_vec_close


def _manager(viewer, mirrors, renderer, depth: int) -> MirrorManager:
    manager = MirrorManager(viewer, mirrors, renderer,
                            MirrorConfig(max_recursion_depth=depth, target_resolution=8))
    manager.start()
    return manager


# --------------------------------------------------------------------- #
# Fixed chain                                                            #
# --------------------------------------------------------------------- #
def test_chain_initializes_each_mirror_from_previous(scene: Scene, viewer: Camera, renderer) -> None:
    mirrors = [add_mirror(scene, f"mirror{i}", (i * 3, 0, 5), (0, 0, -1)) for i in range(3)]
    manager = ChainMirrorManager(viewer, mirrors, renderer)
    manager.start()

    assert mirrors[0].source_camera is viewer
    assert mirrors[1].source_camera is mirrors[0].reflection_camera
    assert mirrors[2].source_camera is mirrors[1].reflection_camera
    assert mirrors[2].reflection_camera.depth == viewer.depth - 3


def test_chain_renders_in_reverse_every_frame(scene: Scene, viewer: Camera, renderer) -> None:
    mirrors = [add_mirror(scene, f"mirror{i}", (i * 3, 0, 5), (0, 0, -1)) for i in range(3)]
    manager = ChainMirrorManager(viewer, mirrors, renderer)
    manager.start()

    manager.frame()
    manager.frame()

    expected = ["mirror2 Camera", "mirror1 Camera", "mirror0 Camera"]
    assert renderer.order == expected * 2


def test_chain_updates_poses_front_to_back(scene: Scene, viewer: Camera, renderer) -> None:
    a = add_mirror(scene, "a", (0, 0, 5), (0, 0, -1))
    b = add_mirror(scene, "b", (0, 0, -5), (0, 0, 1))
    manager = ChainMirrorManager(viewer, [a, b], renderer)
    manager.start()
    manager.update()
    # b reflects a's freshly updated camera at z=12 across z=-5
    assert_vec_close(a.reflection_camera.position, (0, 0, 12))
    assert_vec_close(b.reflection_camera.position, (0, 0, -22))


def test_chain_shutdown_releases_targets(scene: Scene, viewer: Camera, renderer) -> None:
    mirrors = [add_mirror(scene, f"mirror{i}", (i * 3, 0, 5), (0, 0, -1)) for i in range(2)]
    manager = ChainMirrorManager(viewer, mirrors, renderer)
    manager.start()
    assert manager.pool.live == 2
    assert manager.shutdown() == []
    assert manager.pool.live == 0


# --------------------------------------------------------------------- #
# Recursive traversal                                                    #
# --------------------------------------------------------------------- #
def test_single_mirror_never_recurses_into_itself(scene: Scene, viewer: Camera, renderer) -> None:
    a = add_mirror(scene, "A", (0, 0, 5), (0, 0, -1))
    manager = _manager(viewer, [a], renderer, depth=10)

    manager.frame()

    assert renderer.order == ["A Camera"]
    assert manager.report.lines() == ["Main Camera can see A"]


def test_facing_mirrors_terminate_at_depth(viewer: Camera, renderer, facing_pair) -> None:
    a, b = facing_pair
    manager = _manager(viewer, [a, b], renderer, depth=3)

    manager.frame()

    # A -> B -> A -> B, rendered deepest first; culling alternates with parity
    assert renderer.calls == [
        ("B Camera", False),
        ("A Camera", True),
        ("B Camera", False),
        ("A Camera", True),
    ]
    assert manager.report.lines() == [
        "Main Camera can see A",
        "A Camera can see B",
        "B Camera can see A",
        "A Camera can see B",
    ]
    assert renderer.state.invert_culling is False


@pytest.mark.parametrize("depth, renders", [(0, 1), (1, 2), (2, 3), (5, 6)])
def test_render_count_tracks_depth(viewer: Camera, renderer, facing_pair, depth: int, renders: int) -> None:
    a, b = facing_pair
    manager = _manager(viewer, [a, b], renderer, depth=depth)
    manager.frame()
    assert len(renderer.calls) == renders
    assert renderer.order[-1] == "A Camera"


def test_depth_decreases_on_every_call(viewer: Camera, renderer, facing_pair, monkeypatch) -> None:
    a, b = facing_pair
    manager = _manager(viewer, [a, b], renderer, depth=4)
    seen = []
    original = manager.draw_recursive

    def spy(mirror, depth_remaining):
        seen.append((mirror.name, depth_remaining))
        original(mirror, depth_remaining)

    monkeypatch.setattr(manager, "draw_recursive", spy)
    manager.frame()
    assert seen == [("A", 4), ("B", 3), ("A", 2), ("B", 1), ("A", 0)]


def test_invisible_mirror_is_not_rendered_and_stays_clear(scene: Scene, viewer: Camera, renderer, facing_pair) -> None:
    a, b = facing_pair
    side = add_mirror(scene, "Side", (50, 0, -10), (-1, 0, 0))
    manager = _manager(viewer, [a, b, side], renderer, depth=3)
    side.target.set_pixel(0, 0, 1.0, 4)    # stale image from an earlier frame

    manager.frame()

    assert "Side Camera" not in renderer.order
    assert side.target.is_clear()
    assert all(mirror != "Side" for _, mirror in manager.report.pairs)


def test_camera_state_is_restored_after_frame(viewer: Camera, renderer, facing_pair) -> None:
    a, b = facing_pair
    manager = _manager(viewer, [a, b], renderer, depth=3)
    viewer_pose = viewer.pose()

    manager.frame()

    assert viewer.pose() == viewer_pose
    assert a.source_camera is viewer
    assert b.source_camera is a.reflection_camera
    assert_vec_close(a.reflection_camera.position, (0, 0, 12))
    assert_vec_close(b.reflection_camera.position, (0, 0, -22))


def test_draw_recursive_round_trips_source_state(viewer: Camera, renderer, facing_pair) -> None:
    a, b = facing_pair
    manager = _manager(viewer, [a, b], renderer, depth=3)
    manager.frame()

    b.source_camera = a.reflection_camera
    before = (b.source_camera, b.source_camera.pose())

    # B's nested A moves A's camera (B's source) while it recurses
    manager.draw_recursive(b, 2)

    assert (b.source_camera, b.source_camera.pose()) == before


def test_state_restored_when_render_fails(viewer: Camera, facing_pair) -> None:
    a, b = facing_pair

    class FailingRenderer(RecordingRenderer):
        def render_camera(self, camera, target=None):
            raise RuntimeError("device lost")

    renderer = FailingRenderer()
    manager = _manager(viewer, [a, b], renderer, depth=3)
    b.source_camera = a.reflection_camera
    a.update_pose()
    before = a.reflection_camera.pose()

    with pytest.raises(RuntimeError):
        manager.draw_recursive(b, 2)

    assert a.reflection_camera.pose() == before
    assert b.source_camera is a.reflection_camera
    assert renderer.state.invert_culling is False


def test_update_requires_start(viewer: Camera, renderer) -> None:
    manager = MirrorManager(viewer, [], renderer)
    with pytest.raises(RuntimeError):
        manager.update()


def test_report_is_rebuilt_each_frame(viewer: Camera, renderer, facing_pair) -> None:
    a, b = facing_pair
    manager = _manager(viewer, [a, b], renderer, depth=1)
    manager.frame()
    first = list(manager.report.lines())
    manager.frame()
    assert manager.report.lines() == first
    assert manager.report.text() == "".join(line + "\n" for line in first)


def test_start_hides_frustum_layer_and_shutdown_releases(scene: Scene, viewer: Camera, renderer, facing_pair) -> None:
    a, b = facing_pair
    manager = _manager(viewer, [a, b], renderer, depth=1)
    assert "Frustums" in viewer.hidden_layers
    assert "Frustums" in a.reflection_camera.hidden_layers
    assert scene.find("FrustumStorer") is not None
    assert manager.pool.live == 2
    assert manager.shutdown() == []
    assert manager.pool.live == 0


def test_snapshot_restores_camera_and_pose(viewer: Camera, scene: Scene, pool) -> None:
    mirror = add_mirror(scene, "M", (0, 0, 5), (0, 0, -1))
    mirror.initialize(viewer, pool)
    snap = SourceSnapshot.capture(mirror)
    other = Camera("Other")
    mirror.source_camera = other
    viewer.look_at(viewer.position + viewer.up)
    snap.restore()
    assert mirror.source_camera is viewer
    assert viewer.pose() == snap.pose


def test_visibility_report_lines() -> None:
    report = VisibilityReport()
    report.add("Main Camera", "A")
    assert len(report) == 1
    assert report.lines() == ["Main Camera can see A"]
    report.reset()
    assert report.text() == ""


# --------------------------------------------------------------------- #
# Mirror triangle: one mirror seeing two siblings, cycles of length 3   #
# --------------------------------------------------------------------- #
class ParityRenderer(RecordingRenderer):
    """Also records, per draw, whether the camera is an odd number of reflections from the viewer."""

    def __init__(self, scene: Scene, max_depth: int) -> None:
        super().__init__(scene)
        self.max_depth = max_depth
        self.levels: list[int] = []
        self.expected: list[bool] = []

    def render_camera(self, camera, target=None) -> None:
        super().render_camera(camera, target)
        # The top-level mirror is one reflection deep
        nesting = self.max_depth - self.levels[-1]
        self.expected.append(nesting % 2 == 0)


def _triangle(scene: Scene):
    """Three 4x4 mirrors on a radius-5 ring, 120 degrees apart, all facing the centre."""
    mirrors = []
    for name, angle in (("A", 0.0), ("B", 120.0), ("C", 240.0)):
        a = math.radians(angle)
        position = (5 * math.sin(a), 0, 5 * math.cos(a))
        normal = (-math.sin(a), 0, -math.cos(a))
        mirrors.append(add_mirror(scene, name, position, normal, width=4, depth=4))
    return mirrors


@pytest.fixture()
def triangle_setup(scene: Scene, monkeypatch):
    viewer = Camera("Main Camera", position=Vec3(0, 0, 0))
    mirrors = _triangle(scene)
    renderer = ParityRenderer(scene, max_depth=3)
    manager = _manager(viewer, mirrors, renderer, depth=3)
    original = manager.draw_recursive

    def tracked(mirror, depth_remaining):
        renderer.levels.append(depth_remaining)
        try:
            original(mirror, depth_remaining)
        finally:
            renderer.levels.pop()

    monkeypatch.setattr(manager, "draw_recursive", tracked)
    return viewer, mirrors, renderer, manager


def test_triangle_visits_both_siblings(triangle_setup) -> None:
    viewer, (a, b, c), renderer, manager = triangle_setup

    manager.frame()

    lines = manager.report.lines()
    assert lines[:2] == ["Main Camera can see A", "A Camera can see B"]
    assert "A Camera can see C" in lines
    # Every listed pair is one draw, and the viewer's mirror is drawn last
    assert len(renderer.calls) == len(manager.report)
    assert renderer.order[-1] == "A Camera"
    assert renderer.order.count("A Camera") >= 2


def test_triangle_culling_follows_reflection_parity(triangle_setup) -> None:
    viewer, (a, b, c), renderer, manager = triangle_setup

    manager.frame()

    flags = [inverted for _, inverted in renderer.calls]
    assert flags == renderer.expected
    assert True in flags and False in flags


def test_triangle_leaves_viewer_mirror_reflecting_viewer(triangle_setup) -> None:
    viewer, (a, b, c), renderer, manager = triangle_setup

    manager.frame()
    manager.frame()

    assert a.source_camera is viewer
    assert is_mirrored(a.reflection_camera.projection)
    assert_vec_close(a.reflection_camera.position, (0, 0, 10))
    # Culling on the second frame is not corrupted by the first
    assert [inverted for _, inverted in renderer.calls] == renderer.expected


def test_snapshot_restores_projection(viewer: Camera, scene: Scene, pool) -> None:
    mirror = add_mirror(scene, "M", (0, 0, 5), (0, 0, -1))
    mirror.initialize(viewer, pool)
    projection = viewer.projection.copy()
    snap = SourceSnapshot.capture(mirror)
    viewer.projection = viewer.projection @ MIRROR_X
    snap.restore()
    assert viewer.projection == projection
    assert not is_mirrored(viewer.projection)
