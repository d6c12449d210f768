from __future__ import annotations

from recursive_mirrors.camera import Camera
from recursive_mirrors.frustum import (
    CameraFrustum,
    MirrorFrustum,
    build_from_camera,
    build_from_mirror,
    contains_mirror,
    refresh,
)
from recursive_mirrors.math_utils import Vec3
from recursive_mirrors.scene import Scene, SceneObject

from conftest import add_mirror


def test_camera_frustum_point_tests(viewer: Camera) -> None:
    frustum = build_from_camera(viewer)
    assert isinstance(frustum, CameraFrustum)
    assert len(frustum.planes) == 6
    assert frustum.contains_point(Vec3(0, 0, 10))
    assert not frustum.contains_point(Vec3(0, 0, -10))      # behind
    assert not frustum.contains_point(Vec3(50, 0, 3))       # far right
    assert not frustum.contains_point(Vec3(0, 0, 500))      # beyond far plane


def test_camera_frustum_is_stale_until_refreshed(viewer: Camera) -> None:
    frustum = build_from_camera(viewer)
    ahead = Vec3(0, 0, 10)
    viewer.look_at(Vec3(0, 0, -10))
    assert frustum.contains_point(ahead)
    refresh(frustum)
    assert not frustum.contains_point(ahead)


def test_box_straddling_a_plane_is_contained(viewer: Camera) -> None:
    frustum = build_from_camera(viewer)
    # One corner just inside the left edge, the rest outside
    corners = [Vec3(-4.0, 0, 8), Vec3(-40, 0, 8), Vec3(-40, 1, 8), Vec3(-40, 0, 9)]
    assert frustum.contains_points(corners)
    assert not frustum.contains_points([Vec3(-40, 0, 8), Vec3(-41, 0, 8)])


def test_camera_frustum_contains_visible_mirror_only(scene: Scene, viewer: Camera, pool, facing_pair) -> None:
    a, b = facing_pair
    for m in (a, b):
        m.initialize(viewer, pool, frustum_container=scene)
    frustum = build_from_camera(viewer)
    assert contains_mirror(frustum, a)
    assert not contains_mirror(frustum, b)


def test_mirror_frustum_sees_facing_mirror_not_itself(scene: Scene, viewer: Camera, pool, facing_pair) -> None:
    a, b = facing_pair
    for m in (a, b):
        m.initialize(viewer, pool, frustum_container=scene)

    frustum = build_from_mirror(a, a.reflection_camera)
    assert isinstance(frustum, MirrorFrustum)
    # 4 sides + mirror surface + far
    assert len(frustum.planes) == 6
    assert frustum.contains_mirror(b)
    assert not frustum.contains_mirror(a)
    # Reflected space lies on the viewer's side of A
    assert frustum.contains_point(Vec3(0, 0, 0))
    assert not frustum.contains_point(Vec3(0, 0, 8))


def test_mirror_frustum_ignores_mirror_off_to_the_side(scene: Scene, viewer: Camera, pool, facing_pair) -> None:
    a, _ = facing_pair
    side = add_mirror(scene, "Side", (50, 0, -10), (-1, 0, 0))
    for m in (a, side):
        m.initialize(viewer, pool, frustum_container=scene)
    assert not build_from_mirror(a, a.reflection_camera).contains_mirror(side)


def test_degenerate_mirror_frustum_is_conservative(scene: Scene, viewer: Camera, pool, facing_pair) -> None:
    a, b = facing_pair
    for m in (a, b):
        m.initialize(viewer, pool, frustum_container=scene)
    # Eye on the mirror plane: every side plane collapses
    eye = Camera("On Plane", position=Vec3(0, 0, 5))
    frustum = build_from_mirror(a, eye)
    assert frustum.contains_mirror(b)


def test_debug_geometry_follows_refresh(viewer: Camera) -> None:
    holder = SceneObject("FrustumStorer", layer="Frustums")
    frustum = build_from_camera(viewer, holder, color=4)
    assert holder.mesh is not None
    assert len(holder.mesh.vertices) == 8
    assert len(holder.mesh.faces) == 12
    assert holder.color == 4
    first = holder.mesh
    frustum.refresh()
    assert holder.mesh is not first
