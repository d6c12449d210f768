"""Shared fixtures: cameras, mirror scenes and a recording renderer double."""

from __future__ import annotations

import pytest

from recursive_mirrors.camera import Camera
from recursive_mirrors.config import MirrorConfig
from recursive_mirrors.math_utils import Quat, Vec3, UP
from recursive_mirrors.mesh import Mesh
from recursive_mirrors.mirror import Mirror
from recursive_mirrors.renderer import RenderState
from recursive_mirrors.render_target import RenderTargetPool
from recursive_mirrors.scene import Scene, SceneObject


class RecordingRenderer:
    """Records (camera name, culling inverted) per draw instead of rasterizing."""

    def __init__(self, scene: Scene | None = None) -> None:
        self.scene = scene if scene is not None else Scene()
        self.state = RenderState()
        self.calls: list[tuple[str, bool]] = []

    def render_camera(self, camera, target=None) -> None:
        self.calls.append((camera.name, self.state.invert_culling))

    @property
    def order(self) -> list[str]:
        return [name for name, _ in self.calls]


def add_mirror(scene: Scene, name: str, position, normal, width: float = 2.0,
               depth: float = 2.0, resolution: int = 8) -> Mirror:
    surface = scene.add(SceneObject(name, Mesh.plane(width, depth), position=Vec3.of(position),
                                    rotation=Quat.from_to_rotation(UP, Vec3.of(normal))))
    return Mirror(name, surface, resolution=resolution)


def assert_vec_close(a, b, tol: float = 1e-9) -> None:
    assert tuple(a) == pytest.approx(tuple(b), abs=tol)


@pytest.fixture()
def viewer() -> Camera:
    """Viewer at z=-2 looking down +Z."""
    cam = Camera("Main Camera", position=Vec3(0, 0, -2))
    cam.look_at(Vec3(0, 0, 10))
    return cam


@pytest.fixture()
def scene() -> Scene:
    s = Scene()
    s.add(SceneObject("Cube", Mesh.cube(), position=Vec3(0, 0, 0), scale=Vec3(0.5, 0.5, 0.5)))
    return s


@pytest.fixture()
def renderer(scene: Scene) -> RecordingRenderer:
    return RecordingRenderer(scene)


@pytest.fixture()
def pool() -> RenderTargetPool:
    return RenderTargetPool()


@pytest.fixture()
def facing_pair(scene: Scene) -> tuple[Mirror, Mirror]:
    """A at z=+5 facing the viewer, B at z=-5 behind the viewer facing A."""
    a = add_mirror(scene, "A", (0, 0, 5), (0, 0, -1))
    b = add_mirror(scene, "B", (0, 0, -5), (0, 0, 1))
    return a, b


@pytest.fixture()
def config() -> MirrorConfig:
    return MirrorConfig(max_recursion_depth=3, target_resolution=8)
