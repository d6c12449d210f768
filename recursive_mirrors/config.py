#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/config.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

import json
import os
from dataclasses import dataclass, field, replace
from typing import List, Optional

from .camera import Camera
from .math_utils import Vec3, Quat, UP
from .mesh import Mesh
from .mirror import Mirror
from .scene import Scene, SceneObject

VARIANTS = ('flexible', 'chain')


@dataclass
class MirrorConfig:
    """Configuration for mirror traversal and the rendering pipeline."""
    max_recursion_depth: int = 10
    target_resolution: int = 512
    frustum_layer: str = "Frustums"
    variant: str = "flexible"
    near_clip: float = 0.1
    far_plane: float = 150.0
    use_culling: bool = True
    use_zbuffer: bool = True
    use_color: bool = True
    use_braille: bool = True

    def __post_init__(self):
        if isinstance(self.max_recursion_depth, bool) or not isinstance(self.max_recursion_depth, int):
            raise ValueError(f"max_recursion_depth must be an int, got {self.max_recursion_depth!r}")
        if self.max_recursion_depth < 0:
            raise ValueError("max_recursion_depth must be >= 0")
        if self.target_resolution <= 0:
            raise ValueError("target_resolution must be positive")
        if not 0 < self.near_clip < self.far_plane:
            raise ValueError("expected 0 < near_clip < far_plane")
        if self.variant not in VARIANTS:
            raise ValueError(f"variant must be one of {VARIANTS}, got {self.variant!r}")

    @classmethod
    def detect_terminal(cls, **overrides) -> 'MirrorConfig':
        """
        Default config with color/Braille support guessed from TERM and LANG.
        Accurate color detection needs curses initialised, so this is a
        pre-init guess.
        """
        term = os.environ.get('TERM', '').lower()
        lang = os.environ.get('LANG', '').lower()

        is_dumb = term in ('dumb', 'unknown')
        is_linux_console = term == 'linux'
        supports_utf8 = 'utf-8' in lang or 'utf8' in lang

        params = dict(
            use_color=not is_dumb,
            # Linux console font often lacks braille
            use_braille=supports_utf8 and not is_linux_console,
        )
        params.update(overrides)
        return cls(**params)


def _vec(data: dict, key: str, default=None) -> Vec3:
    value = data.get(key, default)
    if value is None:
        raise ValueError(f"missing required key {key!r}")
    try:
        return Vec3.of(value)
    except (TypeError, ValueError):
        raise ValueError(f"{key!r} must be a list of 3 numbers, got {value!r}") from None


@dataclass
class MirrorSpec:
    name: str
    position: Vec3
    normal: Vec3
    width: float = 2.0
    depth: float = 2.0
    color: int = 2

    @classmethod
    def from_dict(cls, data: dict) -> 'MirrorSpec':
        if 'name' not in data:
            raise ValueError("mirror entry is missing 'name'")
        normal = _vec(data, 'normal')
        if normal.is_zero():
            raise ValueError(f"mirror {data['name']!r} has a zero 'normal'")
        return cls(data['name'], _vec(data, 'position'), normal,
                   float(data.get('width', 2.0)), float(data.get('depth', 2.0)),
                   int(data.get('color', 2)))


@dataclass
class PropSpec:
    name: str
    position: Vec3
    mesh: str = "cube"
    scale: float = 1.0
    color: int = 1

    @classmethod
    def from_dict(cls, data: dict) -> 'PropSpec':
        if 'name' not in data:
            raise ValueError("prop entry is missing 'name'")
        return cls(data['name'], _vec(data, 'position'), str(data.get('mesh', 'cube')),
                   float(data.get('scale', 1.0)), int(data.get('color', 1)))


@dataclass
class SceneDescription:
    """Scene configuration, loaded once at startup."""
    camera_position: Vec3
    camera_target: Vec3
    camera_fov: float = 60.0
    mirrors: List[MirrorSpec] = field(default_factory=list)
    props: List[PropSpec] = field(default_factory=list)
    max_recursion_depth: Optional[int] = None
    target_resolution: Optional[int] = None
    frustum_layer: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'SceneDescription':
        cam = data.get('camera', {})
        if not isinstance(cam, dict):
            raise ValueError("'camera' must be an object")
        desc = cls(
            camera_position=_vec(cam, 'position', (0.0, 0.0, -6.0)),
            camera_target=_vec(cam, 'target', (0.0, 0.0, 0.0)),
            camera_fov=float(cam.get('fov', 60.0)),
            mirrors=[MirrorSpec.from_dict(m) for m in data.get('mirrors', [])],
            props=[PropSpec.from_dict(p) for p in data.get('props', [])],
            max_recursion_depth=data.get('max_recursion_depth'),
            target_resolution=data.get('target_resolution'),
            frustum_layer=data.get('frustum_layer'),
        )
        names = [m.name for m in desc.mirrors]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate mirror names in {names}")
        return desc

    @classmethod
    def load(cls, path) -> 'SceneDescription':
        with open(path, 'r', encoding='utf-8') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}: invalid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def demo_room(cls) -> 'SceneDescription':
        """Two facing mirrors with a cube between them, plus a side mirror."""
        return cls.from_dict({
            'camera': {'position': [3.0, 1.0, -2.0], 'target': [0.0, 0.0, 3.0]},
            'mirrors': [
                {'name': 'Mirror North', 'position': [0, 0, 6], 'normal': [0, 0, -1],
                 'width': 4, 'depth': 3, 'color': 2},
                {'name': 'Mirror South', 'position': [0, 0, -6], 'normal': [0, 0, 1],
                 'width': 4, 'depth': 3, 'color': 3},
                {'name': 'Mirror East', 'position': [6, 0, 0], 'normal': [-1, 0, 0],
                 'width': 3, 'depth': 3, 'color': 4},
            ],
            'props': [
                {'name': 'Cube', 'position': [0, 0, 0], 'color': 1},
                {'name': 'Small Cube', 'position': [-2, -1, 2], 'scale': 0.5, 'color': 5},
            ],
        })

    def apply(self, config: MirrorConfig) -> MirrorConfig:
        """Config with this scene's overrides applied."""
        overrides = {}
        for key in ('max_recursion_depth', 'target_resolution', 'frustum_layer'):
            value = getattr(self, key)
            if value is not None:
                overrides[key] = value
        return replace(config, **overrides)

    def build(self, config: MirrorConfig):
        """Instantiate (scene, primary camera, mirrors)."""
        scene = Scene()
        for prop in self.props:
            mesh = Mesh.cube() if prop.mesh == 'cube' else Mesh.from_obj(prop.mesh)
            scene.add(SceneObject(prop.name, mesh, position=prop.position,
                                  scale=Vec3(prop.scale, prop.scale, prop.scale),
                                  color=prop.color))

        camera = Camera("Main Camera", fov=self.camera_fov,
                        near=config.near_clip, far=config.far_plane,
                        position=self.camera_position)
        camera.look_at(self.camera_target, UP)
        camera.hidden_layers.add(config.frustum_layer)

        mirrors = []
        for spec in self.mirrors:
            surface = scene.add(SceneObject(
                spec.name, Mesh.plane(spec.width, spec.depth), position=spec.position,
                rotation=Quat.from_to_rotation(UP, spec.normal), color=spec.color))
            mirrors.append(Mirror(spec.name, surface, resolution=config.target_resolution))
        return scene, camera, mirrors
