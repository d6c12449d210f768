#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/camera.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

from typing import NamedTuple, Optional

from .math_utils import Vec3, Quat, Mat4, UP


class CameraPose(NamedTuple):
    """Immutable world pose of a camera."""
    position: Vec3
    rotation: Quat


class Camera:
    """
    Camera state for the mirror renderer.

    Stores the world pose (position + orientation quaternion), the
    perspective parameters and the projection matrix built from them, the
    render target it draws into (None = the screen), its draw priority
    (`depth`; lower draws earlier) and the set of scene layers it does not
    draw.

    The projection is a plain attribute so a reflection can overwrite it
    with a mirrored copy; `set_perspective` rebuilds it from fov/aspect.
    """
    __slots__ = ('name', 'position', 'rotation', 'fov', 'aspect', 'near', 'far',
                 'projection', 'depth', 'target', 'hidden_layers', 'enabled')

    def __init__(self, name: str = "Main Camera", fov: float = 60.0, aspect: float = 1.0,
                 near: float = 0.1, far: float = 150.0,
                 position: Optional[Vec3] = None, rotation: Optional[Quat] = None,
                 depth: int = 0):
        self.name = name
        self.position = position if position is not None else Vec3(0, 0, 0)
        self.rotation = rotation if rotation is not None else Quat.identity()
        self.fov = fov           # Vertical field of view (degrees)
        self.aspect = aspect     # Width / height
        self.near = near         # Near clip plane
        self.far = far           # Far clip plane
        self.depth = depth       # Draw priority
        self.target = None       # RenderTarget or None for the screen
        self.hidden_layers = set()
        self.enabled = True      # Drawn by the normal render loop
        self.projection = Mat4.perspective(fov, aspect, near, far)

    def __repr__(self):
        return f"Camera({self.name!r}, position={self.position!r})"

    @property
    def forward(self) -> Vec3:
        return self.rotation.forward

    @property
    def up(self) -> Vec3:
        return self.rotation.up

    @property
    def right(self) -> Vec3:
        return self.rotation.right

    def pose(self) -> CameraPose:
        return CameraPose(self.position, self.rotation)

    def set_pose(self, pose: CameraPose):
        self.position, self.rotation = pose

    def look_at(self, target: Vec3, up: Vec3 = UP):
        self.rotation = Quat.look_rotation(target - self.position, up)

    def set_perspective(self, fov: Optional[float] = None, aspect: Optional[float] = None):
        """Rebuild the projection after changing fov and/or aspect."""
        if fov is not None:
            self.fov = fov
        if aspect is not None:
            self.aspect = aspect
        self.projection = Mat4.perspective(self.fov, self.aspect, self.near, self.far)

    def adjust_fov(self, delta: float):
        """Adjust field of view by delta degrees, clamped to [10, 170]."""
        self.set_perspective(fov=max(10, min(170, self.fov + delta)))

    def clone(self, name: str) -> 'Camera':
        """Copy of this camera's configuration (not its render target)."""
        twin = Camera(name, fov=self.fov, aspect=self.aspect, near=self.near, far=self.far,
                      position=self.position, rotation=self.rotation, depth=self.depth)
        twin.projection = self.projection.copy()
        twin.hidden_layers = set(self.hidden_layers)
        return twin
