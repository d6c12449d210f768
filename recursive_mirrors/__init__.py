#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/__init__.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

from .math_utils import Vec3, Quat, Mat4, Plane
from .reflection import ReflectedPose, reflect_point, reflect_pose, reflect_camera, is_mirrored
from .camera import Camera, CameraPose
from .mesh import Mesh, Bounds
from .scene import Scene, SceneObject
from .render_target import RenderTarget, RenderTargetPool
from .frustum import (Frustum, CameraFrustum, MirrorFrustum,
                      build_from_camera, build_from_mirror, refresh, contains_mirror)
from .mirror import Mirror, MirrorVisibility, MirrorStateError
from .config import MirrorConfig, SceneDescription
from .renderer import Renderer, RenderState
from .manager import ChainMirrorManager, MirrorManager, SourceSnapshot, VisibilityReport
