#
# PROJECT: recursive-mirrors
# MODULE: recursive_mirrors/reflection.py
# STATUS: Level 2 - Implementation
# LOG_REF: 2026-10-17
#

"""
Reflection transform: the pose and projection of a camera mirrored
across a plane.

Three reference points are reflected independently (the camera position,
one unit along its up axis and one unit along its forward axis), and the
reflected orientation is rebuilt from them.  The reflected projection is
the source projection with its X axis negated, which both flips the image
left-right and reverses triangle winding for anything that camera draws.
"""

import logging
from dataclasses import dataclass

from .math_utils import Vec3, Quat, Mat4, Plane

logger = logging.getLogger(__name__)

MIRROR_X = Mat4.scale(-1.0, 1.0, 1.0)


@dataclass(frozen=True)
class ReflectedPose:
    position: Vec3
    rotation: Quat
    projection: Mat4


def reflect_point(point: Vec3, plane: Plane) -> Vec3:
    """
    Mirror `point` through `plane`.

    A line is cast from the point against the plane normal; the reflected
    point sits at twice the intersection distance along it.  When there is
    no intersection (degenerate plane) the point is returned unchanged.
    """
    direction = -plane.normal
    t = plane.line_intersection(point, direction)
    if t is None:
        logger.warning("reflection of %r skipped: no intersection with %r", point, plane)
        return point
    return point + direction * (t * 2.0)


def is_mirrored(projection: Mat4) -> bool:
    """True when the projection's horizontal scale is negative."""
    return projection.m[0][0] < 0


def reflect_pose(position: Vec3, forward: Vec3, up: Vec3,
                 projection: Mat4, plane: Plane) -> ReflectedPose:
    pos_r = reflect_point(position, plane)
    up_r = reflect_point(position + up, plane)
    fwd_r = reflect_point(position + forward, plane)

    rotation = Quat.look_rotation(fwd_r - pos_r, up_r - pos_r)
    return ReflectedPose(pos_r, rotation, projection @ MIRROR_X)


def reflect_camera(source, plane: Plane) -> ReflectedPose:
    """Reflected pose/projection for any object exposing a Camera's pose."""
    return reflect_pose(source.position, source.forward, source.up,
                        source.projection, plane)
