"""posepointer — head-pose pointer estimation from 2D body keypoints.

Converts a stream of COCO-17 keypoints into a smoothed screen coordinate
``{x, y, z}`` and a coarse head orientation ``{yaw, pitch}`` per tracked
person.

Example:
    >>> from posepointer import PosePointer, PointerConfig, Size
    >>> pointer = PosePointer(PointerConfig(pose_stack_size=8), viewport=(1920, 1080))
    >>> pointer.use("cursor", lambda poses: print(poses[0].pointed_at))
    >>> pointer.process(poses, surface=Size(600, 500))
"""

from posepointer.types import (
    KeypointIndex,
    COCO_KEYPOINT_NAMES,
    Size,
    Keypoint,
    Pose,
    PointedAt,
    HeadAngles,
)
from posepointer.result import Computed, Indeterminate, Estimate, value_or
from posepointer.config import PointerConfig
from posepointer.orientation import estimate_yaw, estimate_pitch, estimate_orientation
from posepointer.depth import triangle_area, estimate_depth
from posepointer.smoothing import SmoothingBuffer, TrackHistory
from posepointer.viewport import Viewport
from posepointer.resolver import PointerResolver, PoseEnrichment
from posepointer.estimator import PoseEstimator, PoseFrame, estimate_frames, poses_from_array
from posepointer.pointer import PosePointer, RunResult

__all__ = [
    # Domain types
    "KeypointIndex",
    "COCO_KEYPOINT_NAMES",
    "Size",
    "Keypoint",
    "Pose",
    "PointedAt",
    "HeadAngles",
    # Results
    "Computed",
    "Indeterminate",
    "Estimate",
    "value_or",
    # Configuration
    "PointerConfig",
    # Estimators
    "estimate_yaw",
    "estimate_pitch",
    "estimate_orientation",
    "triangle_area",
    "estimate_depth",
    # Smoothing
    "SmoothingBuffer",
    "TrackHistory",
    # Resolution
    "Viewport",
    "PointerResolver",
    "PoseEnrichment",
    # Estimator boundary
    "PoseEstimator",
    "PoseFrame",
    "estimate_frames",
    "poses_from_array",
    # Frame loop
    "PosePointer",
    "RunResult",
]
