"""Head orientation from sparse facial keypoints.

A deliberately cheap heuristic: no camera intrinsics and no perspective
model. Angles are in radians.

- yaw: 0 is looking straight ahead, +pi/2 turned fully to one side,
  -pi/2 to the other.
- pitch: derived from the nose height relative to the ears, scaled by
  the horizontal eye span. Not clamped.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from posepointer.result import (
    NO_CONFIDENT_EAR,
    NON_FINITE_INPUT,
    ZERO_EYE_SPAN,
    Computed,
    Estimate,
    Indeterminate,
)
from posepointer.types import KeypointIndex, Pose

HALF_PI = math.pi / 2


def _divide(numerator: float, denominator: float) -> float:
    """IEEE division: x/0 gives +/-inf, 0/0 gives NaN."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(numerator) / np.float64(denominator))


def estimate_yaw(pose: Pose) -> Estimate:
    """Estimate left/right head rotation from the nose-to-eye distances.

    The eye farther (horizontally) from the nose decides the sign: +1 when
    it is the left eye, -1 otherwise. Magnitude is
    ``1 - min(dL, dR) / max(dL, dR)`` scaled to pi/2.

    Confidence scores are not consulted; an occluded eye yields a
    meaningless but finite angle.
    """
    nose = pose.keypoint(KeypointIndex.NOSE)
    left_eye = pose.keypoint(KeypointIndex.LEFT_EYE)
    right_eye = pose.keypoint(KeypointIndex.RIGHT_EYE)

    d_left = abs(left_eye.x - nose.x)
    d_right = abs(right_eye.x - nose.x)
    if not (math.isfinite(d_left) and math.isfinite(d_right)):
        return Indeterminate(NON_FINITE_INPUT)

    if d_left == d_right:
        return Computed(0.0)

    if d_left > d_right:
        ratio = 1.0 - d_right / d_left
        side = 1.0
    else:
        ratio = 1.0 - d_left / d_right
        side = -1.0

    return Computed(ratio * HALF_PI * side)


def estimate_pitch(pose: Pose, min_part_confidence: float = 0.5) -> Estimate:
    """Estimate up/down head rotation.

    Averages the ``y`` of every ear whose score is at least
    ``min_part_confidence``, then returns
    ``pi/2 * (nose.y - ear_y) / (left_eye.x - right_eye.x)``.

    The eye span is signed; a mirrored face flips the sign of the result.
    """
    points = pose.keypoints
    nose = pose.keypoint(KeypointIndex.NOSE)
    left_eye = pose.keypoint(KeypointIndex.LEFT_EYE)
    right_eye = pose.keypoint(KeypointIndex.RIGHT_EYE)

    ears = points[[KeypointIndex.LEFT_EAR, KeypointIndex.RIGHT_EAR]]
    visible = ears[ears[:, 2] >= min_part_confidence]
    eye_span = left_eye.x - right_eye.x

    if len(visible) == 0:
        return Indeterminate(NO_CONFIDENT_EAR, raw=float("nan"))

    ear_y = float(np.mean(visible[:, 1]))
    rise = nose.y - ear_y
    if not (math.isfinite(rise) and math.isfinite(eye_span)):
        return Indeterminate(NON_FINITE_INPUT)

    if eye_span == 0:
        return Indeterminate(ZERO_EYE_SPAN, raw=HALF_PI * _divide(rise, eye_span))

    return Computed(HALF_PI * rise / eye_span)


def estimate_orientation(
    pose: Pose, min_part_confidence: float = 0.5
) -> Tuple[Estimate, Estimate]:
    """Return ``(yaw, pitch)`` estimates for one pose snapshot."""
    return estimate_yaw(pose), estimate_pitch(pose, min_part_confidence)


__all__ = ["estimate_yaw", "estimate_pitch", "estimate_orientation", "HALF_PI"]
