"""Depth proxy from the nose/eye triangle."""

from __future__ import annotations

import math

import numpy as np

from posepointer.result import (
    DEGENERATE_TRIANGLE,
    NON_FINITE_INPUT,
    Computed,
    Estimate,
    Indeterminate,
)
from posepointer.types import KeypointIndex, Pose


def triangle_area(points: np.ndarray) -> float:
    """Shoelace area of a triangle.

    Args:
        points: Array of shape (3, 2) with (x, y) per vertex.
    """
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * abs(
        float(x[0] * (y[1] - y[2]) + x[1] * (y[2] - y[0]) + x[2] * (y[0] - y[1]))
    )


def estimate_depth(pose: Pose, viewport_area: float) -> Estimate:
    """Unitless distance-from-camera proxy.

    Returns ``viewport_area / area`` where ``area`` is the nose/eye
    triangle in capture-surface pixels. A closer face has a larger
    triangle and therefore a smaller depth. Dividing by the viewport area
    keeps values comparable across screen sizes.
    """
    face = pose.keypoints[
        [KeypointIndex.NOSE, KeypointIndex.LEFT_EYE, KeypointIndex.RIGHT_EYE], :2
    ]
    area = triangle_area(face)

    if not math.isfinite(area):
        return Indeterminate(NON_FINITE_INPUT)
    if area == 0:
        with np.errstate(divide="ignore", invalid="ignore"):
            raw = float(np.float64(viewport_area) / np.float64(0.0))
        return Indeterminate(DEGENERATE_TRIANGLE, raw=raw)

    return Computed(viewport_area / area)


__all__ = ["triangle_area", "estimate_depth"]
