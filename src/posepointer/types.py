"""Pose and keypoint domain types."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Iterable, List, Optional

import numpy as np

if TYPE_CHECKING:
    from posepointer.resolver import PoseEnrichment


class KeypointIndex:
    """COCO 17 keypoint indices, as emitted by PoseNet-style estimators.

    Example:
        >>> nose = pose.keypoint(KeypointIndex.NOSE)
        >>> if nose.score > 0.5:
        ...     print(f"Nose at ({nose.x}, {nose.y})")
    """

    NOSE = 0
    LEFT_EYE = 1
    RIGHT_EYE = 2
    LEFT_EAR = 3
    RIGHT_EAR = 4
    LEFT_SHOULDER = 5
    RIGHT_SHOULDER = 6
    LEFT_ELBOW = 7
    RIGHT_ELBOW = 8
    LEFT_WRIST = 9
    RIGHT_WRIST = 10
    LEFT_HIP = 11
    RIGHT_HIP = 12
    LEFT_KNEE = 13
    RIGHT_KNEE = 14
    LEFT_ANKLE = 15
    RIGHT_ANKLE = 16


# PoseNet part names in index order
COCO_KEYPOINT_NAMES = [
    "nose",
    "leftEye",
    "rightEye",
    "leftEar",
    "rightEar",
    "leftShoulder",
    "rightShoulder",
    "leftElbow",
    "rightElbow",
    "leftWrist",
    "rightWrist",
    "leftHip",
    "rightHip",
    "leftKnee",
    "rightKnee",
    "leftAnkle",
    "rightAnkle",
]

NUM_KEYPOINTS = len(COCO_KEYPOINT_NAMES)


@dataclass(frozen=True)
class Size:
    """Width/height pair in pixels."""

    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class Keypoint:
    """A single 2D keypoint.

    Attributes:
        index: Body-part id (see KeypointIndex).
        x: Horizontal position in capture-surface pixels.
        y: Vertical position in capture-surface pixels.
        score: Confidence in [0, 1].
    """

    index: int
    x: float
    y: float
    score: float = 0.0

    @property
    def name(self) -> str:
        return COCO_KEYPOINT_NAMES[self.index]


@dataclass(frozen=True)
class PointedAt:
    """Smoothed screen coordinate plus depth proxy.

    ``z`` is None when the facial triangle is degenerate.
    """

    x: float
    y: float
    z: Optional[float] = None


@dataclass(frozen=True)
class HeadAngles:
    """Head orientation in radians. None marks an indeterminate angle."""

    yaw: Optional[float] = None
    pitch: Optional[float] = None


@dataclass(frozen=True, eq=False)
class Pose:
    """One tracked person's keypoints for one frame.

    Attributes:
        keypoints: Array of shape (17, 3) with (x, y, score) per keypoint.
        score: Overall pose confidence.
        pointed_at: Derived pointer position, set by ``with_enrichment``.
        angles: Derived head orientation, set by ``with_enrichment``.
    """

    keypoints: np.ndarray = field(repr=False)
    score: float = 1.0
    pointed_at: Optional[PointedAt] = None
    angles: Optional[HeadAngles] = None

    def keypoint(self, index: int) -> Keypoint:
        """Return keypoint ``index`` as a Keypoint.

        Raises:
            IndexError: If the pose does not carry that keypoint.
        """
        x, y, score = self.keypoints[index]
        return Keypoint(index=index, x=float(x), y=float(y), score=float(score))

    @property
    def keypoint_list(self) -> List[Keypoint]:
        return [self.keypoint(i) for i in range(len(self.keypoints))]

    @classmethod
    def from_keypoints(cls, keypoints: Iterable[Keypoint], score: float = 1.0) -> "Pose":
        """Build a pose from Keypoint objects.

        Keypoints are placed by their ``index``; parts not given are left at
        (0, 0) with zero confidence.
        """
        arr = np.zeros((NUM_KEYPOINTS, 3), dtype=np.float64)
        for kp in keypoints:
            arr[kp.index] = (kp.x, kp.y, kp.score)
        return cls(keypoints=arr, score=float(score))

    def with_enrichment(self, enrichment: "PoseEnrichment") -> "Pose":
        """Return a copy of this pose carrying ``pointed_at`` and ``angles``."""
        return replace(
            self,
            pointed_at=enrichment.pointed_at,
            angles=enrichment.angles,
        )


__all__ = [
    "KeypointIndex",
    "COCO_KEYPOINT_NAMES",
    "NUM_KEYPOINTS",
    "Size",
    "Keypoint",
    "PointedAt",
    "HeadAngles",
    "Pose",
]
