"""Boundary with external pose estimators.

The pose model itself lives outside this package. Anything implementing
``PoseEstimator`` can feed the pointer through ``estimate_frames``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Optional, Protocol, Sequence

import numpy as np

from posepointer.types import NUM_KEYPOINTS, Pose, Size

logger = logging.getLogger(__name__)


@dataclass
class PoseFrame:
    """Poses estimated from one captured frame.

    Attributes:
        frame_id: Frame identifier from the source.
        t_ns: Timestamp in nanoseconds (source timeline).
        surface: Capture-surface size the keypoints are expressed in.
        poses: Poses in estimator order; the position is the track index.
    """

    frame_id: int
    t_ns: int
    surface: Size
    poses: List[Pose] = field(default_factory=list)


class PoseEstimator(Protocol):
    """Protocol for pose estimation backends.

    Implementations return 17 COCO keypoints per detected person.
    Examples: PoseNet, MoveNet, YOLOv8-Pose.
    """

    def initialize(self, device: str = "cpu") -> None:
        """Initialize the backend and load models."""
        ...

    def estimate(self, image: np.ndarray) -> List[Pose]:
        """Estimate poses in an image."""
        ...

    def cleanup(self) -> None:
        """Release resources and unload models."""
        ...


def poses_from_array(keypoints: np.ndarray, scores: Optional[Sequence[float]] = None) -> List[Pose]:
    """Convert an ``(N, 17, 3)`` keypoint array into poses.

    Args:
        keypoints: (x, y, confidence) per keypoint per person.
        scores: Optional overall score per person. Defaults to the mean
            keypoint confidence.

    Raises:
        ValueError: If the array does not have shape (N, 17, 3).
    """
    arr = np.asarray(keypoints, dtype=np.float64)
    if arr.ndim == 2:
        arr = arr[np.newaxis]
    if arr.ndim != 3 or arr.shape[1:] != (NUM_KEYPOINTS, 3):
        raise ValueError(f"Expected keypoints of shape (N, {NUM_KEYPOINTS}, 3), got {arr.shape}")

    poses = []
    for i, kpts in enumerate(arr):
        score = float(scores[i]) if scores is not None else float(np.mean(kpts[:, 2]))
        poses.append(Pose(keypoints=kpts.copy(), score=score))
    return poses


def select_poses(poses: Sequence[Pose], max_users: int) -> List[Pose]:
    """Keep the ``max_users`` highest-scoring poses in estimator order.

    Single-user mode (``max_users == 1``) keeps only the best pose.
    """
    if len(poses) <= max_users:
        return list(poses)
    ranked = sorted(range(len(poses)), key=lambda i: poses[i].score, reverse=True)
    return [poses[i] for i in sorted(ranked[:max_users])]


def estimate_frames(
    estimator: PoseEstimator,
    frames: Iterable[Any],
    max_users: int = 1,
) -> Iterator[PoseFrame]:
    """Run ``estimator`` on each frame and yield PoseFrames.

    Frames must expose ``data`` (H, W, 3), ``frame_id`` and ``t_src_ns``.
    A plain ndarray is also accepted, numbered sequentially.
    """
    for index, frame in enumerate(frames):
        if isinstance(frame, np.ndarray):
            image, frame_id, t_ns = frame, index, 0
        else:
            image = frame.data
            frame_id = getattr(frame, "frame_id", index)
            t_ns = getattr(frame, "t_src_ns", 0)

        h, w = image.shape[:2]
        poses = select_poses(estimator.estimate(image), max_users)
        logger.debug("Frame %d: %d poses", frame_id, len(poses))
        yield PoseFrame(
            frame_id=frame_id,
            t_ns=t_ns,
            surface=Size(float(w), float(h)),
            poses=poses,
        )


__all__ = [
    "PoseFrame",
    "PoseEstimator",
    "poses_from_array",
    "select_poses",
    "estimate_frames",
]
