"""Shared test helpers for posepointer tests."""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from posepointer.types import KeypointIndex, Pose


def make_pose(
    nose=(300.0, 250.0),
    left_eye=(330.0, 240.0),
    right_eye=(270.0, 240.0),
    left_ear=(360.0, 250.0, 0.9),
    right_ear=(240.0, 250.0, 0.9),
    score: float = 0.9,
    eye_score: float = 0.9,
) -> Pose:
    """Create a frontal face pose in capture-surface pixels.

    Defaults: nose centered on a 600x500 surface, eyes symmetric around
    the nose, both ears confident and level with the nose.
    """
    kpts = np.zeros((17, 3), dtype=np.float64)
    kpts[:, 2] = 0.1
    kpts[KeypointIndex.NOSE] = [nose[0], nose[1], 0.99]
    kpts[KeypointIndex.LEFT_EYE] = [left_eye[0], left_eye[1], eye_score]
    kpts[KeypointIndex.RIGHT_EYE] = [right_eye[0], right_eye[1], eye_score]
    kpts[KeypointIndex.LEFT_EAR] = list(left_ear)
    kpts[KeypointIndex.RIGHT_EAR] = list(right_ear)
    kpts[KeypointIndex.LEFT_SHOULDER] = [400.0, 400.0, 0.8]
    kpts[KeypointIndex.RIGHT_SHOULDER] = [200.0, 400.0, 0.8]
    return Pose(keypoints=kpts, score=score)


@dataclass
class MockFrame:
    """Mock captured frame."""

    frame_id: int = 0
    t_src_ns: int = 0
    data: Optional[np.ndarray] = None


class MockPoseEstimator:
    """Mock estimator returning a fixed pose list for every image."""

    def __init__(self, poses=None):
        self._poses = poses or []
        self.initialized = False
        self.calls = 0

    def initialize(self, device="cpu"):
        self.initialized = True

    def estimate(self, image):
        self.calls += 1
        return list(self._poses)

    def cleanup(self):
        self.initialized = False
