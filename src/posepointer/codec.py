"""JSON Lines codec for recorded pose streams.

One frame per line::

    {"frame_id": 0, "t_ns": 0, "surface": [600, 500],
     "poses": [{"score": 0.9,
                "keypoints": [{"part": "nose", "position": {"x": 300, "y": 250},
                               "score": 0.99}, ...]}]}

Keypoints follow the PoseNet layout. Enriched output adds ``pointedAt``
and ``angles`` to each pose; indeterminate values are written as null.
"""

import json
import logging
import math
from pathlib import Path
from typing import IO, Any, Dict, Iterator, List, Optional, Sequence, Union

import numpy as np

from posepointer.estimator import PoseFrame
from posepointer.types import COCO_KEYPOINT_NAMES, NUM_KEYPOINTS, Pose, Size

logger = logging.getLogger(__name__)

_PART_INDEX = {name: i for i, name in enumerate(COCO_KEYPOINT_NAMES)}


def _finite_or_none(value: Optional[float]) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return None
    return value


def pose_from_dict(data: Dict[str, Any]) -> Pose:
    """Build a Pose from a PoseNet-style mapping.

    Keypoints are placed by ``part`` name when present, else by list
    position.

    Raises:
        ValueError: On unknown part names or missing positions.
    """
    arr = np.zeros((NUM_KEYPOINTS, 3), dtype=np.float64)
    for i, kp in enumerate(data.get("keypoints", [])):
        part = kp.get("part")
        if part is not None:
            if part not in _PART_INDEX:
                raise ValueError(f"Unknown keypoint part: {part!r}")
            index = _PART_INDEX[part]
        else:
            index = i
        if index >= NUM_KEYPOINTS:
            raise ValueError(f"Too many keypoints: {len(data['keypoints'])}")
        position = kp.get("position")
        if position is None:
            raise ValueError(f"Keypoint {index} has no position")
        arr[index] = (position["x"], position["y"], kp.get("score", 0.0))
    return Pose(keypoints=arr, score=float(data.get("score", 0.0)))


def pose_to_dict(pose: Pose) -> Dict[str, Any]:
    """Serialize a Pose to the PoseNet-style mapping.

    ``pointedAt`` and ``angles`` are included once the pose is enriched.
    """
    out: Dict[str, Any] = {
        "score": pose.score,
        "keypoints": [
            {
                "part": kp.name,
                "position": {"x": kp.x, "y": kp.y},
                "score": kp.score,
            }
            for kp in pose.keypoint_list
        ],
    }
    if pose.pointed_at is not None:
        out["pointedAt"] = {
            "x": _finite_or_none(pose.pointed_at.x),
            "y": _finite_or_none(pose.pointed_at.y),
            "z": _finite_or_none(pose.pointed_at.z),
        }
    if pose.angles is not None:
        out["angles"] = {
            "yaw": _finite_or_none(pose.angles.yaw),
            "pitch": _finite_or_none(pose.angles.pitch),
        }
    return out


def frame_from_dict(data: Dict[str, Any]) -> PoseFrame:
    try:
        width, height = data["surface"]
    except (KeyError, TypeError, ValueError):
        raise ValueError("frame requires 'surface': [width, height]")
    return PoseFrame(
        frame_id=int(data.get("frame_id", 0)),
        t_ns=int(data.get("t_ns", 0)),
        surface=Size(float(width), float(height)),
        poses=[pose_from_dict(p) for p in data.get("poses", [])],
    )


def frame_to_dict(frame_id: int, t_ns: int, surface: Size, poses: Sequence[Pose]) -> Dict[str, Any]:
    return {
        "frame_id": frame_id,
        "t_ns": t_ns,
        "surface": [surface.width, surface.height],
        "poses": [pose_to_dict(p) for p in poses],
    }


def read_pose_frames(source: Union[str, Path, IO[str]]) -> Iterator[PoseFrame]:
    """Yield PoseFrames from a JSON Lines file or open text stream.

    Blank lines are skipped.

    Raises:
        ValueError: On a malformed line, naming its line number.
    """
    if isinstance(source, (str, Path)):
        with open(source) as f:
            yield from read_pose_frames(f)
        return

    for lineno, line in enumerate(source, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            yield frame_from_dict(json.loads(line))
        except (ValueError, KeyError, TypeError) as e:
            raise ValueError(f"line {lineno}: {e}") from e


def write_pose_frame(
    stream: IO[str],
    frame_id: int,
    t_ns: int,
    surface: Size,
    poses: Sequence[Pose],
) -> None:
    """Append one frame as a JSON line."""
    stream.write(json.dumps(frame_to_dict(frame_id, t_ns, surface, poses)))
    stream.write("\n")


def write_pose_frames(path: Union[str, Path], frames: List[PoseFrame]) -> None:
    with open(path, "w") as f:
        for frame in frames:
            write_pose_frame(f, frame.frame_id, frame.t_ns, frame.surface, frame.poses)
    logger.info("Wrote %d frames to %s", len(frames), path)


__all__ = [
    "pose_from_dict",
    "pose_to_dict",
    "frame_from_dict",
    "frame_to_dict",
    "read_pose_frames",
    "write_pose_frame",
    "write_pose_frames",
]
