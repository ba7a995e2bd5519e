"""Pointer resolution: keypoints -> smoothed screen coordinate + depth.

Per pose, per frame:

1. Map the nose from capture-surface to viewport coordinates, mirroring
   horizontally (the capture surface is presented mirrored).
2. Shift by ``yaw * width / 2`` and ``pitch * height / 2`` (a parallax
   heuristic, not a projective transform).
3. Push the shifted point into the track's smoothing buffer and take the
   buffer average.
4. Attach the depth proxy computed from the unshifted keypoints and the
   cached viewport area.

Example:
    >>> resolver = PointerResolver(PointerConfig(), Viewport(1920, 1080))
    >>> enrichments = resolver.resolve(poses, surface=Size(600, 500))
    >>> enriched = [p.with_enrichment(e) for p, e in zip(poses, enrichments)]
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from posepointer.config import PointerConfig
from posepointer.depth import estimate_depth
from posepointer.orientation import estimate_orientation
from posepointer.result import (
    MALFORMED_POSE,
    NON_FINITE_INPUT,
    Computed,
    Estimate,
    Indeterminate,
)
from posepointer.smoothing import TrackHistory
from posepointer.types import HeadAngles, KeypointIndex, PointedAt, Pose, Size
from posepointer.viewport import Viewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoseEnrichment:
    """Derived pointer data for one pose in one frame.

    Attributes:
        track: Positional index of the pose in its frame.
        pointed_at: Smoothed (x, y) and depth z. None if the pose failed.
        angles: Reported head angles.
        yaw: Yaw estimate with its indeterminate reason, if any.
        pitch: Pitch estimate with its indeterminate reason, if any.
        depth: Depth estimate with its indeterminate reason, if any.
        raw: Shifted (x, y) before smoothing. None if the pose failed.
        error: Failure reason when the pose could not be enriched.
    """

    track: int
    pointed_at: Optional[PointedAt]
    angles: HeadAngles
    yaw: Estimate
    pitch: Estimate
    depth: Estimate
    raw: Optional[Tuple[float, float]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, track: int, reason: str) -> "PoseEnrichment":
        """Enrichment for a pose that could not be processed this frame."""
        marker = Indeterminate(MALFORMED_POSE)
        return cls(
            track=track,
            pointed_at=None,
            angles=HeadAngles(),
            yaw=marker,
            pitch=marker,
            depth=marker,
            error=reason,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Consumer-facing ``{pointedAt, angles}`` mapping."""
        pointed_at = None
        if self.pointed_at is not None:
            pointed_at = {
                "x": self.pointed_at.x,
                "y": self.pointed_at.y,
                "z": self.pointed_at.z,
            }
        return {
            "pointedAt": pointed_at,
            "angles": {"yaw": self.angles.yaw, "pitch": self.angles.pitch},
        }


def raw_position(nose_x: float, nose_y: float, surface: Size, viewport: Size) -> Tuple[float, float]:
    """Map a capture-surface point into mirrored viewport coordinates."""
    width_ratio = viewport.width / surface.width
    height_ratio = viewport.height / surface.height
    x = viewport.width - nose_x * width_ratio
    y = nose_y * height_ratio
    return x, y


def _check_keypoints(pose: Pose) -> None:
    kpts = pose.keypoints
    if getattr(kpts, "ndim", 0) != 2 or kpts.shape[1] < 3:
        raise ValueError(f"keypoints must have shape (N, 3), got {getattr(kpts, 'shape', None)}")
    if kpts.shape[0] <= KeypointIndex.RIGHT_EAR:
        raise ValueError(f"pose carries only {kpts.shape[0]} keypoints")


class PointerResolver:
    """Resolves pose sets into pointer enrichments, one frame at a time.

    Owns the per-track smoothing history. Poses are processed strictly in
    sequence order because each one mutates its track's history.

    Args:
        config: Pointer configuration.
        viewport: Viewport cache supplying width, height and area.
    """

    def __init__(
        self,
        config: Optional[PointerConfig] = None,
        viewport: Optional[Viewport] = None,
    ) -> None:
        self._config = config or PointerConfig()
        self._viewport = viewport if viewport is not None else Viewport()
        self._tracks = TrackHistory(
            capacity=self._config.pose_stack_size,
            ttl_frames=self._config.track_ttl_frames,
        )
        self._warned_empty_viewport = False

    @property
    def config(self) -> PointerConfig:
        return self._config

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def tracks(self) -> TrackHistory:
        return self._tracks

    def reset(self) -> None:
        """Drop all smoothing history."""
        self._tracks.reset()

    def resolve(self, poses: Sequence[Pose], surface: Size) -> List[PoseEnrichment]:
        """Run one enrichment pass over a frame's poses.

        A pose that cannot be processed yields ``PoseEnrichment.failed``
        and leaves its track's history untouched; the remaining poses are
        still enriched.

        Args:
            poses: Poses of the frame, in estimator order.
            surface: Capture-surface size the keypoints are expressed in.

        Raises:
            ValueError: If ``surface`` has a non-positive dimension.
        """
        if surface.width <= 0 or surface.height <= 0:
            raise ValueError(f"Capture surface must be positive, got {surface}")

        if self._viewport.area == 0:
            if not self._warned_empty_viewport:
                logger.warning(
                    "Viewport %r has zero area: pointer positions and depth will be 0 "
                    "until the host calls resize()",
                    self._viewport,
                )
                self._warned_empty_viewport = True
        else:
            self._warned_empty_viewport = False

        self._tracks.advance()

        results: List[PoseEnrichment] = []
        for track, pose in enumerate(poses):
            try:
                results.append(self._resolve_pose(track, pose, surface))
            except (AttributeError, IndexError, TypeError, ValueError) as e:
                logger.warning("Skipping pose %d: %s", track, e)
                results.append(PoseEnrichment.failed(track, str(e)))
        return results

    def _component(self, estimate: Estimate, fallback: Optional[float]) -> Optional[float]:
        if isinstance(estimate, Computed):
            return estimate.value
        if self._config.propagate_nan:
            return estimate.raw
        return fallback

    def _resolve_pose(self, track: int, pose: Pose, surface: Size) -> PoseEnrichment:
        _check_keypoints(pose)
        viewport = self._viewport.size
        nose = pose.keypoint(KeypointIndex.NOSE)

        x, y = raw_position(nose.x, nose.y, surface, viewport)
        if not (math.isfinite(x) and math.isfinite(y)) and not self._config.propagate_nan:
            return PoseEnrichment.failed(track, NON_FINITE_INPUT)

        yaw, pitch = estimate_orientation(pose, self._config.min_part_confidence)
        x += self._component(yaw, 0.0) * viewport.width / 2
        y += self._component(pitch, 0.0) * viewport.height / 2

        smooth_x, smooth_y = self._tracks.get(track).update(x, y)

        depth = estimate_depth(pose, self._viewport.area)
        if yaw.is_indeterminate or pitch.is_indeterminate or depth.is_indeterminate:
            logger.debug(
                "Track %d indeterminate: yaw=%s pitch=%s depth=%s",
                track, yaw, pitch, depth,
            )

        return PoseEnrichment(
            track=track,
            pointed_at=PointedAt(
                x=smooth_x,
                y=smooth_y,
                z=self._component(depth, None),
            ),
            angles=HeadAngles(
                yaw=self._component(yaw, None),
                pitch=self._component(pitch, None),
            ),
            yaw=yaw,
            pitch=pitch,
            depth=depth,
            raw=(x, y),
        )


__all__ = ["PointerResolver", "PoseEnrichment", "raw_position"]
