"""PosePointer - frame loop and plugin dispatch around the resolver.

Example:
    >>> from posepointer import PosePointer, PointerConfig
    >>> pointer = PosePointer(PointerConfig(), viewport=(1920, 1080))
    >>> pointer.use("cursor", lambda poses: move_cursor(poses[0].pointed_at))
    >>> result = pointer.run(read_pose_frames("poses.jsonl"))
    >>> print(f"Processed {result.frame_count} frames")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from posepointer.config import PointerConfig
from posepointer.estimator import PoseFrame, select_poses
from posepointer.resolver import PointerResolver, PoseEnrichment
from posepointer.types import Pose, Size
from posepointer.viewport import Viewport

logger = logging.getLogger(__name__)

# Type aliases for callbacks
PluginCallback = Callable[[List[Pose]], None]
FrameCallback = Callable[[PoseFrame, List[Pose]], Optional[bool]]


@dataclass
class RunResult:
    """Result of a PosePointer.run() invocation.

    Attributes:
        frame_count: Total frames processed.
        frames: Per-frame enriched poses (only when ``keep_frames=True``).
    """

    frame_count: int = 0
    frames: List[List[Pose]] = field(default_factory=list)


class PosePointer:
    """Turns per-frame pose sets into pointer positions for consumers.

    Each frame is resolved once, composed back onto new Pose objects,
    and handed to every registered plugin exactly once. Plugin failures
    are logged and never affect the smoothing state.

    Args:
        config: Pointer configuration.
        viewport: Initial viewport as a Viewport or (width, height).
    """

    def __init__(
        self,
        config: Optional[PointerConfig] = None,
        *,
        viewport: Optional[Viewport | Tuple[float, float]] = None,
    ) -> None:
        self._config = config or PointerConfig()
        if viewport is None:
            viewport = Viewport()
        elif not isinstance(viewport, Viewport):
            viewport = Viewport(*viewport)
        self._resolver = PointerResolver(self._config, viewport)
        self._plugins: Dict[str, PluginCallback] = {}
        self._running = False
        self._last_enrichments: List[PoseEnrichment] = []

        if self._config.max_users > 1:
            logger.warning(
                "max_users=%d: smoothing is keyed by pose position and assumes "
                "the estimator keeps people in a stable order",
                self._config.max_users,
            )

    @property
    def config(self) -> PointerConfig:
        return self._config

    @property
    def viewport(self) -> Viewport:
        return self._resolver.viewport

    @property
    def resolver(self) -> PointerResolver:
        return self._resolver

    @property
    def plugins(self) -> Dict[str, PluginCallback]:
        return dict(self._plugins)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_enrichments(self) -> List[PoseEnrichment]:
        """Enrichments of the most recent frame, including failures."""
        return list(self._last_enrichments)

    def use(self, name: str, callback: PluginCallback) -> None:
        """Register ``callback`` to receive enriched poses every frame.

        Registering the same ``name`` again replaces the previous callback.
        """
        if name in self._plugins:
            logger.debug("Replacing plugin %s", name)
        self._plugins[name] = callback

    def remove(self, name: str) -> None:
        """Unregister a plugin.

        Raises:
            KeyError: If no plugin is registered under ``name``.
        """
        del self._plugins[name]

    def resize(self, width: float, height: float) -> None:
        """Resize notification from the host."""
        self._resolver.viewport.resize(width, height)

    def process(self, poses: Sequence[Pose], surface: Size) -> List[Pose]:
        """Enrich one frame's poses and dispatch them to plugins.

        At most ``config.max_users`` poses are kept, highest score first,
        in the order the estimator reported them.

        Returns:
            New Pose objects carrying ``pointed_at`` and ``angles``. Poses
            that failed to resolve are returned unchanged.
        """
        poses = select_poses(poses, self._config.max_users)
        enrichments = self._resolver.resolve(poses, surface)
        self._last_enrichments = enrichments

        enriched = [
            pose.with_enrichment(e) if e.ok else pose
            for pose, e in zip(poses, enrichments)
        ]
        self._dispatch(enriched)
        return enriched

    def _dispatch(self, poses: List[Pose]) -> None:
        for name, callback in list(self._plugins.items()):
            try:
                callback(list(poses))
            except Exception as e:
                logger.warning("Plugin %s failed: %s", name, e, exc_info=True)

    def run(
        self,
        frames: Iterable[PoseFrame],
        *,
        max_frames: Optional[int] = None,
        on_frame: Optional[FrameCallback] = None,
        keep_frames: bool = False,
    ) -> RunResult:
        """Process frames until the source ends or the loop is stopped.

        Args:
            frames: Iterable of PoseFrames, e.g. from ``estimate_frames``.
            max_frames: Stop after this many processed frames.
            on_frame: Callback ``(frame, enriched_poses)``; returning False
                stops the loop.
            keep_frames: Keep enriched poses of every frame in the result.

        Returns:
            RunResult with the processed frame count.
        """
        result = RunResult()
        self._running = True
        try:
            for frame in frames:
                enriched = self.process(frame.poses, frame.surface)
                result.frame_count += 1
                if keep_frames:
                    result.frames.append(enriched)

                if on_frame is not None and on_frame(frame, enriched) is False:
                    self._running = False
                if max_frames and result.frame_count >= max_frames:
                    self._running = False
                if not self._running:
                    break
        finally:
            self._running = False

        logger.debug("Run finished after %d frames", result.frame_count)
        return result

    def stop(self) -> None:
        """Stop the loop after the current frame completes."""
        self._running = False


__all__ = ["PosePointer", "RunResult", "PluginCallback", "FrameCallback"]
