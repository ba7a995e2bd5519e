"""Moving-average smoothing of per-track pointer positions."""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, Iterator, List, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class SmoothingBuffer:
    """Bounded FIFO history of recent (x, y) samples.

    ``average()`` is an unweighted mean over the held samples, not an
    exponential decay. Once ``capacity`` samples are held, each push
    evicts the oldest one.

    Args:
        capacity: Maximum number of samples kept (>= 1).
    """

    def __init__(self, capacity: int = 8) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._points: Deque[Point] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._points.maxlen

    @property
    def points(self) -> List[Point]:
        return list(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def push(self, x: float, y: float) -> None:
        self._points.append((float(x), float(y)))

    def average(self) -> Point:
        """Mean of x and, independently, of y across held samples.

        Raises:
            ValueError: If nothing has been pushed yet.
        """
        if not self._points:
            raise ValueError("average() of an empty SmoothingBuffer")
        mean = np.mean(np.asarray(self._points, dtype=np.float64), axis=0)
        return float(mean[0]), float(mean[1])

    def update(self, x: float, y: float) -> Point:
        """Push a sample and return the new average."""
        self.push(x, y)
        return self.average()

    def reset(self) -> None:
        self._points.clear()


class TrackHistory:
    """Explicit ``track index -> SmoothingBuffer`` map.

    Buffers are created on first observation of an index. ``advance()``
    marks the start of a new frame; tracks not observed for more than
    ``ttl_frames`` frames are dropped. ``ttl_frames=0`` never drops a
    track.

    Track indices are positional: index ``i`` in one frame is assumed,
    not verified, to be the same person as index ``i`` in the next.

    Args:
        capacity: Capacity of each per-track buffer.
        ttl_frames: Frames a track may go unobserved before eviction.
    """

    def __init__(self, capacity: int = 8, ttl_frames: int = 30) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if ttl_frames < 0:
            raise ValueError(f"ttl_frames must be >= 0, got {ttl_frames}")
        self._capacity = capacity
        self._ttl_frames = ttl_frames
        self._buffers: Dict[int, SmoothingBuffer] = {}
        self._last_seen: Dict[int, int] = {}
        self._frame = 0

    @property
    def frame(self) -> int:
        """Index of the current frame (number of ``advance()`` calls)."""
        return self._frame

    def __len__(self) -> int:
        return len(self._buffers)

    def __contains__(self, track: int) -> bool:
        return track in self._buffers

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._buffers))

    def get(self, track: int) -> SmoothingBuffer:
        """Return the buffer for ``track``, creating it if needed."""
        buf = self._buffers.get(track)
        if buf is None:
            buf = SmoothingBuffer(self._capacity)
            self._buffers[track] = buf
            logger.debug("New track %d", track)
        self._last_seen[track] = self._frame
        return buf

    def advance(self) -> List[int]:
        """Start a new frame and evict stale tracks.

        Returns:
            Indices of the evicted tracks.
        """
        self._frame += 1
        if self._ttl_frames == 0:
            return []

        stale = [
            track
            for track, seen in self._last_seen.items()
            if self._frame - seen > self._ttl_frames
        ]
        for track in stale:
            self.drop(track)
        if stale:
            logger.debug("Evicted stale tracks %s at frame %d", stale, self._frame)
        return stale

    def drop(self, track: int) -> None:
        self._buffers.pop(track, None)
        self._last_seen.pop(track, None)

    def reset(self) -> None:
        self._buffers.clear()
        self._last_seen.clear()
        self._frame = 0


__all__ = ["SmoothingBuffer", "TrackHistory"]
