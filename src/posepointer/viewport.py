"""Viewport geometry cache."""

import logging

from posepointer.types import Size

logger = logging.getLogger(__name__)


class Viewport:
    """Last-known viewport dimensions and their cached area.

    The host calls ``resize()`` from its resize notification. Readers
    only ever see the values set there.

    Args:
        width: Viewport width in device pixels.
        height: Viewport height in device pixels.
    """

    def __init__(self, width: float = 0.0, height: float = 0.0) -> None:
        self._size = Size(0.0, 0.0)
        self._area = 0.0
        self.resize(width, height)

    @property
    def width(self) -> float:
        return self._size.width

    @property
    def height(self) -> float:
        return self._size.height

    @property
    def size(self) -> Size:
        return self._size

    @property
    def area(self) -> float:
        return self._area

    def resize(self, width: float, height: float) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Viewport size must be non-negative, got {width}x{height}")
        self._size = Size(float(width), float(height))
        self._area = self._size.area
        logger.debug("Viewport resized to %sx%s", width, height)

    def __repr__(self) -> str:
        return f"Viewport({self.width:g}x{self.height:g})"


__all__ = ["Viewport"]
