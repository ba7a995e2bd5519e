"""Configuration for the pose pointer.

Example:
    >>> from posepointer.config import PointerConfig
    >>>
    >>> config = PointerConfig(pose_stack_size=12, min_part_confidence=0.4)
    >>> config = PointerConfig.from_yaml("pointer.yaml")
"""

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

logger = logging.getLogger(__name__)

# Option names used by browser-side pointer configs
_CAMEL_CASE_KEYS = {
    "poseStackSize": "pose_stack_size",
    "minPartConfidence": "min_part_confidence",
    "minPoseConfidence": "min_pose_confidence",
    "maxUsers": "max_users",
    "trackTtlFrames": "track_ttl_frames",
    "propagateNan": "propagate_nan",
}

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValueError(f"{key} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class PointerConfig:
    """Tunables for pointer resolution.

    Attributes:
        pose_stack_size: Samples kept per track for smoothing (>= 1).
        min_part_confidence: Minimum ear score for inclusion in pitch.
        min_pose_confidence: Minimum pose score for debug overlays. Not used
            by the pointer math.
        max_users: Poses kept per frame, highest score first (>= 1).
        track_ttl_frames: Frames a track may go unseen before its smoothing
            history is dropped. 0 keeps every track forever.
        propagate_nan: If True, degenerate geometry yields NaN/inf exactly as
            unguarded arithmetic would, including inside the smoothing
            history. If False, indeterminate angles add no offset and are
            reported as None, and indeterminate depth is reported as None.
    """

    pose_stack_size: int = 8
    min_part_confidence: float = 0.5
    min_pose_confidence: float = 0.1
    max_users: int = 1
    track_ttl_frames: int = 30
    propagate_nan: bool = False

    def __post_init__(self) -> None:
        if self.pose_stack_size < 1:
            raise ValueError(f"pose_stack_size must be >= 1, got {self.pose_stack_size}")
        if not 0.0 <= self.min_part_confidence <= 1.0:
            raise ValueError(
                f"min_part_confidence must be in [0, 1], got {self.min_part_confidence}"
            )
        if not 0.0 <= self.min_pose_confidence <= 1.0:
            raise ValueError(
                f"min_pose_confidence must be in [0, 1], got {self.min_pose_confidence}"
            )
        if self.max_users < 1:
            raise ValueError(f"max_users must be >= 1, got {self.max_users}")
        if self.track_ttl_frames < 0:
            raise ValueError(f"track_ttl_frames must be >= 0, got {self.track_ttl_frames}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PointerConfig":
        """Create a PointerConfig from a dictionary.

        Accepts snake_case keys and the camelCase option names of the
        browser pointer (``poseStackSize``, ``minPartConfidence``, ...),
        optionally nested under ``posenet``. Unknown keys are ignored.

        Args:
            data: Dictionary with configuration data.

        Returns:
            PointerConfig instance.
        """
        nested = data.get("posenet") or {}
        if not isinstance(nested, dict):
            raise ValueError(f"posenet: expected a mapping, got {type(nested).__name__}")

        flat: Dict[str, Any] = {}
        for source in (nested, data):
            for key, value in source.items():
                if key == "posenet":
                    continue
                flat[_CAMEL_CASE_KEYS.get(key, key)] = value

        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in flat.items():
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            kwargs[key] = value

        for key in ("pose_stack_size", "max_users", "track_ttl_frames"):
            if key in kwargs:
                kwargs[key] = int(kwargs[key])
        for key in ("min_part_confidence", "min_pose_confidence"):
            if key in kwargs:
                kwargs[key] = float(kwargs[key])
        if "propagate_nan" in kwargs:
            kwargs["propagate_nan"] = _parse_bool("propagate_nan", kwargs["propagate_nan"])

        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "PointerConfig":
        """Load a PointerConfig from a YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the file does not hold a mapping.
        """
        import yaml

        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"{yaml_path}: expected a mapping, got {type(data).__name__}")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["PointerConfig"]
