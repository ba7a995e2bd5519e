"""Estimate result types.

Estimators never raise on degenerate geometry. They return either a
``Computed`` value or an ``Indeterminate`` marker that records why the
value could not be derived, together with the number plain float
arithmetic would have produced (NaN or +/-inf).

Example:
    >>> est = estimate_depth(nose, left_eye, right_eye, viewport_area)
    >>> if est.is_indeterminate:
    ...     print(est.reason)
    >>> z = value_or(est, None)
"""

from dataclasses import dataclass
from typing import Any, Union

# Reasons reported by Indeterminate
NO_CONFIDENT_EAR = "no_confident_ear"
ZERO_EYE_SPAN = "zero_eye_span"
DEGENERATE_TRIANGLE = "degenerate_triangle"
NON_FINITE_INPUT = "non_finite_input"
MALFORMED_POSE = "malformed_pose"


@dataclass(frozen=True)
class Computed:
    """A successfully derived finite value."""

    value: float

    @property
    def is_indeterminate(self) -> bool:
        return False

    @property
    def raw(self) -> float:
        return self.value


@dataclass(frozen=True)
class Indeterminate:
    """A value that could not be derived from the given geometry.

    Attributes:
        reason: Machine-readable cause (e.g. "zero_eye_span").
        raw: Result of the unguarded arithmetic, usually NaN or +/-inf.
    """

    reason: str
    raw: float = float("nan")

    @property
    def is_indeterminate(self) -> bool:
        return True


Estimate = Union[Computed, Indeterminate]


def value_or(estimate: Estimate, default: Any) -> Any:
    """Return the computed value, or ``default`` if indeterminate."""
    if isinstance(estimate, Computed):
        return estimate.value
    return default


__all__ = [
    "Computed",
    "Indeterminate",
    "Estimate",
    "value_or",
    "NO_CONFIDENT_EAR",
    "ZERO_EYE_SPAN",
    "DEGENERATE_TRIANGLE",
    "NON_FINITE_INPUT",
    "MALFORMED_POSE",
]
