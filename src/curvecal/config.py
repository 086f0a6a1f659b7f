"""
Default settings for calibration numerics.

Components take these as constructor keyword defaults; callers override them
per instance. RootFinderSettings bundles the root-finder knobs so one object
can be shared between independent calibration runs.
"""

from dataclasses import dataclass, asdict
from typing import Optional

from .errors import InvalidArgumentError

# Root finder
DEFAULT_ABSOLUTE_TOLERANCE = 1e-10
DEFAULT_MAX_ITERATIONS = 100
DEFAULT_STALL_TOLERANCE = 1e-14

# Decomposition: reject matrices whose condition number exceeds this
DEFAULT_CONDITION_THRESHOLD = 1e12

# Finite differences
DEFAULT_FINITE_DIFFERENCE_STEP = 1e-6

# Product-space spline: |x| below this cannot be back-transformed
DEFAULT_PRODUCT_MIN_ABS_X = 1e-10


@dataclass(frozen=True)
class RootFinderSettings:
    """
    Settings for the Broyden vector root finder.

    Attributes:
        absolute_tolerance: Converged once the residual norm is below this
        max_iterations: Iteration budget before NonConvergenceError
        stall_tolerance: Relative size under which the secant denominator
            is treated as zero
        max_step: Optional cap on the Euclidean norm of each step
    """
    absolute_tolerance: float = DEFAULT_ABSOLUTE_TOLERANCE
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    stall_tolerance: float = DEFAULT_STALL_TOLERANCE
    max_step: Optional[float] = None

    def __post_init__(self):
        if not self.absolute_tolerance > 0:
            raise InvalidArgumentError(
                f"absolute_tolerance must be positive, got {self.absolute_tolerance}"
            )
        if self.max_iterations < 1:
            raise InvalidArgumentError(
                f"max_iterations must be at least 1, got {self.max_iterations}"
            )
        if not self.stall_tolerance > 0:
            raise InvalidArgumentError(
                f"stall_tolerance must be positive, got {self.stall_tolerance}"
            )
        if self.max_step is not None and not self.max_step > 0:
            raise InvalidArgumentError(f"max_step must be positive, got {self.max_step}")

    def to_dict(self) -> dict:
        return asdict(self)


__all__ = [
    "DEFAULT_ABSOLUTE_TOLERANCE",
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_STALL_TOLERANCE",
    "DEFAULT_CONDITION_THRESHOLD",
    "DEFAULT_FINITE_DIFFERENCE_STEP",
    "DEFAULT_PRODUCT_MIN_ABS_X",
    "RootFinderSettings",
]
