"""
Exception hierarchy for curve calibration.

Three error kinds are raised by the library:
- InvalidArgumentError: bad or missing inputs, detected at the boundary
- NumericalFailureError: singular matrices, stalled secant updates, NaN/Inf
- NonConvergenceError: the root finder ran out of iterations

None of them are retried internally.
"""

from typing import Optional

import numpy as np


class CurveCalError(Exception):
    """Base exception for all curvecal failures."""


class InvalidArgumentError(CurveCalError, ValueError):
    """Required input is absent, inconsistent or outside its valid domain."""


class NumericalFailureError(CurveCalError, ArithmeticError):
    """
    A numerical routine could not produce a trustworthy result.

    Attributes:
        x: Last iterate when raised from the root finder (None otherwise)
        residual_norm: Residual norm at ``x`` when known
        status: Root finder status when raised from the root finder
    """

    def __init__(
        self,
        message: str,
        x: Optional[np.ndarray] = None,
        residual_norm: Optional[float] = None,
        status=None,
    ):
        self.x = None if x is None else np.array(x, dtype=np.float64)
        self.residual_norm = residual_norm
        self.status = status
        if residual_norm is not None:
            message = f"{message} (residual norm {residual_norm:.6e})"
        super().__init__(message)


class NonConvergenceError(CurveCalError, RuntimeError):
    """
    Root finder exhausted its iteration budget.

    Attributes:
        x: Best iterate found (lowest residual norm)
        residual_norm: Residual norm of the last iterate
        iterations: Number of iterations performed
        status: Root finder status when raised from the root finder
    """

    def __init__(
        self,
        message: str,
        x: np.ndarray,
        residual_norm: float,
        iterations: int,
        status=None,
    ):
        self.x = np.array(x, dtype=np.float64)
        self.residual_norm = residual_norm
        self.iterations = iterations
        self.status = status
        super().__init__(
            f"{message} after {iterations} iterations "
            f"(last residual norm {residual_norm:.6e})"
        )


__all__ = [
    "CurveCalError",
    "InvalidArgumentError",
    "NumericalFailureError",
    "NonConvergenceError",
]
