"""
Initial inverse-Jacobian estimate for quasi-Newton root finding.

The Jacobian is computed once at the starting point, decomposed and inverted.
Subsequent iterations refine the inverse with cheap secant updates instead of
recomputing it.
"""

import logging

import numpy as np

from ...errors import InvalidArgumentError, NumericalFailureError
from ..decomposition import Decomposition
from ..functions import to_vector, vector_function

logger = logging.getLogger(__name__)


class InverseJacobianEstimateInitializer:
    """
    Seeds the root finder with [J(x0)]^-1.

    Attributes:
        decomposition: Strategy used to invert the Jacobian
    """

    def __init__(self, decomposition: Decomposition):
        if decomposition is None:
            raise InvalidArgumentError("Decomposition must not be None")
        self.decomposition = decomposition

    def initialized_matrix(self, function, x: np.ndarray) -> np.ndarray:
        """
        Estimate the inverse Jacobian of ``function`` at ``x``.

        Args:
            function: VectorFunction (its own ``jacobian`` is used) or a plain
                callable (central finite differences)
            x: Evaluation point

        Returns:
            n x n matrix M with M @ J(x) close to the identity

        Raises:
            InvalidArgumentError: If function or x is None, or J is not n x n
            NumericalFailureError: If J(x) is non-finite, singular or ill-conditioned
        """
        if function is None:
            raise InvalidArgumentError("Function must not be None")
        x = to_vector(x, "x")

        jacobian = np.atleast_2d(np.asarray(vector_function(function).jacobian(x), dtype=np.float64))
        n = x.size
        if jacobian.shape != (n, n):
            raise InvalidArgumentError(
                f"Jacobian must be {n}x{n} at a point of dimension {n}, got shape {jacobian.shape}"
            )
        if not np.all(np.isfinite(jacobian)):
            raise NumericalFailureError(
                "Jacobian contains non-finite values at the initial point", x=x
            )

        factors = self.decomposition.decompose(jacobian)
        logger.debug(
            f"Initial Jacobian {n}x{n} decomposed, condition number {factors.condition_number:.3e}"
        )
        return self.decomposition.inverse(factors)

    def __repr__(self) -> str:
        return f"InverseJacobianEstimateInitializer({self.decomposition!r})"


__all__ = ["InverseJacobianEstimateInitializer"]
