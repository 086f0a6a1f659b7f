"""
Quasi-Newton vector root finder with Broyden inverse updates.

Algorithm:
1. Evaluate r_k = F(x_k); stop once ||r_k|| is below tolerance
2. Step delta = -M_k r_k using the inverse-Jacobian estimate M_k
3. Evaluate r_{k+1} = F(x_k + delta)
4. Sherman-Morrison rank-one update of M_k from (delta, r_{k+1} - r_k)

M_0 is computed once by InverseJacobianEstimateInitializer; exact Jacobians
are never recomputed afterwards. Iteration state is an immutable
BroydenState so that independent runs share nothing.
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Optional

import numpy as np

from ...config import (
    DEFAULT_ABSOLUTE_TOLERANCE,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_STALL_TOLERANCE,
    RootFinderSettings,
)
from ...errors import InvalidArgumentError, NonConvergenceError, NumericalFailureError
from ..decomposition import SVDecomposition
from ..functions import VectorFunction, to_vector, vector_function
from .initialization import InverseJacobianEstimateInitializer

logger = logging.getLogger(__name__)


class RootFinderStatus(Enum):
    """Lifecycle of a root-finding run."""
    INITIALIZED = "initialized"
    ITERATING = "iterating"
    CONVERGED = "converged"
    FAILED_MAX_ITERATIONS = "failed_max_iterations"
    FAILED_STALLED_UPDATE = "failed_stalled_update"


@dataclass(frozen=True)
class BroydenState:
    """
    Snapshot of a run between two iterations.

    Attributes:
        x: Current iterate
        residual: F(x)
        residual_norm: Euclidean norm of residual
        inverse_jacobian: Current estimate of [J(x)]^-1 (None once converged
            before it was needed)
        iteration: Number of completed steps
        status: Run status after producing this state
    """
    x: np.ndarray
    residual: np.ndarray
    residual_norm: float
    inverse_jacobian: Optional[np.ndarray]
    iteration: int
    status: RootFinderStatus


@dataclass(frozen=True)
class RootFinderResult:
    """Converged root and run diagnostics."""
    x: np.ndarray
    residual: np.ndarray
    residual_norm: float
    iterations: int
    status: RootFinderStatus = RootFinderStatus.CONVERGED

    @property
    def converged(self) -> bool:
        return self.status == RootFinderStatus.CONVERGED


class BroydenVectorRootFinder:
    """
    Find x such that F(x) = 0 for F: R^n -> R^n.

    Attributes:
        settings: Tolerances and iteration budget
        initializer: Produces the initial inverse-Jacobian estimate
            (SVD-based by default)
    """

    def __init__(
        self,
        absolute_tolerance: float = DEFAULT_ABSOLUTE_TOLERANCE,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        stall_tolerance: float = DEFAULT_STALL_TOLERANCE,
        max_step: Optional[float] = None,
        initializer: Optional[InverseJacobianEstimateInitializer] = None,
    ):
        self.settings = RootFinderSettings(
            absolute_tolerance=absolute_tolerance,
            max_iterations=max_iterations,
            stall_tolerance=stall_tolerance,
            max_step=max_step,
        )
        if initializer is None:
            initializer = InverseJacobianEstimateInitializer(SVDecomposition())
        self.initializer = initializer

    @classmethod
    def from_settings(
        cls,
        settings: RootFinderSettings,
        initializer: Optional[InverseJacobianEstimateInitializer] = None,
    ) -> "BroydenVectorRootFinder":
        """Create a root finder from a settings object."""
        if settings is None:
            raise InvalidArgumentError("Settings must not be None")
        return cls(initializer=initializer, **settings.to_dict())

    def find_root(self, function, x0) -> RootFinderResult:
        """
        Solve F(x) = 0 starting from x0.

        Args:
            function: VectorFunction or callable mapping R^n to R^n
            x0: Initial guess

        Returns:
            RootFinderResult with status CONVERGED

        Raises:
            InvalidArgumentError: If inputs are absent or dimensions disagree
            NumericalFailureError: Singular initial Jacobian, stalled secant
                update or non-finite residual
            NonConvergenceError: Iteration budget exhausted; carries the best
                iterate found
        """
        fn = self._as_function(function)
        state = self.initial_state(fn, x0)
        best = state

        while state.status != RootFinderStatus.CONVERGED:
            if state.iteration >= self.settings.max_iterations:
                logger.warning(
                    f"Root finder failed to converge in {state.iteration} iterations, "
                    f"residual norm {state.residual_norm:.6e}"
                )
                raise NonConvergenceError(
                    "Root finder did not converge",
                    x=best.x,
                    residual_norm=state.residual_norm,
                    iterations=state.iteration,
                    status=RootFinderStatus.FAILED_MAX_ITERATIONS,
                )
            state = self.step(fn, state)
            if state.residual_norm < best.residual_norm:
                best = state

        logger.info(
            f"Root finder converged in {state.iteration} iterations, "
            f"residual norm {state.residual_norm:.3e}"
        )
        return RootFinderResult(
            x=state.x,
            residual=state.residual,
            residual_norm=state.residual_norm,
            iterations=state.iteration,
            status=RootFinderStatus.CONVERGED,
        )

    def initial_state(
        self,
        function,
        x0,
        inverse_jacobian: Optional[np.ndarray] = None,
    ) -> BroydenState:
        """
        Evaluate F at x0 and seed the inverse-Jacobian estimate.

        The estimate is only computed when x0 is not already a root and no
        explicit ``inverse_jacobian`` is supplied.
        """
        fn = self._as_function(function)
        x = to_vector(x0, "x0")
        residual = self._evaluate(fn, x, x, None)
        norm = float(np.linalg.norm(residual))

        if norm < self.settings.absolute_tolerance:
            return BroydenState(x, residual, norm, inverse_jacobian, 0, RootFinderStatus.CONVERGED)

        if inverse_jacobian is None:
            inverse_jacobian = self.initializer.initialized_matrix(fn, x)
        else:
            inverse_jacobian = np.array(inverse_jacobian, dtype=np.float64)
            if inverse_jacobian.shape != (x.size, x.size):
                raise InvalidArgumentError(
                    f"Inverse Jacobian must be {x.size}x{x.size}, got shape {inverse_jacobian.shape}"
                )

        logger.debug(f"Root finder initialized: dimension {x.size}, residual norm {norm:.6e}")
        return BroydenState(x, residual, norm, inverse_jacobian, 0, RootFinderStatus.INITIALIZED)

    def step(self, function, state: BroydenState) -> BroydenState:
        """
        Perform one quasi-Newton iteration.

        Pure: returns a new state and leaves ``state`` untouched.
        """
        if state is None:
            raise InvalidArgumentError("State must not be None")
        if state.status == RootFinderStatus.CONVERGED:
            return state

        fn = self._as_function(function)
        m = state.inverse_jacobian
        delta = -m @ state.residual
        delta_norm = float(np.linalg.norm(delta))

        max_step = self.settings.max_step
        if max_step is not None and delta_norm > max_step:
            delta = delta * (max_step / delta_norm)
            delta_norm = max_step

        x_new = state.x + delta
        residual_new = self._evaluate(fn, x_new, state.x, state.residual_norm)
        norm_new = float(np.linalg.norm(residual_new))
        iteration = state.iteration + 1

        logger.debug(
            f"Iteration {iteration}: step norm {delta_norm:.3e}, residual norm {norm_new:.6e}"
        )

        if norm_new < self.settings.absolute_tolerance:
            return BroydenState(x_new, residual_new, norm_new, m, iteration, RootFinderStatus.CONVERGED)

        m_y = m @ (residual_new - state.residual)
        denominator = float(delta @ m_y)
        threshold = self.settings.stall_tolerance * delta_norm * float(np.linalg.norm(m_y))
        if not np.isfinite(denominator) or abs(denominator) <= threshold:
            logger.warning(
                f"Secant update stalled at iteration {iteration}: denominator {denominator:.3e}"
            )
            raise NumericalFailureError(
                f"Secant update stalled at iteration {iteration}",
                x=x_new,
                residual_norm=norm_new,
                status=RootFinderStatus.FAILED_STALLED_UPDATE,
            )

        m_new = m + np.outer(delta - m_y, delta @ m) / denominator
        return BroydenState(x_new, residual_new, norm_new, m_new, iteration, RootFinderStatus.ITERATING)

    @staticmethod
    def _as_function(function) -> VectorFunction:
        if function is None:
            raise InvalidArgumentError("Function must not be None")
        return vector_function(function)

    @staticmethod
    def _evaluate(
        fn: VectorFunction,
        x: np.ndarray,
        last_x: np.ndarray,
        last_norm: Optional[float],
    ) -> np.ndarray:
        residual = np.atleast_1d(np.asarray(fn(x), dtype=np.float64))
        if residual.shape != x.shape:
            raise InvalidArgumentError(
                f"Residual has shape {residual.shape}, parameter vector has shape {x.shape}"
            )
        if not np.all(np.isfinite(residual)):
            raise NumericalFailureError(
                "Residual function returned non-finite values",
                x=last_x,
                residual_norm=last_norm,
            )
        return residual

    def __repr__(self) -> str:
        s = self.settings
        return (f"BroydenVectorRootFinder(tol={s.absolute_tolerance:g}, "
                f"max_iterations={s.max_iterations}, {self.initializer!r})")


__all__ = [
    "RootFinderStatus",
    "BroydenState",
    "RootFinderResult",
    "BroydenVectorRootFinder",
]
