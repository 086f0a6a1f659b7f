"""
Vector-valued functions used by the root finder.

A VectorFunction maps a parameter vector to a residual vector and can report
its Jacobian. The default Jacobian is a central finite-difference estimate;
subclasses with an analytic Jacobian override ``jacobian``.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

import numpy as np

from ..config import DEFAULT_FINITE_DIFFERENCE_STEP
from ..errors import InvalidArgumentError
from .differentiation import finite_difference_jacobian


def to_vector(values, name: str = "vector") -> np.ndarray:
    """Convert to a 1-D float array, rejecting None, empty and non-finite input."""
    if values is None:
        raise InvalidArgumentError(f"{name} must not be None")
    arr = np.array(values, dtype=np.float64)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.ndim != 1:
        raise InvalidArgumentError(f"{name} must be one-dimensional, got shape {arr.shape}")
    if arr.size == 0:
        raise InvalidArgumentError(f"{name} must not be empty")
    if not np.all(np.isfinite(arr)):
        raise InvalidArgumentError(f"{name} contains non-finite values")
    return arr


class VectorFunction(ABC):
    """Function R^n -> R^m with an optional Jacobian."""

    jacobian_step: float = DEFAULT_FINITE_DIFFERENCE_STEP

    @abstractmethod
    def evaluate(self, x: np.ndarray) -> np.ndarray:
        """Evaluate the function at x."""
        pass

    def __call__(self, x: np.ndarray) -> np.ndarray:
        return self.evaluate(x)

    def jacobian(self, x: np.ndarray) -> np.ndarray:
        """
        Jacobian at x, shape (m, n).

        Central finite differences unless overridden.
        """
        return finite_difference_jacobian(self.evaluate, x, self.jacobian_step)


class CallableVectorFunction(VectorFunction):
    """VectorFunction wrapping a plain callable and an optional Jacobian callable."""

    def __init__(
        self,
        func: Callable[[np.ndarray], np.ndarray],
        jacobian: Optional[Callable[[np.ndarray], np.ndarray]] = None,
        jacobian_step: float = DEFAULT_FINITE_DIFFERENCE_STEP,
    ):
        if func is None:
            raise InvalidArgumentError("Function must not be None")
        self._func = func
        self._jacobian = jacobian
        self.jacobian_step = jacobian_step

    def evaluate(self, x: np.ndarray) -> np.ndarray:
        return np.atleast_1d(np.asarray(self._func(x), dtype=np.float64))

    def jacobian(self, x: np.ndarray) -> np.ndarray:
        if self._jacobian is None:
            return super().jacobian(x)
        return np.atleast_2d(np.asarray(self._jacobian(x), dtype=np.float64))


def vector_function(
    func,
    jacobian: Optional[Callable[[np.ndarray], np.ndarray]] = None,
    jacobian_step: float = DEFAULT_FINITE_DIFFERENCE_STEP,
) -> VectorFunction:
    """
    Wrap a callable as a VectorFunction.

    VectorFunction instances are returned unchanged unless an explicit
    Jacobian is supplied.
    """
    if func is None:
        raise InvalidArgumentError("Function must not be None")
    if isinstance(func, VectorFunction) and jacobian is None:
        return func
    return CallableVectorFunction(func, jacobian, jacobian_step)


__all__ = [
    "VectorFunction",
    "CallableVectorFunction",
    "vector_function",
    "to_vector",
]
