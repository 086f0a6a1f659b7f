"""
Matrix decompositions for solving and inverting square systems.

Provides:
- SVDecomposition: singular value decomposition (default, most robust)
- LUDecomposition: LU factorization with partial pivoting

Both refuse singular or ill-conditioned matrices with NumericalFailureError
instead of returning a meaningless inverse. The factors returned by
``decompose`` are immutable and can solve systems on their own.
"""

from abc import ABC, abstractmethod
from enum import Enum
import logging
import warnings

import numpy as np
from scipy.linalg import lu_factor, lu_solve, LinAlgWarning

from ..config import DEFAULT_CONDITION_THRESHOLD
from ..errors import InvalidArgumentError, NumericalFailureError

logger = logging.getLogger(__name__)


class DecompositionMethod(Enum):
    """Available decomposition strategies."""
    SVD = "svd"
    LU = "lu"


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr = np.array(arr, dtype=np.float64)
    arr.setflags(write=False)
    return arr


class DecompositionResult(ABC):
    """Factors of a decomposed square matrix."""

    @property
    @abstractmethod
    def condition_number(self) -> float:
        """Condition number of the decomposed matrix."""
        pass

    @abstractmethod
    def solve(self, b: np.ndarray) -> np.ndarray:
        """Solve A x = b for a vector or a matrix of right-hand sides."""
        pass

    def inverse(self) -> np.ndarray:
        """Inverse of the decomposed matrix."""
        return self.solve(np.eye(self.size))

    @property
    @abstractmethod
    def size(self) -> int:
        pass

    def _check_rhs(self, b: np.ndarray) -> np.ndarray:
        if b is None:
            raise InvalidArgumentError("Right-hand side must not be None")
        b = np.asarray(b, dtype=np.float64)
        if b.shape[0] != self.size:
            raise InvalidArgumentError(
                f"Right-hand side has {b.shape[0]} rows, matrix has {self.size}"
            )
        return b


class SVDecompositionResult(DecompositionResult):
    """A = U diag(s) V^T."""

    def __init__(self, u: np.ndarray, s: np.ndarray, vt: np.ndarray):
        self.u = _readonly(u)
        self.s = _readonly(s)
        self.vt = _readonly(vt)

    @property
    def size(self) -> int:
        return int(self.s.size)

    @property
    def condition_number(self) -> float:
        return float(self.s[0] / self.s[-1])

    def solve(self, b: np.ndarray) -> np.ndarray:
        b = self._check_rhs(b)
        utb = self.u.T @ b
        if utb.ndim == 1:
            return self.vt.T @ (utb / self.s)
        return self.vt.T @ (utb / self.s[:, None])

    def inverse(self) -> np.ndarray:
        return (self.vt.T / self.s) @ self.u.T


class LUDecompositionResult(DecompositionResult):
    """P A = L U, stored in scipy's packed form."""

    def __init__(self, lu: np.ndarray, piv: np.ndarray, condition_number: float):
        self.lu = _readonly(lu)
        self.piv = np.array(piv)
        self.piv.setflags(write=False)
        self._condition_number = condition_number

    @property
    def size(self) -> int:
        return int(self.lu.shape[0])

    @property
    def condition_number(self) -> float:
        return self._condition_number

    def solve(self, b: np.ndarray) -> np.ndarray:
        b = self._check_rhs(b)
        return lu_solve((self.lu, self.piv), b)


class Decomposition(ABC):
    """
    Strategy that factorizes square matrices.

    Attributes:
        condition_threshold: Largest accepted condition number
    """

    method: DecompositionMethod

    def __init__(self, condition_threshold: float = DEFAULT_CONDITION_THRESHOLD):
        if not condition_threshold > 1:
            raise InvalidArgumentError(
                f"condition_threshold must exceed 1, got {condition_threshold}"
            )
        self.condition_threshold = condition_threshold

    @abstractmethod
    def decompose(self, matrix: np.ndarray) -> DecompositionResult:
        """
        Factorize a square matrix.

        Raises:
            InvalidArgumentError: If matrix is None, not square or not finite
            NumericalFailureError: If matrix is singular or ill-conditioned
        """
        pass

    def solve(self, factors: DecompositionResult, b: np.ndarray) -> np.ndarray:
        """Solve A x = b using previously computed factors."""
        if factors is None:
            raise InvalidArgumentError("Factors must not be None")
        return factors.solve(b)

    def inverse(self, factors: DecompositionResult) -> np.ndarray:
        """Invert A using previously computed factors."""
        if factors is None:
            raise InvalidArgumentError("Factors must not be None")
        return factors.inverse()

    @staticmethod
    def _validate(matrix: np.ndarray) -> np.ndarray:
        if matrix is None:
            raise InvalidArgumentError("Matrix must not be None")
        a = np.array(matrix, dtype=np.float64)
        if a.ndim != 2 or a.shape[0] != a.shape[1] or a.shape[0] == 0:
            raise InvalidArgumentError(f"Matrix must be square and non-empty, got shape {a.shape}")
        if not np.all(np.isfinite(a)):
            raise InvalidArgumentError("Matrix contains non-finite values")
        return a

    def _check_condition(self, condition: float) -> None:
        if not np.isfinite(condition) or condition > self.condition_threshold:
            raise NumericalFailureError(
                f"Matrix is singular or ill-conditioned: condition number {condition:.3e} "
                f"exceeds threshold {self.condition_threshold:.3e}"
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(condition_threshold={self.condition_threshold:g})"


class SVDecomposition(Decomposition):
    """Singular value decomposition via numpy.linalg.svd."""

    method = DecompositionMethod.SVD

    def decompose(self, matrix: np.ndarray) -> SVDecompositionResult:
        a = self._validate(matrix)
        try:
            u, s, vt = np.linalg.svd(a)
        except np.linalg.LinAlgError as e:
            raise NumericalFailureError(f"SVD did not converge: {e}") from e

        if s[-1] <= 0.0:
            raise NumericalFailureError("Matrix is singular: smallest singular value is zero")
        condition = float(s[0] / s[-1])
        self._check_condition(condition)
        logger.debug(f"SVD of {a.shape[0]}x{a.shape[0]} matrix, condition number {condition:.3e}")
        return SVDecompositionResult(u, s, vt)


class LUDecomposition(Decomposition):
    """LU decomposition with partial pivoting via scipy.linalg.lu_factor."""

    method = DecompositionMethod.LU

    def decompose(self, matrix: np.ndarray) -> LUDecompositionResult:
        a = self._validate(matrix)
        with warnings.catch_warnings():
            # exactly singular input is reported below as NumericalFailureError
            warnings.simplefilter("ignore", LinAlgWarning)
            lu, piv = lu_factor(a)

        if np.any(np.diag(lu) == 0.0):
            raise NumericalFailureError("Matrix is singular: zero pivot in LU factorization")

        inverse = lu_solve((lu, piv), np.eye(a.shape[0]))
        condition = float(np.linalg.norm(a, 1) * np.linalg.norm(inverse, 1))
        self._check_condition(condition)
        logger.debug(f"LU of {a.shape[0]}x{a.shape[0]} matrix, condition number {condition:.3e}")
        return LUDecompositionResult(lu, piv, condition)


def create_decomposition(
    method="svd",
    condition_threshold: float = DEFAULT_CONDITION_THRESHOLD,
) -> Decomposition:
    """
    Factory function to create a decomposition by name.

    Args:
        method: DecompositionMethod or one of "svd", "lu"
        condition_threshold: Largest accepted condition number

    Returns:
        Decomposition instance
    """
    if isinstance(method, DecompositionMethod):
        method = method.value
    name = str(method).lower().replace("-", "_").replace(" ", "_")

    if name in ("svd", "sv", "singular_value"):
        return SVDecomposition(condition_threshold)
    elif name in ("lu",):
        return LUDecomposition(condition_threshold)
    else:
        raise InvalidArgumentError(f"Unknown decomposition method: {method}")


__all__ = [
    "DecompositionMethod",
    "DecompositionResult",
    "SVDecompositionResult",
    "LUDecompositionResult",
    "Decomposition",
    "SVDecomposition",
    "LUDecomposition",
    "create_decomposition",
]
