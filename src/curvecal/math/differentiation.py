"""
Finite-difference differentiation.

Provides:
- differentiate: scalar first derivative, domain aware
- finite_difference_jacobian: m x n Jacobian of a vector function

When a domain predicate is supplied and the central stencil would leave it
(typically at the first or last knot of a curve), the one-sided second-order
stencil that stays inside the domain is used instead.
"""

from enum import Enum
from typing import Callable, Optional

import numpy as np

from ..config import DEFAULT_FINITE_DIFFERENCE_STEP
from ..errors import InvalidArgumentError


class FiniteDifferenceType(Enum):
    """Finite difference stencil."""
    FORWARD = "forward"
    CENTRAL = "central"
    BACKWARD = "backward"


def _forward_second_order(func: Callable[[float], float], x: float, eps: float) -> float:
    return (-3.0 * func(x) + 4.0 * func(x + eps) - func(x + 2.0 * eps)) / (2.0 * eps)


def _backward_second_order(func: Callable[[float], float], x: float, eps: float) -> float:
    return (3.0 * func(x) - 4.0 * func(x - eps) + func(x - 2.0 * eps)) / (2.0 * eps)


def differentiate(
    func: Callable[[float], float],
    x: float,
    eps: float = DEFAULT_FINITE_DIFFERENCE_STEP,
    difference: FiniteDifferenceType = FiniteDifferenceType.CENTRAL,
    domain: Optional[Callable[[float], bool]] = None,
) -> float:
    """
    First derivative of a scalar function by finite differences.

    Args:
        func: Scalar function
        x: Point of evaluation
        eps: Step size
        difference: Preferred stencil
        domain: Optional predicate returning True where func may be evaluated

    Returns:
        Derivative estimate at x

    Raises:
        InvalidArgumentError: If eps is not positive or no stencil fits the domain
    """
    if not eps > 0:
        raise InvalidArgumentError(f"Step must be positive, got {eps}")
    x = float(x)

    if domain is None:
        if difference == FiniteDifferenceType.FORWARD:
            return float((func(x + eps) - func(x)) / eps)
        if difference == FiniteDifferenceType.BACKWARD:
            return float((func(x) - func(x - eps)) / eps)
        return float((func(x + eps) - func(x - eps)) / (2.0 * eps))

    if not domain(x):
        raise InvalidArgumentError(f"Point {x} is outside the function domain")

    up = domain(x + eps) and domain(x + 2.0 * eps)
    down = domain(x - eps) and domain(x - 2.0 * eps)

    if difference == FiniteDifferenceType.CENTRAL and domain(x - eps) and domain(x + eps):
        return float((func(x + eps) - func(x - eps)) / (2.0 * eps))
    if difference == FiniteDifferenceType.BACKWARD and down:
        return float(_backward_second_order(func, x, eps))
    if up:
        return float(_forward_second_order(func, x, eps))
    if down:
        return float(_backward_second_order(func, x, eps))
    raise InvalidArgumentError(
        f"Domain around {x} is too narrow for step {eps}"
    )


def finite_difference_jacobian(
    func: Callable[[np.ndarray], np.ndarray],
    x: np.ndarray,
    eps: float = DEFAULT_FINITE_DIFFERENCE_STEP,
    difference: FiniteDifferenceType = FiniteDifferenceType.CENTRAL,
) -> np.ndarray:
    """
    Jacobian of a vector function by bump-and-revalue.

    The bump for parameter j is ``eps * max(1, |x_j|)``.

    Args:
        func: Vector function R^n -> R^m
        x: Point of evaluation, shape (n,)
        eps: Relative step size
        difference: Stencil used for every column

    Returns:
        Array of shape (m, n) with J[i, j] = d f_i / d x_j
    """
    if not eps > 0:
        raise InvalidArgumentError(f"Step must be positive, got {eps}")
    x = np.array(x, dtype=np.float64)
    n = x.size

    base = None
    if difference != FiniteDifferenceType.CENTRAL:
        base = np.asarray(func(x), dtype=np.float64)

    columns = []
    for j in range(n):
        h = eps * max(1.0, abs(x[j]))
        up = x.copy()
        down = x.copy()
        up[j] += h
        down[j] -= h
        if difference == FiniteDifferenceType.CENTRAL:
            col = (np.asarray(func(up), dtype=np.float64)
                   - np.asarray(func(down), dtype=np.float64)) / (2.0 * h)
        elif difference == FiniteDifferenceType.FORWARD:
            col = (np.asarray(func(up), dtype=np.float64) - base) / h
        else:
            col = (base - np.asarray(func(down), dtype=np.float64)) / h
        columns.append(np.atleast_1d(col))

    return np.column_stack(columns)


__all__ = [
    "FiniteDifferenceType",
    "differentiate",
    "finite_difference_jacobian",
]
