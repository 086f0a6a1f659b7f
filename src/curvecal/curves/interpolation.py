"""
Interpolation methods for calibrated curves.

Provides:
- LinearInterpolator: Piecewise linear interpolation
- LogLinearInterpolator: Linear interpolation of log(y), y > 0
- NaturalSplineInterpolator: Natural cubic spline (zero curvature at ends)
- ProductNaturalSplineInterpolator: Natural cubic spline fitted to x*y

An interpolator is a stateless strategy; ``bind(x, y)`` fits it to a knot
set once and returns an immutable BoundCurveInterpolator that answers value,
first-derivative and parameter-sensitivity queries. Queries are only valid
inside [x[0], x[-1]]; there is no extrapolation.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Union

import numpy as np

from ..config import DEFAULT_PRODUCT_MIN_ABS_X
from ..errors import InvalidArgumentError


def _validate_knots(x_values, y_values, min_size: int, name: str):
    if x_values is None or y_values is None:
        raise InvalidArgumentError("Knot values must not be None")
    x = np.array(x_values, dtype=np.float64).ravel()
    y = np.array(y_values, dtype=np.float64).ravel()

    if x.size != y.size:
        raise InvalidArgumentError(
            f"x and y knots must have same length, got {x.size} and {y.size}"
        )
    if x.size < min_size:
        raise InvalidArgumentError(
            f"{name} needs at least {min_size} knots, got {x.size}"
        )
    if not (np.all(np.isfinite(x)) and np.all(np.isfinite(y))):
        raise InvalidArgumentError("Knot values must be finite")
    if np.any(np.diff(x) <= 0):
        raise InvalidArgumentError("x knots must be strictly increasing")

    x.setflags(write=False)
    y.setflags(write=False)
    return x, y


class BoundCurveInterpolator(ABC):
    """
    An interpolator fitted to a specific knot set.

    Attributes:
        x_values: Knot x values (read-only, strictly increasing)
        y_values: Knot y values (read-only)
    """

    def __init__(self, x_values: np.ndarray, y_values: np.ndarray):
        self.x_values = x_values
        self.y_values = y_values

    @property
    def size(self) -> int:
        return int(self.x_values.size)

    def interpolate(self, x: float) -> float:
        """
        Interpolated value at x.

        Returns the knot's y value exactly when x is a knot.
        """
        x = self._check_domain(x)
        idx = int(np.searchsorted(self.x_values, x))
        if idx < self.size and self.x_values[idx] == x:
            return float(self.y_values[idx])
        return self._interpolate(x, self._interval(x))

    def __call__(self, x: float) -> float:
        """Convenience method to call interpolate."""
        return self.interpolate(x)

    def first_derivative(self, x: float) -> float:
        """First derivative dy/dx at x."""
        x = self._check_domain(x)
        return self._first_derivative(x, self._interval(x))

    def parameter_sensitivity(self, x: float) -> np.ndarray:
        """
        Sensitivity of interpolate(x) to each y knot.

        Returns:
            Array of length size with d interpolate(x) / d y_i
        """
        x = self._check_domain(x)
        return self._parameter_sensitivity(x, self._interval(x))

    @abstractmethod
    def _interpolate(self, x: float, idx: int) -> float:
        pass

    @abstractmethod
    def _first_derivative(self, x: float, idx: int) -> float:
        pass

    @abstractmethod
    def _parameter_sensitivity(self, x: float, idx: int) -> np.ndarray:
        pass

    def _check_domain(self, x: float) -> float:
        x = float(x)
        if not self.x_values[0] <= x <= self.x_values[-1]:
            raise InvalidArgumentError(
                f"x={x} is outside the knot domain "
                f"[{self.x_values[0]}, {self.x_values[-1]}]"
            )
        return x

    def _interval(self, x: float) -> int:
        """Index i of the interval [x_i, x_{i+1}] containing x."""
        idx = int(np.searchsorted(self.x_values, x, side='right')) - 1
        return max(0, min(idx, self.size - 2))

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(knots={self.size}, "
                f"domain=[{self.x_values[0]}, {self.x_values[-1]}])")


class CurveInterpolator(ABC):
    """Strategy that fits knot sets; see ``bind``."""

    name: str = ""
    min_knots: int = 2

    def bind(self, x_values, y_values) -> BoundCurveInterpolator:
        """
        Fit the interpolator to knots.

        Args:
            x_values: Strictly increasing knot x values
            y_values: Knot y values, same length

        Returns:
            Immutable bound interpolator

        Raises:
            InvalidArgumentError: If the knots are inconsistent or too few
        """
        x, y = _validate_knots(x_values, y_values, self.min_knots, self.name)
        return self._bind(x, y)

    @abstractmethod
    def _bind(self, x: np.ndarray, y: np.ndarray) -> BoundCurveInterpolator:
        pass

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ---------------------------------------------------------------------------
# Linear
# ---------------------------------------------------------------------------

class BoundLinearInterpolator(BoundCurveInterpolator):
    """Piecewise linear between knots."""

    def _interpolate(self, x: float, idx: int) -> float:
        x0, x1 = self.x_values[idx], self.x_values[idx + 1]
        v0, v1 = self.y_values[idx], self.y_values[idx + 1]
        w = (x - x0) / (x1 - x0)
        return float(v0 + w * (v1 - v0))

    def _first_derivative(self, x: float, idx: int) -> float:
        x0, x1 = self.x_values[idx], self.x_values[idx + 1]
        v0, v1 = self.y_values[idx], self.y_values[idx + 1]
        return float((v1 - v0) / (x1 - x0))

    def _parameter_sensitivity(self, x: float, idx: int) -> np.ndarray:
        x0, x1 = self.x_values[idx], self.x_values[idx + 1]
        w = (x - x0) / (x1 - x0)
        sens = np.zeros(self.size)
        sens[idx] = 1.0 - w
        sens[idx + 1] = w
        return sens


class LinearInterpolator(CurveInterpolator):
    """
    Linear interpolation.

    Simple linear interpolation between knot points.
    """
    name = "Linear"
    min_knots = 2

    def _bind(self, x: np.ndarray, y: np.ndarray) -> BoundLinearInterpolator:
        return BoundLinearInterpolator(x, y)


# ---------------------------------------------------------------------------
# Log-linear
# ---------------------------------------------------------------------------

class BoundLogLinearInterpolator(BoundCurveInterpolator):
    """Linear in log(y); piecewise constant log-slope."""

    def __init__(self, x_values: np.ndarray, y_values: np.ndarray):
        super().__init__(x_values, y_values)
        self.log_values = np.log(y_values)
        self.log_values.setflags(write=False)

    def _log_slope(self, idx: int) -> float:
        x0, x1 = self.x_values[idx], self.x_values[idx + 1]
        return (self.log_values[idx + 1] - self.log_values[idx]) / (x1 - x0)

    def _interpolate(self, x: float, idx: int) -> float:
        dx = x - self.x_values[idx]
        return float(np.exp(self.log_values[idx] + self._log_slope(idx) * dx))

    def _first_derivative(self, x: float, idx: int) -> float:
        return float(self._interpolate(x, idx) * self._log_slope(idx))

    def _parameter_sensitivity(self, x: float, idx: int) -> np.ndarray:
        x0, x1 = self.x_values[idx], self.x_values[idx + 1]
        w = (x - x0) / (x1 - x0)
        value = self._interpolate(x, idx)
        sens = np.zeros(self.size)
        sens[idx] = value * (1.0 - w) / self.y_values[idx]
        sens[idx + 1] = value * w / self.y_values[idx + 1]
        return sens


class LogLinearInterpolator(CurveInterpolator):
    """
    Log-linear interpolation.

    Interpolates linearly in log(y) space; with discount factors as y this
    corresponds to piecewise constant forward rates. Requires y > 0.
    """
    name = "LogLinear"
    min_knots = 2

    def _bind(self, x: np.ndarray, y: np.ndarray) -> BoundLogLinearInterpolator:
        if np.any(y <= 0):
            raise InvalidArgumentError("Log-linear interpolation requires positive y values")
        return BoundLogLinearInterpolator(x, y)


# ---------------------------------------------------------------------------
# Natural cubic spline
# ---------------------------------------------------------------------------

class BoundNaturalSplineInterpolator(BoundCurveInterpolator):
    """
    Natural cubic spline.

    On [x_i, x_{i+1}] with dx = x - x_i:
        S_i(x) = a_i + b_i*dx + c_i*dx^2 + d_i*dx^3

    The knot second derivatives M are linear in y (M = K y), and K is kept
    for closed-form parameter sensitivities.
    """

    def __init__(self, x_values: np.ndarray, y_values: np.ndarray):
        super().__init__(x_values, y_values)
        n = self.size
        h = np.diff(x_values)

        # Tridiagonal system A M = R y, natural ends M[0] = M[n-1] = 0
        A = np.zeros((n, n))
        R = np.zeros((n, n))
        A[0, 0] = 1.0
        A[n-1, n-1] = 1.0
        for i in range(1, n-1):
            A[i, i-1] = h[i-1]
            A[i, i] = 2 * (h[i-1] + h[i])
            A[i, i+1] = h[i]
            R[i, i-1] = 6.0 / h[i-1]
            R[i, i] = -6.0 / h[i-1] - 6.0 / h[i]
            R[i, i+1] = 6.0 / h[i]

        self.curvature_matrix = np.linalg.solve(A, R)
        self.second_derivatives = self.curvature_matrix @ y_values
        M = self.second_derivatives

        # Polynomial coefficients per interval, shape (n-1, 4) for [a, b, c, d]
        self.coefficients = np.zeros((n-1, 4))
        for i in range(n-1):
            self.coefficients[i, 0] = y_values[i]  # a
            self.coefficients[i, 1] = (y_values[i+1] - y_values[i]) / h[i] - h[i] * (M[i+1] + 2*M[i]) / 6  # b
            self.coefficients[i, 2] = M[i] / 2  # c
            self.coefficients[i, 3] = (M[i+1] - M[i]) / (6 * h[i])  # d

        for arr in (self.curvature_matrix, self.second_derivatives, self.coefficients):
            arr.setflags(write=False)

    def _interpolate(self, x: float, idx: int) -> float:
        dx = x - self.x_values[idx]
        a, b, c, d = self.coefficients[idx]
        return float(a + b*dx + c*dx**2 + d*dx**3)

    def _first_derivative(self, x: float, idx: int) -> float:
        dx = x - self.x_values[idx]
        _, b, c, d = self.coefficients[idx]
        return float(b + 2*c*dx + 3*d*dx**2)

    def second_derivative(self, x: float) -> float:
        """Second derivative of the spline at x."""
        x = self._check_domain(x)
        idx = self._interval(x)
        dx = x - self.x_values[idx]
        _, _, c, d = self.coefficients[idx]
        return float(2*c + 6*d*dx)

    def _parameter_sensitivity(self, x: float, idx: int) -> np.ndarray:
        h = self.x_values[idx + 1] - self.x_values[idx]
        a = (self.x_values[idx + 1] - x) / h
        b = 1.0 - a
        c = (a**3 - a) * h**2 / 6.0
        d = (b**3 - b) * h**2 / 6.0

        sens = c * self.curvature_matrix[idx] + d * self.curvature_matrix[idx + 1]
        sens[idx] += a
        sens[idx + 1] += b
        return sens


class NaturalSplineInterpolator(CurveInterpolator):
    """
    Natural cubic spline interpolation.

    Second derivative is zero at both end knots. Provides smooth first and
    second derivatives.
    """
    name = "NaturalSpline"
    min_knots = 3

    def _bind(self, x: np.ndarray, y: np.ndarray) -> BoundNaturalSplineInterpolator:
        return BoundNaturalSplineInterpolator(x, y)


# ---------------------------------------------------------------------------
# Product natural spline
# ---------------------------------------------------------------------------

class BoundProductNaturalSplineInterpolator(BoundCurveInterpolator):
    """
    Natural spline fitted in product space p = x*y.

    y(x)  = p(x) / x
    y'(x) = (p'(x) - y(x)) / x
    """

    def __init__(
        self,
        x_values: np.ndarray,
        y_values: np.ndarray,
        base: BoundCurveInterpolator,
        min_abs_x: float,
    ):
        super().__init__(x_values, y_values)
        self.base = base
        self.min_abs_x = min_abs_x

    def _check_magnitude(self, x: float) -> None:
        if abs(x) < self.min_abs_x:
            raise InvalidArgumentError(
                f"|x|={abs(x):.3e} is below the minimum magnitude {self.min_abs_x:.3e} "
                f"for product-space interpolation"
            )

    def interpolate(self, x: float) -> float:
        self._check_magnitude(float(x))
        return super().interpolate(x)

    def _interpolate(self, x: float, idx: int) -> float:
        return float(self.base.interpolate(x) / x)

    def first_derivative(self, x: float) -> float:
        self._check_magnitude(float(x))
        return super().first_derivative(x)

    def _first_derivative(self, x: float, idx: int) -> float:
        value = self.base.interpolate(x) / x
        return float((self.base.first_derivative(x) - value) / x)

    def _parameter_sensitivity(self, x: float, idx: int) -> np.ndarray:
        raise InvalidArgumentError(
            "Parameter sensitivity is not supported for product natural spline interpolation"
        )


class ProductNaturalSplineInterpolator(CurveInterpolator):
    """
    Product natural cubic spline interpolation.

    Maps each knot to (x, x*y), fits a natural cubic spline to those pairs
    and divides back by x on query. Valid on positive and negative domains.

    Attributes:
        min_abs_x: Queries with |x| below this raise InvalidArgumentError
    """
    name = "ProductNaturalSpline"
    min_knots = 3

    def __init__(
        self,
        min_abs_x: float = DEFAULT_PRODUCT_MIN_ABS_X,
        base: CurveInterpolator = None,
    ):
        if not min_abs_x > 0:
            raise InvalidArgumentError(f"min_abs_x must be positive, got {min_abs_x}")
        self.min_abs_x = min_abs_x
        self.base = base if base is not None else NaturalSplineInterpolator()

    def _bind(self, x: np.ndarray, y: np.ndarray) -> BoundProductNaturalSplineInterpolator:
        bound_base = self.base.bind(x, x * y)
        return BoundProductNaturalSplineInterpolator(x, y, bound_base, self.min_abs_x)

    def __repr__(self) -> str:
        return f"ProductNaturalSplineInterpolator(min_abs_x={self.min_abs_x:g})"


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class InterpolationMethod(Enum):
    """Closed set of interpolation variants."""
    LINEAR = "linear"
    LOG_LINEAR = "log_linear"
    NATURAL_SPLINE = "natural_spline"
    PRODUCT_NATURAL_SPLINE = "product_natural_spline"


_ALIASES = {
    "linear": InterpolationMethod.LINEAR,
    "lin": InterpolationMethod.LINEAR,
    "log_linear": InterpolationMethod.LOG_LINEAR,
    "loglinear": InterpolationMethod.LOG_LINEAR,
    "natural_spline": InterpolationMethod.NATURAL_SPLINE,
    "naturalspline": InterpolationMethod.NATURAL_SPLINE,
    "cubic_spline": InterpolationMethod.NATURAL_SPLINE,
    "spline": InterpolationMethod.NATURAL_SPLINE,
    "product_natural_spline": InterpolationMethod.PRODUCT_NATURAL_SPLINE,
    "productnaturalspline": InterpolationMethod.PRODUCT_NATURAL_SPLINE,
    "product_spline": InterpolationMethod.PRODUCT_NATURAL_SPLINE,
}


def create_interpolator(
    method: Union[str, InterpolationMethod],
    **kwargs,
) -> CurveInterpolator:
    """
    Factory function to create an interpolator by name.

    Args:
        method: InterpolationMethod or one of "linear", "log_linear",
            "natural_spline", "product_natural_spline"
        **kwargs: Passed to ProductNaturalSplineInterpolator (min_abs_x)

    Returns:
        CurveInterpolator instance

    Raises:
        InvalidArgumentError: Unknown method, or options given to a method
            that takes none
    """
    if not isinstance(method, InterpolationMethod):
        key = str(method).lower().replace("-", "_").replace(" ", "_")
        if key not in _ALIASES:
            raise InvalidArgumentError(f"Unknown interpolation method: {method}")
        method = _ALIASES[key]

    if kwargs and method != InterpolationMethod.PRODUCT_NATURAL_SPLINE:
        raise InvalidArgumentError(
            f"Interpolation method {method.value} takes no options, got {sorted(kwargs)}"
        )

    if method == InterpolationMethod.LINEAR:
        return LinearInterpolator()
    elif method == InterpolationMethod.LOG_LINEAR:
        return LogLinearInterpolator()
    elif method == InterpolationMethod.NATURAL_SPLINE:
        return NaturalSplineInterpolator()
    else:
        return ProductNaturalSplineInterpolator(**kwargs)


__all__ = [
    "BoundCurveInterpolator",
    "CurveInterpolator",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "NaturalSplineInterpolator",
    "ProductNaturalSplineInterpolator",
    "BoundLinearInterpolator",
    "BoundLogLinearInterpolator",
    "BoundNaturalSplineInterpolator",
    "BoundProductNaturalSplineInterpolator",
    "InterpolationMethod",
    "create_interpolator",
]
