"""
Curve representation on top of bound interpolators.

The curve classes provide:
- InterpolatedCurve: y(t) through a knot set, with derivative and sensitivity
- ZeroRateCurve: y values are continuously compounded zero rates, adding
  discount factors and forward rates

Curves are immutable. ``with_parameters`` returns a new curve with the same
node times and interpolator, which is how calibration turns a parameter
vector into a curve shape. Times are year fractions from the valuation date.
"""

from typing import Sequence, Union

import numpy as np

from ..errors import InvalidArgumentError
from .interpolation import CurveInterpolator, InterpolationMethod, create_interpolator


class InterpolatedCurve:
    """
    Curve defined by knots and an interpolator.

    Attributes:
        name: Curve name, used as the key in a CurveProvider
        interpolator: Interpolation strategy
    """

    def __init__(
        self,
        name: str,
        x_values: Sequence[float],
        y_values: Sequence[float],
        interpolator: Union[CurveInterpolator, InterpolationMethod, str] = InterpolationMethod.NATURAL_SPLINE,
    ):
        if not name:
            raise InvalidArgumentError("Curve name must not be empty")
        if interpolator is None:
            raise InvalidArgumentError("Interpolator must not be None")
        if not isinstance(interpolator, CurveInterpolator):
            interpolator = create_interpolator(interpolator)

        self.name = name
        self.interpolator = interpolator
        self._bound = interpolator.bind(x_values, y_values)

    @property
    def x_values(self) -> np.ndarray:
        return self._bound.x_values

    @property
    def y_values(self) -> np.ndarray:
        return self._bound.y_values

    @property
    def parameter_count(self) -> int:
        """Number of curve parameters (one per node)."""
        return self._bound.size

    def y_value(self, t: float) -> float:
        """Interpolated curve value at t."""
        return self._bound.interpolate(t)

    def first_derivative(self, t: float) -> float:
        """dy/dt at t."""
        return self._bound.first_derivative(t)

    def parameter_sensitivity(self, t: float) -> np.ndarray:
        """Sensitivity of y_value(t) to each node value."""
        return self._bound.parameter_sensitivity(t)

    def with_parameters(self, values: Sequence[float]) -> "InterpolatedCurve":
        """
        New curve with the same nodes and interpolator and new y values.

        Args:
            values: Replacement y values, one per node
        """
        values = np.asarray(values, dtype=np.float64)
        if values.size != self.parameter_count:
            raise InvalidArgumentError(
                f"Curve '{self.name}' has {self.parameter_count} parameters, got {values.size}"
            )
        return type(self)(self.name, self.x_values, values, self.interpolator)

    def get_nodes(self) -> list:
        """
        Get all curve nodes.

        Returns:
            List of (time, value) tuples
        """
        return [(float(t), float(v)) for t, v in zip(self.x_values, self.y_values)]

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(name={self.name!r}, nodes={self.parameter_count}, "
                f"interpolator={self.interpolator})")


class ZeroRateCurve(InterpolatedCurve):
    """
    Discounting curve interpolated on continuously compounded zero rates.

    Conventions:
        - Zero rates are continuously compounded
        - Discount factor at t <= 0 is 1.0
        - Forward rates are simply compounded
    """

    def zero_rate(self, t: float) -> float:
        """Continuously compounded zero rate z(t)."""
        return self.y_value(t)

    def discount_factor(self, t: float) -> float:
        """
        Discount factor P(0, t) = exp(-z(t) * t).

        Args:
            t: Year fraction from valuation date

        Raises:
            InvalidArgumentError: If 0 < t is outside the node range
        """
        if t <= 0:
            return 1.0
        return float(np.exp(-self.zero_rate(t) * t))

    def forward_rate(self, t1: float, t2: float) -> float:
        """
        Simply compounded forward rate between t1 and t2.

        f(t1, t2) = (P(t1) / P(t2) - 1) / (t2 - t1)
        """
        if t2 <= t1:
            raise InvalidArgumentError("t2 must be greater than t1")
        df1 = self.discount_factor(t1)
        df2 = self.discount_factor(t2)
        return (df1 / df2 - 1.0) / (t2 - t1)

    def instantaneous_forward(self, t: float) -> float:
        """
        Instantaneous forward rate f(t) = z(t) + t * dz/dt.
        """
        return self.zero_rate(t) + t * self.first_derivative(t)


__all__ = [
    "InterpolatedCurve",
    "ZeroRateCurve",
]
