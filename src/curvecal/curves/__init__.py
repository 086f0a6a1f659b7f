"""
Curves package - interpolated curves and curve providers.

Provides:
- Interpolators bound to knot sets (linear, log-linear, natural spline,
  product natural spline)
- InterpolatedCurve / ZeroRateCurve: curves built on bound interpolators
- CurveProvider / CurveProviderGenerator: parameter vector to named curves
"""

from .interpolation import (
    BoundCurveInterpolator,
    CurveInterpolator,
    LinearInterpolator,
    LogLinearInterpolator,
    NaturalSplineInterpolator,
    ProductNaturalSplineInterpolator,
    InterpolationMethod,
    create_interpolator,
)
from .curve import InterpolatedCurve, ZeroRateCurve
from .provider import CurveProvider, CurveDefinition, CurveProviderGenerator

__all__ = [
    "BoundCurveInterpolator",
    "CurveInterpolator",
    "LinearInterpolator",
    "LogLinearInterpolator",
    "NaturalSplineInterpolator",
    "ProductNaturalSplineInterpolator",
    "InterpolationMethod",
    "create_interpolator",
    "InterpolatedCurve",
    "ZeroRateCurve",
    "CurveProvider",
    "CurveDefinition",
    "CurveProviderGenerator",
]
