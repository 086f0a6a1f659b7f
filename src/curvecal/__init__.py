"""
curvecal: Curve calibration by quasi-Newton root finding

A library for:
- Interpolating curves through knot sets, including product-space splines
- Solving vector root-finding problems with Broyden updates seeded by a
  decomposed Jacobian
- Calibrating curve parameters so that trades reprice to market quotes

Scope: single-currency curves; trades expressed in year fractions.
"""

__version__ = "0.1.0"

# Errors and settings
from .errors import (
    CurveCalError,
    InvalidArgumentError,
    NumericalFailureError,
    NonConvergenceError,
)
from .config import RootFinderSettings

# Math
from .math import (
    SVDecomposition,
    LUDecomposition,
    create_decomposition,
    VectorFunction,
    vector_function,
    InverseJacobianEstimateInitializer,
    BroydenVectorRootFinder,
    RootFinderResult,
)

# Curves
from .curves import (
    LinearInterpolator,
    LogLinearInterpolator,
    NaturalSplineInterpolator,
    ProductNaturalSplineInterpolator,
    InterpolationMethod,
    create_interpolator,
    InterpolatedCurve,
    ZeroRateCurve,
    CurveProvider,
    CurveDefinition,
    CurveProviderGenerator,
)

# Calibration
from .calibration import (
    DepositTrade,
    FraTrade,
    SwapTrade,
    CalibrationMeasures,
    CalibrationValue,
    CalibrationJob,
    CalibrationResult,
    CurveCalibrator,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "CurveCalError",
    "InvalidArgumentError",
    "NumericalFailureError",
    "NonConvergenceError",
    # Settings
    "RootFinderSettings",
    # Math
    "SVDecomposition",
    "LUDecomposition",
    "create_decomposition",
    "VectorFunction",
    "vector_function",
    "InverseJacobianEstimateInitializer",
    "BroydenVectorRootFinder",
    "RootFinderResult",
    # Curves
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
    # Calibration
    "DepositTrade",
    "FraTrade",
    "SwapTrade",
    "CalibrationMeasures",
    "CalibrationValue",
    "CalibrationJob",
    "CalibrationResult",
    "CurveCalibrator",
]
