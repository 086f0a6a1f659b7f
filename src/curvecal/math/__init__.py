"""
Math package - numerical building blocks for calibration.

Provides:
- Decompositions (SVD, LU) with conditioning checks
- Vector functions and finite-difference differentiation
- Quasi-Newton vector root finding
"""

from .decomposition import (
    Decomposition,
    DecompositionMethod,
    DecompositionResult,
    SVDecomposition,
    LUDecomposition,
    create_decomposition,
)
from .differentiation import FiniteDifferenceType, differentiate, finite_difference_jacobian
from .functions import VectorFunction, CallableVectorFunction, vector_function, to_vector
from .rootfinding import (
    InverseJacobianEstimateInitializer,
    BroydenState,
    BroydenVectorRootFinder,
    RootFinderResult,
    RootFinderStatus,
)

__all__ = [
    "Decomposition",
    "DecompositionMethod",
    "DecompositionResult",
    "SVDecomposition",
    "LUDecomposition",
    "create_decomposition",
    "FiniteDifferenceType",
    "differentiate",
    "finite_difference_jacobian",
    "VectorFunction",
    "CallableVectorFunction",
    "vector_function",
    "to_vector",
    "InverseJacobianEstimateInitializer",
    "BroydenState",
    "BroydenVectorRootFinder",
    "RootFinderResult",
    "RootFinderStatus",
]
