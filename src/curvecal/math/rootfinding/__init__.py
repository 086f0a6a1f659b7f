"""
Root finding package - quasi-Newton solvers for vector functions.

Provides:
- InverseJacobianEstimateInitializer: decomposes J(x0) and inverts it
- BroydenVectorRootFinder: secant-updated Newton iteration
"""

from .initialization import InverseJacobianEstimateInitializer
from .broyden import (
    BroydenState,
    BroydenVectorRootFinder,
    RootFinderResult,
    RootFinderStatus,
)

__all__ = [
    "InverseJacobianEstimateInitializer",
    "BroydenState",
    "BroydenVectorRootFinder",
    "RootFinderResult",
    "RootFinderStatus",
]
