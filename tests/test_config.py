"""
Unit tests for settings and the error hierarchy.
"""

import numpy as np
import pytest

from curvecal.config import DEFAULT_ABSOLUTE_TOLERANCE, DEFAULT_MAX_ITERATIONS, RootFinderSettings
from curvecal.errors import (
    CurveCalError,
    InvalidArgumentError,
    NonConvergenceError,
    NumericalFailureError,
)


class TestRootFinderSettings:
    """Tests for RootFinderSettings."""

    def test_defaults(self):
        settings = RootFinderSettings()
        assert settings.absolute_tolerance == DEFAULT_ABSOLUTE_TOLERANCE
        assert settings.max_iterations == DEFAULT_MAX_ITERATIONS
        assert settings.max_step is None

    def test_to_dict(self):
        data = RootFinderSettings(max_iterations=20, max_step=0.5).to_dict()
        assert data["max_iterations"] == 20
        assert data["max_step"] == 0.5

    @pytest.mark.parametrize("kwargs", [
        {"absolute_tolerance": 0.0},
        {"absolute_tolerance": -1e-8},
        {"max_iterations": 0},
        {"stall_tolerance": 0.0},
        {"max_step": -1.0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(InvalidArgumentError):
            RootFinderSettings(**kwargs)


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        assert issubclass(InvalidArgumentError, CurveCalError)
        assert issubclass(InvalidArgumentError, ValueError)
        assert issubclass(NumericalFailureError, ArithmeticError)
        assert issubclass(NonConvergenceError, RuntimeError)

    def test_numerical_failure_payload(self):
        err = NumericalFailureError("stalled", x=[1.0, 2.0], residual_norm=0.5)
        np.testing.assert_array_equal(err.x, [1.0, 2.0])
        assert "residual norm" in str(err)

    def test_numerical_failure_without_payload(self):
        err = NumericalFailureError("singular")
        assert err.x is None
        assert str(err) == "singular"

    def test_non_convergence_payload(self):
        err = NonConvergenceError("no root", x=np.array([0.1]), residual_norm=1e-3, iterations=7)
        assert err.iterations == 7
        assert "after 7 iterations" in str(err)
