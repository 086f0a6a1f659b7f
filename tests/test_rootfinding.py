"""
Unit tests for the inverse Jacobian initializer and the Broyden root finder.
"""

from concurrent.futures import ThreadPoolExecutor
import logging

import numpy as np
import pytest

from curvecal.config import RootFinderSettings
from curvecal.errors import InvalidArgumentError, NonConvergenceError, NumericalFailureError
from curvecal.math import (
    BroydenVectorRootFinder,
    InverseJacobianEstimateInitializer,
    LUDecomposition,
    RootFinderStatus,
    SVDecomposition,
    vector_function,
)


def _jacobian(x):
    return np.array([
        [x[0] * x[0], x[0] * x[1]],
        [x[0] - x[1], x[1] * x[1]],
    ])


J_FUNCTION = vector_function(lambda x: x, jacobian=_jacobian)
X = np.array([3.0, 4.0])


def dennis_schnabel(x):
    """F(x) = (x0 + x1 - 3, x0^2 + x1^2 - 9), roots (0, 3) and (3, 0)."""
    return np.array([x[0] + x[1] - 3.0, x[0] ** 2 + x[1] ** 2 - 9.0])


class TestInverseJacobianEstimateInitializer:
    """Tests for the inverse Jacobian initializer."""

    @pytest.fixture
    def estimate(self):
        return InverseJacobianEstimateInitializer(SVDecomposition())

    def test_null_decomposition(self):
        with pytest.raises(InvalidArgumentError):
            InverseJacobianEstimateInitializer(None)

    def test_null_function(self, estimate):
        with pytest.raises(InvalidArgumentError):
            estimate.initialized_matrix(None, X)

    def test_null_vector(self, estimate):
        with pytest.raises(InvalidArgumentError):
            estimate.initialized_matrix(J_FUNCTION, None)

    def test_inverse_times_jacobian_is_identity(self, estimate):
        m1 = estimate.initialized_matrix(J_FUNCTION, X)
        m3 = m1 @ _jacobian(X)
        np.testing.assert_allclose(m3, np.eye(2), atol=1e-6)

    def test_lu_decomposition(self):
        estimate = InverseJacobianEstimateInitializer(LUDecomposition())
        m1 = estimate.initialized_matrix(J_FUNCTION, X)
        np.testing.assert_allclose(m1 @ _jacobian(X), np.eye(2), atol=1e-6)

    def test_finite_difference_for_plain_callable(self, estimate):
        """Plain callables are differentiated numerically."""
        a = np.array([[2.0, 0.5, 0.0], [0.3, 1.5, 0.2], [0.0, 0.4, 3.0]])
        f = lambda x: a @ x + 0.1 * x ** 3
        x = np.array([0.5, -1.0, 2.0])
        jac = a + np.diag(0.3 * x ** 2)
        m = estimate.initialized_matrix(f, x)
        np.testing.assert_allclose(m @ jac, np.eye(3), atol=1e-6)

    def test_random_well_conditioned(self, estimate):
        """M @ J is the identity for random well-conditioned Jacobians."""
        rng = np.random.default_rng(42)
        for _ in range(25):
            n = int(rng.integers(2, 8))
            u, _ = np.linalg.qr(rng.normal(size=(n, n)))
            v, _ = np.linalg.qr(rng.normal(size=(n, n)))
            s = rng.uniform(0.5, 2.0, size=n)
            a = u @ np.diag(s) @ v.T
            fn = vector_function(lambda x, a=a: a @ x, jacobian=lambda x, a=a: a)
            m = estimate.initialized_matrix(fn, rng.normal(size=n))
            np.testing.assert_allclose(m @ a, np.eye(n), atol=1e-6)

    def test_singular_jacobian_raises(self, estimate):
        fn = vector_function(lambda x: x, jacobian=lambda x: np.array([[1.0, 2.0], [2.0, 4.0]]))
        with pytest.raises(NumericalFailureError):
            estimate.initialized_matrix(fn, X)

    def test_non_finite_jacobian_raises(self, estimate):
        """A bump leaving the function's domain is a numerical failure."""
        f = lambda x: np.array([np.sqrt(x[0]) - 0.5, x[1] - 1.0])
        with np.errstate(invalid="ignore"):
            with pytest.raises(NumericalFailureError) as exc_info:
                estimate.initialized_matrix(f, np.zeros(2))
        np.testing.assert_array_equal(exc_info.value.x, [0.0, 0.0])

    def test_non_square_jacobian_raises(self, estimate):
        f = lambda x: np.array([x[0], x[1], x[0] * x[1]])
        with pytest.raises(InvalidArgumentError):
            estimate.initialized_matrix(f, X)


class TestBroydenVectorRootFinder:
    """Tests for the Broyden root finder."""

    @pytest.fixture
    def finder(self):
        return BroydenVectorRootFinder(absolute_tolerance=1e-10, max_iterations=50)

    def test_linear_system(self, finder):
        """Linear systems converge in one step from the exact inverse."""
        a = np.array([[3.0, 1.0], [1.0, 2.0]])
        b = np.array([9.0, 8.0])
        result = finder.find_root(lambda x: a @ x - b, np.zeros(2))
        np.testing.assert_allclose(result.x, np.linalg.solve(a, b), atol=1e-10)
        assert result.converged
        assert result.iterations <= 2

    def test_nonlinear_system(self, finder):
        """Converges to the root in whose basin it starts."""
        result = finder.find_root(dennis_schnabel, [1.0, 5.0])
        np.testing.assert_allclose(result.x, [0.0, 3.0], atol=1e-8)
        assert result.residual_norm < 1e-10
        assert result.iterations < 20
        assert result.status == RootFinderStatus.CONVERGED

    def test_exponential_system(self, finder):
        """Converges on a system mixing polynomial and exponential terms."""
        f = lambda x: np.array([x[0] ** 2 + x[1] ** 2 - 4.0, np.exp(x[0]) + x[1] - 1.0])
        result = finder.find_root(f, [1.0, -1.7])
        assert np.linalg.norm(f(result.x)) < 1e-10
        assert result.x[0] > 0

    def test_already_at_root(self, finder):
        result = finder.find_root(dennis_schnabel, [0.0, 3.0])
        assert result.iterations == 0
        np.testing.assert_array_equal(result.x, [0.0, 3.0])

    def test_max_iterations(self):
        finder = BroydenVectorRootFinder(absolute_tolerance=1e-14, max_iterations=2)
        with pytest.raises(NonConvergenceError) as exc_info:
            finder.find_root(dennis_schnabel, [1.0, 5.0])
        err = exc_info.value
        assert err.iterations == 2
        assert err.x.shape == (2,)
        assert err.residual_norm > 0
        assert err.status == RootFinderStatus.FAILED_MAX_ITERATIONS

    def test_no_root_fails_explicitly(self, finder):
        """A function without a root never returns a silent result."""
        with pytest.raises((NonConvergenceError, NumericalFailureError)):
            finder.find_root(lambda x: x ** 2 + 1.0, [0.5])

    def test_singular_initial_jacobian(self, finder):
        f = lambda x: np.array([x[0] ** 2, x[1] ** 2])
        with pytest.raises(NumericalFailureError):
            finder.find_root(f, [0.0, 1.0])

    def test_non_finite_initial_jacobian(self, finder):
        f = lambda x: np.array([np.sqrt(x[0]) - 0.5, x[1] - 1.0])
        with np.errstate(invalid="ignore"):
            with pytest.raises(NumericalFailureError):
                finder.find_root(f, [0.0, 0.0])

    def test_stalled_update(self, finder):
        """A zero secant denominator fails instead of producing NaN."""
        fn = vector_function(lambda x: np.array([1.0]), jacobian=lambda x: np.array([[1.0]]))
        with pytest.raises(NumericalFailureError) as exc_info:
            finder.find_root(fn, [0.0])
        assert exc_info.value.x is not None
        assert exc_info.value.residual_norm == pytest.approx(1.0)
        assert exc_info.value.status == RootFinderStatus.FAILED_STALLED_UPDATE

    def test_non_finite_residual(self, finder):
        def f(x):
            if x[0] > 1.0:
                return np.array([np.nan])
            return x - 2.0

        fn = vector_function(f, jacobian=lambda x: np.array([[1.0]]))
        with pytest.raises(NumericalFailureError):
            finder.find_root(fn, [0.0])

    def test_dimension_mismatch(self, finder):
        with pytest.raises(InvalidArgumentError):
            finder.find_root(lambda x: np.array([x[0], x[1], 0.0]), [1.0, 2.0])

    def test_none_inputs(self, finder):
        with pytest.raises(InvalidArgumentError):
            finder.find_root(None, [1.0])
        with pytest.raises(InvalidArgumentError):
            finder.find_root(dennis_schnabel, None)

    def test_step_is_pure(self, finder):
        """step returns a new state and leaves its input untouched."""
        state = finder.initial_state(dennis_schnabel, [1.0, 5.0])
        x_before = state.x.copy()
        m_before = state.inverse_jacobian.copy()

        new_state = finder.step(dennis_schnabel, state)

        np.testing.assert_array_equal(state.x, x_before)
        np.testing.assert_array_equal(state.inverse_jacobian, m_before)
        assert state.iteration == 0
        assert new_state.iteration == 1
        assert not np.array_equal(new_state.inverse_jacobian, m_before)

    def test_explicit_inverse_jacobian(self, finder):
        """A supplied initial inverse skips the decomposition."""
        m0 = np.linalg.inv(np.array([[1.0, 1.0], [2.0, 10.0]]))
        state = finder.initial_state(dennis_schnabel, [1.0, 5.0], inverse_jacobian=m0)
        np.testing.assert_array_equal(state.inverse_jacobian, m0)
        with pytest.raises(InvalidArgumentError):
            finder.initial_state(dennis_schnabel, [1.0, 5.0], inverse_jacobian=np.eye(3))

    def test_max_step_caps_step(self):
        finder = BroydenVectorRootFinder(max_step=0.1)
        state = finder.initial_state(dennis_schnabel, [1.0, 5.0])
        new_state = finder.step(dennis_schnabel, state)
        assert np.linalg.norm(new_state.x - state.x) <= 0.1 + 1e-12

    def test_from_settings(self):
        settings = RootFinderSettings(absolute_tolerance=1e-12, max_iterations=40)
        finder = BroydenVectorRootFinder.from_settings(settings)
        assert finder.settings == settings
        result = finder.find_root(dennis_schnabel, [1.0, 5.0])
        assert result.residual_norm < 1e-12

    def test_lu_initializer(self):
        finder = BroydenVectorRootFinder(
            initializer=InverseJacobianEstimateInitializer(LUDecomposition())
        )
        result = finder.find_root(dennis_schnabel, [1.0, 5.0])
        np.testing.assert_allclose(result.x, [0.0, 3.0], atol=1e-8)

    def test_concurrent_runs(self, finder):
        """Independent runs on worker threads give the sequential answers."""
        a = np.array([[2.0, 0.3, 0.0], [0.3, 1.0, 0.1], [0.0, 0.1, 1.5]])
        targets = [np.array([1.0, 2.0, 3.0]) * k for k in range(1, 9)]

        def run(b):
            f = lambda x: a @ x + 0.05 * x ** 3 - b
            return finder.find_root(f, np.zeros(3)).x

        sequential = [run(b) for b in targets]
        with ThreadPoolExecutor(max_workers=4) as executor:
            parallel = list(executor.map(run, targets))
        for s, p in zip(sequential, parallel):
            np.testing.assert_allclose(s, p, rtol=0, atol=1e-12)

    def test_logs_convergence(self, finder, caplog):
        with caplog.at_level(logging.INFO, logger="curvecal"):
            finder.find_root(dennis_schnabel, [1.0, 5.0])
        assert "converged" in caplog.text
