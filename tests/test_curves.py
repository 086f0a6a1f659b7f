"""
Unit tests for curves module.
"""

import numpy as np
import pytest

from curvecal.curves import (
    CurveDefinition,
    CurveProvider,
    CurveProviderGenerator,
    InterpolatedCurve,
    LinearInterpolator,
    NaturalSplineInterpolator,
    ProductNaturalSplineInterpolator,
    ZeroRateCurve,
)
from curvecal.errors import InvalidArgumentError


NODE_TIMES = (0.25, 0.5, 1.0, 2.0, 5.0, 10.0)


class TestCurve:
    """Tests for ZeroRateCurve class."""

    @pytest.fixture
    def flat_curve(self):
        """Flat 5% continuously compounded curve."""
        return ZeroRateCurve("OIS", NODE_TIMES, [0.05] * len(NODE_TIMES), "linear")

    @pytest.fixture
    def sloped_curve(self):
        rates = [0.030, 0.032, 0.035, 0.038, 0.041, 0.043]
        return ZeroRateCurve("OIS", NODE_TIMES, rates, NaturalSplineInterpolator())

    def test_discount_factor_at_zero(self, flat_curve):
        """DF at t=0 should be 1."""
        assert flat_curve.discount_factor(0.0) == 1.0

    def test_discount_factor_flat(self, flat_curve):
        for t in (0.25, 0.75, 3.0, 10.0):
            assert abs(flat_curve.discount_factor(t) - np.exp(-0.05 * t)) < 1e-14

    def test_discount_factor_decreasing(self, sloped_curve):
        """DFs should decrease with maturity for positive rates."""
        times = np.linspace(0.25, 10.0, 40)
        dfs = [sloped_curve.discount_factor(t) for t in times]
        assert all(a > b for a, b in zip(dfs, dfs[1:]))

    def test_zero_rate_at_nodes(self, sloped_curve):
        assert sloped_curve.zero_rate(2.0) == 0.038

    def test_forward_rate(self, flat_curve):
        """Simple forward on a flat continuous curve."""
        fwd = flat_curve.forward_rate(1.0, 2.0)
        assert abs(fwd - (np.exp(0.05) - 1.0)) < 1e-12

    def test_forward_rate_from_today(self, flat_curve):
        fwd = flat_curve.forward_rate(0.0, 0.5)
        assert abs(fwd - (np.exp(0.025) - 1.0) / 0.5) < 1e-12

    def test_forward_rate_order(self, flat_curve):
        with pytest.raises(InvalidArgumentError):
            flat_curve.forward_rate(2.0, 1.0)

    def test_instantaneous_forward(self, flat_curve, sloped_curve):
        assert abs(flat_curve.instantaneous_forward(3.0) - 0.05) < 1e-12
        t = 3.0
        z = lambda s: sloped_curve.zero_rate(s) * s
        expected = (z(t + 1e-6) - z(t - 1e-6)) / 2e-6
        assert abs(sloped_curve.instantaneous_forward(t) - expected) < 1e-8

    def test_outside_nodes_raises(self, flat_curve):
        with pytest.raises(InvalidArgumentError):
            flat_curve.discount_factor(0.1)
        with pytest.raises(InvalidArgumentError):
            flat_curve.zero_rate(12.0)

    def test_with_parameters(self, flat_curve):
        shifted = flat_curve.with_parameters(np.full(len(NODE_TIMES), 0.06))
        assert isinstance(shifted, ZeroRateCurve)
        assert shifted is not flat_curve
        assert abs(shifted.zero_rate(3.0) - 0.06) < 1e-14
        assert abs(flat_curve.zero_rate(3.0) - 0.05) < 1e-14
        assert shifted.interpolator is flat_curve.interpolator

    def test_with_parameters_wrong_length(self, flat_curve):
        with pytest.raises(InvalidArgumentError):
            flat_curve.with_parameters([0.05, 0.05])

    def test_get_nodes(self, flat_curve):
        nodes = flat_curve.get_nodes()
        assert len(nodes) == len(NODE_TIMES)
        assert nodes[0] == (0.25, 0.05)

    def test_parameter_sensitivity(self, sloped_curve):
        sens = sloped_curve.parameter_sensitivity(3.0)
        assert sens.shape == (len(NODE_TIMES),)
        assert abs(sens.sum() - 1.0) < 1e-12

    def test_empty_name_raises(self):
        with pytest.raises(InvalidArgumentError):
            InterpolatedCurve("", NODE_TIMES, [0.05] * len(NODE_TIMES))


class TestCurveProvider:
    """Tests for CurveProvider."""

    @pytest.fixture
    def provider(self):
        ois = ZeroRateCurve("OIS", NODE_TIMES, [0.04] * len(NODE_TIMES), "linear")
        ibor = ZeroRateCurve("IBOR", NODE_TIMES, [0.045] * len(NODE_TIMES), "linear")
        return CurveProvider.of(ois, ibor)

    def test_lookup(self, provider):
        assert provider.curve("OIS").name == "OIS"
        assert "IBOR" in provider
        assert len(provider) == 2
        assert abs(provider.zero_rate("IBOR", 1.0) - 0.045) < 1e-14
        assert abs(provider.discount_factor("OIS", 1.0) - np.exp(-0.04)) < 1e-14
        assert provider.forward_rate("OIS", 1.0, 2.0) > 0

    def test_unknown_curve(self, provider):
        with pytest.raises(InvalidArgumentError, match="Unknown curve"):
            provider.curve("SOFR")

    def test_read_only(self, provider):
        with pytest.raises(TypeError):
            provider.curves["SOFR"] = provider.curve("OIS")

    def test_to_dict(self, provider):
        data = provider.to_dict()
        assert set(data) == {"OIS", "IBOR"}
        assert data["OIS"][0] == (0.25, 0.04)

    def test_empty_raises(self):
        with pytest.raises(InvalidArgumentError):
            CurveProvider({})


class TestCurveProviderGenerator:
    """Tests for CurveDefinition and CurveProviderGenerator."""

    @pytest.fixture
    def generator(self):
        return CurveProviderGenerator([
            CurveDefinition("OIS", (0.5, 1.0, 2.0), "natural_spline"),
            CurveDefinition("IBOR", [0.5, 1.0, 2.0, 5.0], ProductNaturalSplineInterpolator()),
        ])

    def test_parameter_count(self, generator):
        assert generator.parameter_count == 7

    def test_split(self, generator):
        parts = generator.split(np.arange(7.0))
        np.testing.assert_array_equal(parts["OIS"], [0.0, 1.0, 2.0])
        np.testing.assert_array_equal(parts["IBOR"], [3.0, 4.0, 5.0, 6.0])

    def test_generate(self, generator):
        x = np.array([0.03, 0.032, 0.034, 0.035, 0.036, 0.037, 0.038])
        provider = generator.generate(x)
        assert provider.names == ["OIS", "IBOR"]
        assert provider.zero_rate("OIS", 1.0) == 0.032
        assert provider.zero_rate("IBOR", 5.0) == 0.038
        assert isinstance(provider.curve("IBOR").interpolator, ProductNaturalSplineInterpolator)

    def test_generate_returns_fresh_provider(self, generator):
        x = np.full(7, 0.03)
        first = generator.generate(x)
        second = generator.generate(x + 0.01)
        assert first is not second
        assert first.zero_rate("OIS", 1.0) == 0.03
        assert abs(second.zero_rate("OIS", 1.0) - 0.04) < 1e-15

    def test_generate_does_not_alias_input(self, generator):
        x = np.full(7, 0.03)
        provider = generator.generate(x)
        x[:] = 0.5
        assert provider.zero_rate("OIS", 1.0) == 0.03

    def test_wrong_length(self, generator):
        with pytest.raises(InvalidArgumentError):
            generator.generate(np.zeros(6))

    def test_duplicate_names(self):
        with pytest.raises(InvalidArgumentError):
            CurveProviderGenerator([
                CurveDefinition("OIS", (0.5, 1.0)),
                CurveDefinition("OIS", (1.0, 2.0)),
            ])

    def test_no_definitions(self):
        with pytest.raises(InvalidArgumentError):
            CurveProviderGenerator([])

    def test_definition_validation(self):
        with pytest.raises(InvalidArgumentError):
            CurveDefinition("OIS", (1.0, 0.5, 2.0))
        with pytest.raises(InvalidArgumentError):
            CurveDefinition("", (0.5, 1.0))
        with pytest.raises(InvalidArgumentError):
            CurveDefinition("OIS", (0.5, 1.0), "akima")

    def test_definition_is_frozen(self):
        definition = CurveDefinition("OIS", [0.5, 1.0], LinearInterpolator())
        assert definition.node_times == (0.5, 1.0)
        assert definition.parameter_count == 2
        with pytest.raises(AttributeError):
            definition.name = "IBOR"
