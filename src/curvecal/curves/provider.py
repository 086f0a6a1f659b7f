"""
Curve provider and provider generator.

Provides a clean separation between curve construction and pricing:
- CurveProvider: immutable set of named curves that measures price against
- CurveDefinition: node times and interpolator for one curve to calibrate
- CurveProviderGenerator: turns a parameter vector into a fresh CurveProvider

The generator holds only immutable definitions, so ``generate`` can be called
concurrently with different parameter vectors.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence, Tuple, Union

import numpy as np

from ..errors import InvalidArgumentError
from ..math.functions import to_vector
from .curve import ZeroRateCurve
from .interpolation import CurveInterpolator, InterpolationMethod, create_interpolator


class CurveProvider:
    """
    Named curves available to pricing.

    Attributes:
        curves: Read-only mapping of curve name to curve
    """

    def __init__(self, curves: Mapping[str, ZeroRateCurve]):
        if not curves:
            raise InvalidArgumentError("CurveProvider needs at least one curve")
        self.curves = MappingProxyType(dict(curves))

    @classmethod
    def of(cls, *curves: ZeroRateCurve) -> "CurveProvider":
        """Create a provider keyed by each curve's name."""
        return cls({c.name: c for c in curves})

    def curve(self, name: str) -> ZeroRateCurve:
        """Get a curve by name."""
        try:
            return self.curves[name]
        except KeyError:
            raise InvalidArgumentError(
                f"Unknown curve '{name}', available: {sorted(self.curves)}"
            ) from None

    def discount_factor(self, name: str, t: float) -> float:
        """Get discount factor at time t from the named curve."""
        return self.curve(name).discount_factor(t)

    def forward_rate(self, name: str, t1: float, t2: float) -> float:
        """Get simple forward rate between t1 and t2 from the named curve."""
        return self.curve(name).forward_rate(t1, t2)

    def zero_rate(self, name: str, t: float) -> float:
        """Get zero rate at time t from the named curve."""
        return self.curve(name).zero_rate(t)

    @property
    def names(self) -> List[str]:
        return list(self.curves)

    def __contains__(self, name: str) -> bool:
        return name in self.curves

    def __len__(self) -> int:
        return len(self.curves)

    def to_dict(self) -> Dict:
        """Serialize node values to a dictionary."""
        return {name: curve.get_nodes() for name, curve in self.curves.items()}

    def __repr__(self) -> str:
        return f"CurveProvider(curves={self.names})"


@dataclass(frozen=True)
class CurveDefinition:
    """
    Definition of a curve whose node values are calibrated.

    Curves do not extrapolate: every time a trade depends on (deposit and
    FRA dates, swap coupon dates) must lie in [node_times[0], node_times[-1]]
    or be <= 0. Include a short-end node at or before the earliest such time.

    Attributes:
        name: Curve name
        node_times: Strictly increasing node times in years
        interpolator: Interpolation strategy or method name
    """
    name: str
    node_times: Tuple[float, ...]
    interpolator: Union[CurveInterpolator, InterpolationMethod, str] = InterpolationMethod.NATURAL_SPLINE
    _interpolator: CurveInterpolator = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.name:
            raise InvalidArgumentError("Curve definition needs a name")
        times = tuple(float(t) for t in to_vector(self.node_times, f"node_times of '{self.name}'"))
        if any(b <= a for a, b in zip(times, times[1:])):
            raise InvalidArgumentError(f"Node times of '{self.name}' must be strictly increasing")
        if self.interpolator is None:
            raise InvalidArgumentError("Interpolator must not be None")
        interp = self.interpolator
        if not isinstance(interp, CurveInterpolator):
            interp = create_interpolator(interp)
        object.__setattr__(self, "node_times", times)
        object.__setattr__(self, "_interpolator", interp)

    @property
    def parameter_count(self) -> int:
        return len(self.node_times)

    def curve(self, values: Sequence[float]) -> ZeroRateCurve:
        """Build the curve for the given node values."""
        return ZeroRateCurve(self.name, self.node_times, values, self._interpolator)


class CurveProviderGenerator:
    """
    Builds CurveProviders from parameter vectors.

    The parameter vector is split across the definitions in order: the first
    ``definitions[0].parameter_count`` values belong to the first curve, and
    so on.
    """

    def __init__(self, definitions: Sequence[CurveDefinition]):
        if not definitions:
            raise InvalidArgumentError("Generator needs at least one curve definition")
        names = [d.name for d in definitions]
        if len(set(names)) != len(names):
            raise InvalidArgumentError(f"Duplicate curve names: {names}")
        self.definitions: Tuple[CurveDefinition, ...] = tuple(definitions)

    @property
    def parameter_count(self) -> int:
        return sum(d.parameter_count for d in self.definitions)

    def split(self, parameters) -> Dict[str, np.ndarray]:
        """Split a parameter vector into per-curve node values."""
        x = to_vector(parameters, "parameters")
        if x.size != self.parameter_count:
            raise InvalidArgumentError(
                f"Expected {self.parameter_count} parameters, got {x.size}"
            )
        out = {}
        start = 0
        for d in self.definitions:
            out[d.name] = x[start:start + d.parameter_count]
            start += d.parameter_count
        return out

    def generate(self, parameters) -> CurveProvider:
        """
        Create a new provider with curves built from ``parameters``.

        Raises:
            InvalidArgumentError: If the vector length does not match
        """
        values = self.split(parameters)
        return CurveProvider({d.name: d.curve(values[d.name]) for d in self.definitions})

    def __repr__(self) -> str:
        return f"CurveProviderGenerator(curves={[d.name for d in self.definitions]})"


__all__ = [
    "CurveProvider",
    "CurveDefinition",
    "CurveProviderGenerator",
]
